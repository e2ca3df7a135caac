from typing import Any, List

from pydantic import BaseModel, Field

from quotes_api.api.schemas.quote import QuoteResponse, QuoteSummary


class PeriodCounts(BaseModel):
    daily: int
    weekly: int
    monthly: int


class SystemStats(BaseModel):
    total_users: int
    active_users: PeriodCounts
    total_quotes: int
    quotes_served: PeriodCounts
    top_quotes: List[QuoteSummary]
    registrations: PeriodCounts


class StatsResponse(BaseModel):
    stats: SystemStats


class QuoteImportRequest(BaseModel):
    # Items are validated one by one so a bad entry does not reject the batch
    quotes: List[Any] = Field(..., min_length=1)


class ImportFailure(BaseModel):
    quote: Any
    error: str


class ImportResults(BaseModel):
    total: int
    imported: int
    errors: List[ImportFailure]


class QuoteImportResponse(BaseModel):
    success: bool = True
    results: ImportResults


class QuoteExportResponse(BaseModel):
    quotes: List[QuoteResponse]
    count: int
