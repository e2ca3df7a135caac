from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quotes_api.api.schemas.common import PaginationMeta
from quotes_api.database.models.quote import MAX_TAG_LENGTH

Tag = Annotated[str, Field(max_length=MAX_TAG_LENGTH)]


class QuoteBase(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=100)
    source: Optional[str] = Field(None, max_length=200)
    tags: List[Tag] = Field(default_factory=list)
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)


class QuoteCreate(QuoteBase):
    pass


class QuoteUpdate(BaseModel):
    text: Optional[str] = Field(None, min_length=1, max_length=500)
    author: Optional[str] = Field(None, min_length=1, max_length=100)
    source: Optional[str] = Field(None, max_length=200)
    tags: Optional[List[Tag]] = None
    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("text", "author")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class QuoteResponse(QuoteBase):
    id: int
    views: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class QuoteEnvelope(BaseModel):
    quote: QuoteResponse


class QuoteListResponse(BaseModel):
    quotes: List[QuoteResponse]
    pagination: PaginationMeta


class QuoteSummary(BaseModel):
    id: int
    text: str
    author: str
    views: int
    model_config = ConfigDict(from_attributes=True)
