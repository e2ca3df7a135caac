import math
from typing import Any, Dict, Optional

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 0)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    error: ErrorBody


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    status: {"model": ErrorResponse}
    for status in (400, 401, 403, 404, 409, 429)
}
