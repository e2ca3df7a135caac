"""
Quotes Router.

Public:
- GET /api/quotes/random, /api/quotes/{id}, /api/quotes/tag/{tag}, /api/quotes
Admin:
- POST /api/quotes, PUT /api/quotes/{id}, DELETE /api/quotes/{id}
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from quotes_api.api.schemas import (
    ERROR_RESPONSES,
    MessageResponse,
    PaginationMeta,
    QuoteCreate,
    QuoteEnvelope,
    QuoteListResponse,
    QuoteResponse,
    QuoteUpdate,
)
from quotes_api.core.auth import get_current_admin, get_optional_user
from quotes_api.core.rate_limit import enforce_rate_limit
from quotes_api.core.services.quote_service import QuoteService
from quotes_api.database.models.user import User

router = APIRouter(dependencies=[Depends(enforce_rate_limit)], responses=ERROR_RESPONSES)


def _page(quotes, total: int, page: int, limit: int) -> QuoteListResponse:
    return QuoteListResponse(
        quotes=[QuoteResponse.model_validate(q) for q in quotes],
        pagination=PaginationMeta.build(total, page, limit),
    )


@router.get("/random", response_model=QuoteEnvelope)
async def get_random_quote(
    request: Request,
    viewer: Optional[User] = Depends(get_optional_user),
    service: QuoteService = Depends(QuoteService.instance),
):
    quote = await service.get_random(viewer, request)
    return QuoteEnvelope(quote=QuoteResponse.model_validate(quote))


@router.get("/tag/{tag}", response_model=QuoteListResponse)
async def get_quotes_by_tag(
    tag: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: QuoteService = Depends(QuoteService.instance),
):
    quotes, total = await service.list_by_tag(tag, page, limit)
    return _page(quotes, total, page, limit)


@router.get("/{quote_id}", response_model=QuoteEnvelope)
async def get_quote(
    quote_id: int,
    request: Request,
    viewer: Optional[User] = Depends(get_optional_user),
    service: QuoteService = Depends(QuoteService.instance),
):
    quote = await service.get_quote(quote_id, viewer, request)
    return QuoteEnvelope(quote=QuoteResponse.model_validate(quote))


@router.get("", response_model=QuoteListResponse)
async def list_quotes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=200),
    service: QuoteService = Depends(QuoteService.instance),
):
    quotes, total = await service.list_quotes(page, limit, search)
    return _page(quotes, total, page, limit)


@router.post("", response_model=QuoteEnvelope, status_code=201)
async def create_quote(
    data: QuoteCreate,
    request: Request,
    admin: User = Depends(get_current_admin),
    service: QuoteService = Depends(QuoteService.instance),
):
    quote = await service.create_quote(data, admin, request)
    return QuoteEnvelope(quote=QuoteResponse.model_validate(quote))


@router.put("/{quote_id}", response_model=QuoteEnvelope)
async def update_quote(
    quote_id: int,
    data: QuoteUpdate,
    request: Request,
    admin: User = Depends(get_current_admin),
    service: QuoteService = Depends(QuoteService.instance),
):
    """Partial update: only fields present in the body change."""
    quote = await service.update_quote(quote_id, data, admin, request)
    return QuoteEnvelope(quote=QuoteResponse.model_validate(quote))


@router.delete("/{quote_id}", response_model=MessageResponse)
async def delete_quote(
    quote_id: int,
    request: Request,
    admin: User = Depends(get_current_admin),
    service: QuoteService = Depends(QuoteService.instance),
):
    await service.delete_quote(quote_id, admin, request)
    return MessageResponse(message="Quote deleted successfully")
