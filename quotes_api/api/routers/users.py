"""
Users Router - self-service endpoints for the authenticated user.

Endpoints:
- GET/PUT    /api/users/profile
- GET        /api/users/activity
- GET        /api/users/favorites
- POST/DELETE /api/users/favorites/{quote_id}
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from quotes_api.api.schemas import (
    ERROR_RESPONSES,
    AccountEnvelope,
    ActivityListResponse,
    ActivityResponse,
    FavoritesResponse,
    FavoriteToggleResponse,
    PaginationMeta,
    ProfileUpdate,
    QuoteResponse,
)
from quotes_api.core.auth import get_current_user
from quotes_api.core.rate_limit import enforce_rate_limit
from quotes_api.core.services.activity_service import ActivityService
from quotes_api.core.services.user_service import FavoriteChange, UserService
from quotes_api.database.models.user import User
from quotes_api.utils.enums import ActivityAction

router = APIRouter(dependencies=[Depends(enforce_rate_limit)], responses=ERROR_RESPONSES)


def _toggle(change: FavoriteChange) -> FavoriteToggleResponse:
    return FavoriteToggleResponse(message=change.message, changed=change.changed, favorites=change.favorites)


@router.get("/profile", response_model=AccountEnvelope)
async def get_profile(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(UserService.instance),
):
    return AccountEnvelope(user=await service.account(current_user))


@router.put("/profile", response_model=AccountEnvelope)
async def update_profile(
    data: ProfileUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(UserService.instance),
):
    user = await service.update_profile(current_user, data, request)
    return AccountEnvelope(user=await service.account(user))


@router.get("/activity", response_model=ActivityListResponse)
async def get_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    action: Optional[ActivityAction] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_user),
    activity: ActivityService = Depends(ActivityService.instance),
):
    items, total = await activity.list_activity(
        page, limit, user_id=current_user.id, action=action, start=start_date, end=end_date
    )
    return ActivityListResponse(
        activities=[ActivityResponse.model_validate(a) for a in items],
        pagination=PaginationMeta.build(total, page, limit),
    )


@router.get("/favorites", response_model=FavoritesResponse)
async def get_favorites(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(UserService.instance),
):
    quotes = await service.list_favorites(current_user)
    return FavoritesResponse(favorites=[QuoteResponse.model_validate(q) for q in quotes])


@router.post("/favorites/{quote_id}", response_model=FavoriteToggleResponse)
async def add_favorite(
    quote_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(UserService.instance),
):
    return _toggle(await service.add_favorite(current_user, quote_id, request))


@router.delete("/favorites/{quote_id}", response_model=FavoriteToggleResponse)
async def remove_favorite(
    quote_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(UserService.instance),
):
    return _toggle(await service.remove_favorite(current_user, quote_id, request))
