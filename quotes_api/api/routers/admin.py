"""
Admin Router - management endpoints.

All endpoints require get_current_admin (role=admin).
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from quotes_api.api.schemas import (
    ERROR_RESPONSES,
    ActivityListResponse,
    ActivityResponse,
    AdminUserUpdate,
    MessageResponse,
    PaginationMeta,
    QuoteExportResponse,
    QuoteImportRequest,
    QuoteImportResponse,
    QuoteResponse,
    StatsResponse,
    UserDetailResponse,
    UserEnvelope,
    UserListResponse,
    UserProfileResponse,
)
from quotes_api.core.auth import get_current_admin
from quotes_api.core.config import Settings, get_settings
from quotes_api.core.rate_limit import enforce_rate_limit
from quotes_api.core.services.activity_service import ActivityService
from quotes_api.core.services.admin_service import AdminService
from quotes_api.core.services.user_service import UserService
from quotes_api.database.models.user import User
from quotes_api.utils.enums import ActivityAction

logger = logging.getLogger(__name__)

router = APIRouter(
    dependencies=[Depends(enforce_rate_limit), Depends(get_current_admin)],
    responses=ERROR_RESPONSES,
)


# ── Users ──

@router.get("/users", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=255),
    service: UserService = Depends(UserService.instance),
):
    users, total = await service.list_users(page, limit, search)
    return UserListResponse(
        users=[UserProfileResponse.model_validate(u) for u in users],
        pagination=PaginationMeta.build(total, page, limit),
    )


@router.get("/users/{user_id}", response_model=UserDetailResponse)
async def get_user(
    user_id: int,
    service: UserService = Depends(UserService.instance),
    activity: ActivityService = Depends(ActivityService.instance),
):
    user = await service.require(user_id)
    recent = await activity.recent_for_user(user.id, 10)
    return UserDetailResponse(
        user=UserProfileResponse.model_validate(user),
        recent_activity=[ActivityResponse.model_validate(a) for a in recent],
    )


@router.put("/users/{user_id}", response_model=UserEnvelope)
async def update_user(
    user_id: int,
    data: AdminUserUpdate,
    request: Request,
    admin: User = Depends(get_current_admin),
    service: UserService = Depends(UserService.instance),
):
    user = await service.update_user(user_id, data, admin, request)
    return UserEnvelope(user=UserProfileResponse.model_validate(user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    request: Request,
    admin: User = Depends(get_current_admin),
    settings: Settings = Depends(get_settings),
    service: UserService = Depends(UserService.instance),
):
    await service.delete_user(user_id, admin, settings.user_delete_policy, request)
    return MessageResponse(message="User deleted successfully")


# ── Dashboard ──

@router.get("/stats", response_model=StatsResponse)
async def get_stats(service: AdminService = Depends(AdminService.instance)):
    return StatsResponse(stats=await service.system_stats())


@router.get("/activity", response_model=ActivityListResponse)
async def list_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: Optional[int] = Query(None),
    action: Optional[ActivityAction] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    activity: ActivityService = Depends(ActivityService.instance),
):
    items, total = await activity.list_activity(
        page, limit, user_id=user_id, action=action, start=start_date, end=end_date
    )
    return ActivityListResponse(
        activities=[ActivityResponse.model_validate(a) for a in items],
        pagination=PaginationMeta.build(total, page, limit),
    )


# ── Quote import / export ──

@router.post("/quotes/import", response_model=QuoteImportResponse)
async def import_quotes(
    payload: QuoteImportRequest,
    request: Request,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(AdminService.instance),
):
    results = await service.import_quotes(payload.quotes, admin, request)
    return QuoteImportResponse(results=results)


@router.get("/quotes/export", response_model=QuoteExportResponse)
async def export_quotes(
    request: Request,
    admin: User = Depends(get_current_admin),
    service: AdminService = Depends(AdminService.instance),
):
    quotes = await service.export_quotes(admin, request)
    return QuoteExportResponse(quotes=[QuoteResponse.model_validate(q) for q in quotes], count=len(quotes))
