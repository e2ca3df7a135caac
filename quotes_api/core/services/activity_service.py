"""Activity logging and listing."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.core.middleware import client_ip
from quotes_api.database.models.user_activity import UserActivity
from quotes_api.database.repositories.activity_repository import ActivityRepository
from quotes_api.database.session import get_db
from quotes_api.utils.enums import ActivityAction


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC; aware ones are converted."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ActivityService:
    def __init__(self, session: AsyncSession):
        self.repo = ActivityRepository(session)

    @staticmethod
    def instance(session: AsyncSession = Depends(get_db)) -> "ActivityService":
        return ActivityService(session)

    async def log(
        self,
        user_id: int,
        action: ActivityAction,
        details: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
    ) -> UserActivity:
        ip = user_agent = None
        if request is not None:
            ip = client_ip(request)
            user_agent = request.headers.get("user-agent", "unknown")
        return await self.repo.log(user_id, action, details, ip=ip, user_agent=user_agent)

    async def list_activity(
        self,
        page: int,
        limit: int,
        user_id: Optional[int] = None,
        action: Optional[ActivityAction] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Tuple[List[UserActivity], int]:
        return await self.repo.list_activity(
            offset=(page - 1) * limit,
            limit=limit,
            user_id=user_id,
            action=action,
            start=as_utc(start),
            end=as_utc(end),
        )

    async def recent_for_user(self, user_id: int, limit: int = 10) -> List[UserActivity]:
        return await self.repo.recent_for_user(user_id, limit)
