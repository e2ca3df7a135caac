"""Activity log access. Insert and read only, plus the purge used on user deletion."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.database.models.user_activity import UserActivity
from quotes_api.database.repositories.repository import BULK_OPTIONS, BaseRepository
from quotes_api.utils.enums import ActivityAction


class ActivityRepository(BaseRepository[UserActivity]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, UserActivity)

    async def log(
        self,
        user_id: int,
        action: ActivityAction,
        details: Optional[Dict[str, Any]] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> UserActivity:
        return await self.create(
            user_id=user_id,
            action=action,
            details=details or {},
            ip=ip,
            user_agent=user_agent,
        )

    async def list_activity(
        self,
        offset: int,
        limit: int,
        user_id: Optional[int] = None,
        action: Optional[ActivityAction] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Tuple[List[UserActivity], int]:
        query = select(UserActivity).order_by(UserActivity.timestamp.desc(), UserActivity.id.desc())
        if user_id is not None:
            query = query.where(UserActivity.user_id == user_id)
        if action is not None:
            query = query.where(UserActivity.action == action)
        if start is not None:
            query = query.where(UserActivity.timestamp >= start)
        if end is not None:
            query = query.where(UserActivity.timestamp <= end)
        return await self.paginate(query, offset, limit)

    async def recent_for_user(self, user_id: int, limit: int = 10) -> List[UserActivity]:
        items, _ = await self.list_activity(0, limit, user_id=user_id)
        return items

    async def count_since(self, action: ActivityAction, since: datetime) -> int:
        return await self.session.scalar(
            select(func.count())
            .select_from(UserActivity)
            .where(UserActivity.action == action, UserActivity.timestamp >= since)
        ) or 0

    async def purge_user(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(UserActivity).where(UserActivity.user_id == user_id),
            execution_options=BULK_OPTIONS,
        )
        return result.rowcount

    async def update(self, instance, **kwargs):
        raise NotImplementedError("Activity records are append-only")

    async def delete(self, instance):
        raise NotImplementedError("Activity records are append-only")
