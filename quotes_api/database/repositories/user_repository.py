"""
User Repository

Lookup by Firebase subject, favorites and the bounded recent-view history.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.database.models.favorite import Favorite
from quotes_api.database.models.quote_view import MAX_VIEW_HISTORY, QuoteView
from quotes_api.database.models.user import User
from quotes_api.database.repositories.repository import BULK_OPTIONS, BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_firebase_uid(self, firebase_uid: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.firebase_uid == firebase_uid))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def list_users(
        self,
        offset: int,
        limit: int,
        search: Optional[str] = None,
    ) -> Tuple[List[User], int]:
        query = select(User).order_by(User.created_at.desc(), User.id.desc())
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(User.email.ilike(pattern), User.display_name.ilike(pattern)))
        return await self.paginate(query, offset, limit)

    async def count_since(self, column, since: datetime) -> int:
        return await self.session.scalar(select(func.count()).select_from(User).where(column >= since)) or 0

    # ── Favorites ──

    async def favorite_ids(self, user_id: int) -> List[int]:
        result = await self.session.execute(
            select(Favorite.quote_id).where(Favorite.user_id == user_id).order_by(Favorite.id)
        )
        return list(result.scalars().all())

    async def add_favorite(self, user_id: int, quote_id: int) -> Favorite:
        favorite = Favorite(user_id=user_id, quote_id=quote_id)
        self.session.add(favorite)
        await self.session.flush()
        return favorite

    async def remove_favorite(self, user_id: int, quote_id: int) -> bool:
        result = await self.session.execute(
            delete(Favorite).where(Favorite.user_id == user_id, Favorite.quote_id == quote_id),
            execution_options=BULK_OPTIONS,
        )
        return result.rowcount > 0

    # ── View history ──

    async def record_view(self, user_id: int, quote_id: int) -> None:
        """Append a view and evict everything older than the newest MAX_VIEW_HISTORY."""
        self.session.add(QuoteView(user_id=user_id, quote_id=quote_id))
        await self.session.flush()
        keep = (
            select(QuoteView.id)
            .where(QuoteView.user_id == user_id)
            .order_by(QuoteView.id.desc())
            .limit(MAX_VIEW_HISTORY)
        )
        await self.session.execute(
            delete(QuoteView).where(
                QuoteView.user_id == user_id,
                QuoteView.id.not_in(keep.scalar_subquery()),
            ),
            execution_options=BULK_OPTIONS,
        )

    async def recent_views(self, user_id: int) -> List[QuoteView]:
        result = await self.session.execute(
            select(QuoteView).where(QuoteView.user_id == user_id).order_by(QuoteView.id.desc())
        )
        return list(result.scalars().all())

    async def delete(self, instance: User) -> None:
        await self.session.execute(
            delete(Favorite).where(Favorite.user_id == instance.id),
            execution_options=BULK_OPTIONS,
        )
        await self.session.execute(
            delete(QuoteView).where(QuoteView.user_id == instance.id),
            execution_options=BULK_OPTIONS,
        )
        await super().delete(instance)
