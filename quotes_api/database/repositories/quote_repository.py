"""Quote queries: random pick, tag filter, text search, atomic view counter."""

import random
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.database.models.favorite import Favorite
from quotes_api.database.models.quote import Quote, QuoteTag
from quotes_api.database.models.quote_view import QuoteView
from quotes_api.database.repositories.repository import BULK_OPTIONS, BaseRepository


class QuoteRepository(BaseRepository[Quote]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, Quote)

    def _newest_first(self):
        return select(Quote).order_by(Quote.created_at.desc(), Quote.id.desc())

    async def get_random(self) -> Optional[Quote]:
        total = await self.count()
        if total == 0:
            return None
        result = await self.session.execute(
            select(Quote).order_by(Quote.id).offset(random.randrange(total)).limit(1)
        )
        return result.scalar_one_or_none()

    async def increment_views(self, quote: Quote) -> Quote:
        """views = views + 1 in SQL so concurrent readers never lose an increment."""
        await self.session.execute(
            update(Quote).where(Quote.id == quote.id).values(views=Quote.views + 1),
            execution_options=BULK_OPTIONS,
        )
        await self.session.refresh(quote, attribute_names=["views"])
        return quote

    async def list_quotes(
        self,
        offset: int,
        limit: int,
        search: Optional[str] = None,
    ) -> Tuple[List[Quote], int]:
        query = self._newest_first()
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Quote.text.ilike(pattern), Quote.author.ilike(pattern)))
        return await self.paginate(query, offset, limit)

    async def list_by_tag(self, tag: str, offset: int, limit: int) -> Tuple[List[Quote], int]:
        tagged = select(QuoteTag.quote_id).where(QuoteTag.tag == tag.strip().lower())
        query = self._newest_first().where(Quote.id.in_(tagged))
        return await self.paginate(query, offset, limit)

    async def list_all(self) -> List[Quote]:
        result = await self.session.execute(self._newest_first())
        return list(result.scalars().all())

    async def get_many(self, ids: Iterable[int]) -> List[Quote]:
        ids = list(ids)
        if not ids:
            return []
        result = await self.session.execute(select(Quote).where(Quote.id.in_(ids)))
        return list(result.scalars().all())

    async def top_viewed(self, limit: int = 5) -> List[Quote]:
        result = await self.session.execute(
            select(Quote).order_by(Quote.views.desc(), Quote.id).limit(limit)
        )
        return list(result.scalars().all())

    async def delete(self, instance: Quote) -> None:
        # Explicit so dialects without enforced foreign keys (SQLite) stay consistent
        await self.session.execute(
            delete(Favorite).where(Favorite.quote_id == instance.id),
            execution_options=BULK_OPTIONS,
        )
        await self.session.execute(
            delete(QuoteView).where(QuoteView.quote_id == instance.id),
            execution_options=BULK_OPTIONS,
        )
        await super().delete(instance)
