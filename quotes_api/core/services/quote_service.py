"""Quote reads (with view tracking) and admin-only writes."""

import logging
from typing import List, Optional, Tuple

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.api.schemas.quote import QuoteCreate, QuoteUpdate
from quotes_api.core.exceptions import NotFound
from quotes_api.core.services.activity_service import ActivityService
from quotes_api.database.models.quote import Quote
from quotes_api.database.models.user import User
from quotes_api.database.repositories.quote_repository import QuoteRepository
from quotes_api.database.repositories.user_repository import UserRepository
from quotes_api.database.session import get_db
from quotes_api.utils.enums import ActivityAction

logger = logging.getLogger(__name__)


class QuoteService:
    def __init__(self, session: AsyncSession):
        self.repo = QuoteRepository(session)
        self.users = UserRepository(session)
        self.activity = ActivityService(session)

    @staticmethod
    def instance(session: AsyncSession = Depends(get_db)) -> "QuoteService":
        return QuoteService(session)

    # ── Reads ──

    async def get_random(self, viewer: Optional[User] = None, request: Optional[Request] = None) -> Quote:
        quote = await self.repo.get_random()
        if quote is None:
            raise NotFound("No quotes available")
        return await self._viewed(quote, viewer, request)

    async def get_quote(
        self,
        quote_id: int,
        viewer: Optional[User] = None,
        request: Optional[Request] = None,
    ) -> Quote:
        quote = await self.require(quote_id)
        return await self._viewed(quote, viewer, request)

    async def require(self, quote_id: int) -> Quote:
        quote = await self.repo.get_by_id(quote_id)
        if quote is None:
            raise NotFound("Quote not found")
        return quote

    async def _viewed(self, quote: Quote, viewer: Optional[User], request: Optional[Request]) -> Quote:
        """Count the view for everyone; authenticated viewers also get history and activity."""
        await self.repo.increment_views(quote)
        if viewer is not None:
            await self.activity.log(viewer.id, ActivityAction.QUOTE_VIEWED, {"quote_id": quote.id}, request)
            await self.users.record_view(viewer.id, quote.id)
        return quote

    async def list_quotes(self, page: int, limit: int, search: Optional[str] = None) -> Tuple[List[Quote], int]:
        return await self.repo.list_quotes(offset=(page - 1) * limit, limit=limit, search=search)

    async def list_by_tag(self, tag: str, page: int, limit: int) -> Tuple[List[Quote], int]:
        return await self.repo.list_by_tag(tag, offset=(page - 1) * limit, limit=limit)

    # ── Admin writes ──

    async def create_quote(self, data: QuoteCreate, actor: User, request: Optional[Request] = None) -> Quote:
        quote = await self.repo.create(
            text=data.text,
            author=data.author,
            source=data.source,
            tags=data.tags,
            views=0,
        )
        await self.activity.log(actor.id, ActivityAction.QUOTE_CREATED, {"quote_id": quote.id}, request)
        logger.info(f"Quote {quote.id} created by {actor.email}")
        return quote

    async def update_quote(
        self,
        quote_id: int,
        data: QuoteUpdate,
        actor: User,
        request: Optional[Request] = None,
    ) -> Quote:
        quote = await self.require(quote_id)
        changes = data.model_dump(exclude_unset=True)
        await self.repo.update(quote, **changes)
        await self.activity.log(
            actor.id,
            ActivityAction.QUOTE_UPDATED,
            {"quote_id": quote.id, "fields": sorted(changes)},
            request,
        )
        return quote

    async def delete_quote(self, quote_id: int, actor: User, request: Optional[Request] = None) -> None:
        quote = await self.require(quote_id)
        await self.repo.delete(quote)
        await self.activity.log(actor.id, ActivityAction.QUOTE_DELETED, {"quote_id": quote_id}, request)
        logger.info(f"Quote {quote_id} deleted by {actor.email}")
