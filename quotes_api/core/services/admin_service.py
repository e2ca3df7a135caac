"""Admin dashboard statistics and bulk quote import/export."""

import logging
from datetime import timedelta
from typing import Any, List, Optional

from fastapi import Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.api.schemas.admin import ImportFailure, ImportResults, PeriodCounts, SystemStats
from quotes_api.api.schemas.quote import QuoteCreate, QuoteSummary
from quotes_api.core.services.activity_service import ActivityService
from quotes_api.database.models.model_base import utcnow
from quotes_api.database.models.quote import Quote
from quotes_api.database.models.user import User
from quotes_api.database.repositories.activity_repository import ActivityRepository
from quotes_api.database.repositories.quote_repository import QuoteRepository
from quotes_api.database.repositories.user_repository import UserRepository
from quotes_api.database.session import get_db
from quotes_api.utils.enums import ActivityAction

logger = logging.getLogger(__name__)

PERIODS = {"daily": timedelta(days=1), "weekly": timedelta(days=7), "monthly": timedelta(days=30)}


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or 'quote'}: {e['msg']}" for e in error.errors()
    )


class AdminService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.quotes = QuoteRepository(session)
        self.activity_repo = ActivityRepository(session)
        self.activity = ActivityService(session)

    @staticmethod
    def instance(session: AsyncSession = Depends(get_db)) -> "AdminService":
        return AdminService(session)

    async def system_stats(self) -> SystemStats:
        now = utcnow()
        since = {name: now - delta for name, delta in PERIODS.items()}

        async def per_period(count) -> PeriodCounts:
            return PeriodCounts(**{name: await count(start) for name, start in since.items()})

        return SystemStats(
            total_users=await self.users.count(),
            active_users=await per_period(lambda start: self.users.count_since(User.last_login, start)),
            total_quotes=await self.quotes.count(),
            quotes_served=await per_period(
                lambda start: self.activity_repo.count_since(ActivityAction.QUOTE_VIEWED, start)
            ),
            top_quotes=[QuoteSummary.model_validate(q) for q in await self.quotes.top_viewed(5)],
            registrations=await per_period(lambda start: self.users.count_since(User.created_at, start)),
        )

    async def import_quotes(self, items: List[Any], actor: User, request: Optional[Request] = None) -> ImportResults:
        """Create each valid item; invalid ones are reported and skipped."""
        imported = 0
        errors: List[ImportFailure] = []
        for item in items:
            try:
                data = QuoteCreate.model_validate(item)
            except ValidationError as e:
                errors.append(ImportFailure(quote=item, error=_describe(e)))
                continue
            await self.quotes.create(
                text=data.text,
                author=data.author,
                source=data.source,
                tags=data.tags,
                views=0,
            )
            imported += 1

        await self.activity.log(actor.id, ActivityAction.QUOTES_IMPORTED, {"count": imported}, request)
        logger.info(f"{actor.email} imported {imported}/{len(items)} quotes")
        return ImportResults(total=len(items), imported=imported, errors=errors)

    async def export_quotes(self, actor: User, request: Optional[Request] = None) -> List[Quote]:
        quotes = await self.quotes.list_all()
        await self.activity.log(actor.id, ActivityAction.QUOTES_EXPORTED, {"count": len(quotes)}, request)
        return quotes
