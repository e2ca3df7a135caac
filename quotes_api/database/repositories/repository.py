"""
Repository Pattern Base Classes

Async database access for request handlers. Repositories only flush; the
request-scoped session from `get_db` commits once the handler succeeds.

Architecture:
- BaseRepository: generic CRUD for any model
- Specialized repositories: domain queries (QuoteRepository, UserRepository, ...)
"""

from abc import ABC
from typing import Any, Generic, List, Optional, Tuple, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.database.session import Base

ModelType = TypeVar("ModelType", bound=Base)

# Bulk statements skip identity-map synchronisation; callers reload what they need
BULK_OPTIONS = {"synchronize_session": False}


class BaseRepository(Generic[ModelType], ABC):
    """
    Abstract base repository with common CRUD operations.

    Example:
        class QuoteRepository(BaseRepository[Quote]):
            def __init__(self, session: AsyncSession):
                super().__init__(session, Quote)
    """

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        return await self.session.get(self.model, id)

    async def create(self, **kwargs) -> ModelType:
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def update(self, instance: ModelType, **kwargs) -> ModelType:
        """Partial update: only the given attributes change."""
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        await self.session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        await self.session.delete(instance)
        await self.session.flush()

    async def count(self) -> int:
        return await self.session.scalar(select(func.count()).select_from(self.model)) or 0

    async def paginate(self, query: Select, offset: int, limit: int) -> Tuple[List[ModelType], int]:
        """Run `query` for one page and return (items, total) for the unpaged query."""
        total = await self.session.scalar(
            select(func.count()).select_from(query.order_by(None).subquery())
        )
        result = await self.session.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all()), total or 0
