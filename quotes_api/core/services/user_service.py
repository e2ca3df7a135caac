"""Profiles, favorites and admin user management."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from quotes_api.api.schemas.user import AccountResponse, AdminUserUpdate, ProfileUpdate, ViewedQuote
from quotes_api.core.exceptions import BadRequest, NotFound
from quotes_api.core.services.activity_service import ActivityService
from quotes_api.database.models.quote import Quote
from quotes_api.database.models.user import User
from quotes_api.database.repositories.activity_repository import ActivityRepository
from quotes_api.database.repositories.quote_repository import QuoteRepository
from quotes_api.database.repositories.user_repository import UserRepository
from quotes_api.database.session import get_db
from quotes_api.utils.enums import ActivityAction, UserDeletionPolicy

logger = logging.getLogger(__name__)


@dataclass
class FavoriteChange:
    changed: bool
    message: str
    favorites: List[int]


class UserService:
    def __init__(self, session: AsyncSession):
        self.repo = UserRepository(session)
        self.quotes = QuoteRepository(session)
        self.activity = ActivityService(session)
        self.activity_repo = ActivityRepository(session)

    @staticmethod
    def instance(session: AsyncSession = Depends(get_db)) -> "UserService":
        return UserService(session)

    async def require(self, user_id: int) -> User:
        user = await self.repo.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    # ── Profile ──

    async def account(self, user: User) -> AccountResponse:
        account = AccountResponse.model_validate(user)
        account.favorites = await self.repo.favorite_ids(user.id)
        account.quotes_viewed = [ViewedQuote.model_validate(v) for v in await self.repo.recent_views(user.id)]
        return account

    async def _apply_update(self, user: User, data: ProfileUpdate) -> None:
        if data.display_name:
            user.display_name = data.display_name
        if data.preferences is not None:
            # Merge: preference fields not sent keep their stored value
            user.preferences = {
                **(user.preferences or {}),
                **data.preferences.model_dump(exclude_none=True, mode="json"),
            }
        await self.repo.update(user)

    async def update_profile(self, user: User, data: ProfileUpdate, request: Optional[Request] = None) -> User:
        await self._apply_update(user, data)
        await self.activity.log(user.id, ActivityAction.PROFILE_UPDATED, {}, request)
        return user

    # ── Favorites ──

    async def list_favorites(self, user: User) -> List[Quote]:
        ids = await self.repo.favorite_ids(user.id)
        by_id = {quote.id: quote for quote in await self.quotes.get_many(ids)}
        return [by_id[quote_id] for quote_id in ids if quote_id in by_id]

    async def add_favorite(self, user: User, quote_id: int, request: Optional[Request] = None) -> FavoriteChange:
        if await self.quotes.get_by_id(quote_id) is None:
            raise NotFound("Quote not found")

        ids = await self.repo.favorite_ids(user.id)
        if quote_id in ids:
            return FavoriteChange(False, "Quote already in favorites", ids)

        await self.repo.add_favorite(user.id, quote_id)
        await self.activity.log(user.id, ActivityAction.FAVORITE_ADDED, {"quote_id": quote_id}, request)
        return FavoriteChange(True, "Quote added to favorites", ids + [quote_id])

    async def remove_favorite(self, user: User, quote_id: int, request: Optional[Request] = None) -> FavoriteChange:
        ids = await self.repo.favorite_ids(user.id)
        if quote_id not in ids:
            return FavoriteChange(False, "Quote not in favorites", ids)

        await self.repo.remove_favorite(user.id, quote_id)
        await self.activity.log(user.id, ActivityAction.FAVORITE_REMOVED, {"quote_id": quote_id}, request)
        return FavoriteChange(True, "Quote removed from favorites", [i for i in ids if i != quote_id])

    # ── Admin ──

    async def list_users(self, page: int, limit: int, search: Optional[str] = None) -> Tuple[List[User], int]:
        return await self.repo.list_users(offset=(page - 1) * limit, limit=limit, search=search)

    async def update_user(
        self,
        user_id: int,
        data: AdminUserUpdate,
        actor: User,
        request: Optional[Request] = None,
    ) -> User:
        user = await self.require(user_id)
        if data.role is not None:
            user.role = data.role
        await self._apply_update(user, data)
        await self.activity.log(actor.id, ActivityAction.USER_UPDATED, {"target_user_id": user.id}, request)
        return user

    async def delete_user(
        self,
        user_id: int,
        actor: User,
        policy: UserDeletionPolicy,
        request: Optional[Request] = None,
    ) -> None:
        if user_id == actor.id:
            raise BadRequest("Cannot delete your own account")

        user = await self.require(user_id)
        await self.repo.delete(user)

        purged = 0
        if policy == UserDeletionPolicy.PURGE:
            purged = await self.activity_repo.purge_user(user_id)

        await self.activity.log(
            actor.id,
            ActivityAction.USER_DELETED,
            {"target_user_id": user_id, "policy": policy.value, "activities_purged": purged},
            request,
        )
        logger.info(f"User {user_id} deleted by {actor.email} (policy={policy.value})")
