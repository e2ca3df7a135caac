from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from quotes_api.api.schemas.activity import ActivityResponse
from quotes_api.api.schemas.common import PaginationMeta
from quotes_api.api.schemas.quote import QuoteResponse
from quotes_api.utils.enums import Theme, UserRole


class PreferencesUpdate(BaseModel):
    theme: Optional[Theme] = None
    email_notifications: Optional[bool] = None


class UserProfileResponse(BaseModel):
    id: int
    firebase_uid: str
    email: str
    display_name: Optional[str] = None
    role: UserRole
    preferences: Dict[str, Any] = Field(default_factory=dict)
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class UserEnvelope(BaseModel):
    user: UserProfileResponse


class ViewedQuote(BaseModel):
    quote_id: int
    viewed_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AccountResponse(UserProfileResponse):
    """The signed-in user's own record, with favorite ids and recent views (newest first)."""
    favorites: List[int] = Field(default_factory=list)
    quotes_viewed: List[ViewedQuote] = Field(default_factory=list)


class AccountEnvelope(BaseModel):
    user: AccountResponse


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=255)
    preferences: Optional[PreferencesUpdate] = None


class AdminUserUpdate(ProfileUpdate):
    role: Optional[UserRole] = None


class VerifiedUser(BaseModel):
    uid: str
    email: str
    display_name: Optional[str] = None
    role: UserRole


class VerifyResponse(BaseModel):
    user: VerifiedUser


class FavoritesResponse(BaseModel):
    favorites: List[QuoteResponse]


class FavoriteToggleResponse(BaseModel):
    message: str
    changed: bool
    favorites: List[int]


class UserListResponse(BaseModel):
    users: List[UserProfileResponse]
    pagination: PaginationMeta


class UserDetailResponse(BaseModel):
    user: UserProfileResponse
    recent_activity: List[ActivityResponse]
