"""
Auth Router - Firebase session endpoints.

Endpoints:
- POST /api/auth/verify - Verify token, sync local user, return identity
- GET  /api/auth/me     - Current user's full record
- POST /api/auth/logout - Record a logout (token revocation is client-side)
"""

import logging

from fastapi import APIRouter, Depends, Request

from quotes_api.api.schemas import ERROR_RESPONSES, AccountEnvelope, MessageResponse, VerifyResponse
from quotes_api.api.schemas.user import VerifiedUser
from quotes_api.core.auth import get_current_user
from quotes_api.core.rate_limit import enforce_rate_limit
from quotes_api.core.services.activity_service import ActivityService
from quotes_api.core.services.user_service import UserService
from quotes_api.database.models.user import User
from quotes_api.utils.enums import ActivityAction

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(enforce_rate_limit)], responses=ERROR_RESPONSES)


@router.post("/verify", response_model=VerifyResponse)
async def verify_token(current_user: User = Depends(get_current_user)):
    """Verify the Firebase token; the local user is created on first call."""
    return VerifyResponse(
        user=VerifiedUser(
            uid=current_user.firebase_uid,
            email=current_user.email,
            display_name=current_user.display_name,
            role=current_user.role,
        )
    )


@router.get("/me", response_model=AccountEnvelope)
async def get_me(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(UserService.instance),
):
    return AccountEnvelope(user=await service.account(current_user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
    activity: ActivityService = Depends(ActivityService.instance),
):
    await activity.log(current_user.id, ActivityAction.LOGOUT, {}, request)
    logger.info(f"User logged out: {current_user.email}")
    return MessageResponse(message="Logout successful")
