"""
Firebase Authentication for FastAPI.

Verifies Firebase ID tokens and keeps exactly one local user per Firebase uid.
The token is verified once per request (`resolve_identity`) with a read-only
lookup of the local user, so the rate limiter can key on it before anything is
written. Consumers:
- get_current_user: protected routes, raises the auth error; creates the local
  user on first login, otherwise bumps last_login; both append a `login` activity
- get_optional_user: public routes, the existing user or None
- require_roles / get_current_admin: role gate on top of get_current_user
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import firebase_admin
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from quotes_api.core.config import Settings
from quotes_api.core.exceptions import (
    ApiError,
    AuthenticationRequired,
    InvalidToken,
    PermissionDenied,
)
from quotes_api.core.services.activity_service import ActivityService
from quotes_api.database.models.model_base import utcnow
from quotes_api.database.models.user import User
from quotes_api.database.repositories.user_repository import UserRepository
from quotes_api.database.session import get_db
from quotes_api.utils.enums import ActivityAction, UserRole
from quotes_api.utils.firebase_config import get_firebase_credentials

logger = logging.getLogger(__name__)


@dataclass
class TokenClaims:
    """The subset of a verified ID token the API relies on."""
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None


class TokenVerifier:
    """Verifies a bearer token. Raises InvalidToken on any failure."""

    async def verify(self, token: str) -> TokenClaims:
        raise NotImplementedError


class FirebaseTokenVerifier(TokenVerifier):
    def __init__(self, app: firebase_admin.App):
        self.app = app

    async def verify(self, token: str) -> TokenClaims:
        try:
            # verify_id_token may fetch Google's public keys over HTTP
            decoded: Dict[str, Any] = await run_in_threadpool(
                firebase_auth.verify_id_token, token, app=self.app
            )
        except firebase_auth.ExpiredIdTokenError:
            raise InvalidToken("Authentication token has expired.")
        except firebase_auth.InvalidIdTokenError:
            raise InvalidToken()
        except Exception as e:
            logger.error(f"Token verification failed: {e}")
            raise InvalidToken()
        return TokenClaims(
            uid=decoded["uid"],
            email=decoded.get("email"),
            name=decoded.get("name"),
        )


def init_firebase(settings: Settings) -> Optional[FirebaseTokenVerifier]:
    """Initialize Firebase Admin SDK. Call once at app startup."""
    options = {"httpTimeout": settings.firebase_http_timeout}
    try:
        return FirebaseTokenVerifier(firebase_admin.get_app())
    except ValueError:
        pass

    cred = get_firebase_credentials(settings)
    try:
        if cred is not None:
            app = firebase_admin.initialize_app(cred, options)
            logger.info("Firebase Admin SDK initialized (credentials from env)")
        else:
            app = firebase_admin.initialize_app(options=options)
            logger.info("Firebase Admin SDK initialized with default credentials")
    except Exception as e:
        logger.warning(
            f"Firebase Admin SDK not initialized: {e}. "
            "Every authenticated request will be rejected."
        )
        return None
    return FirebaseTokenVerifier(app)


def get_token_verifier(request: Request) -> Optional[TokenVerifier]:
    return getattr(request.app.state, "token_verifier", None)


security = HTTPBearer(auto_error=False)


@dataclass
class AuthResult:
    """Per-request token outcome: verified claims and the existing local user, or the error to raise."""
    claims: Optional[TokenClaims] = None
    user: Optional[User] = None
    error: Optional[ApiError] = None


async def sync_user(
    db: AsyncSession,
    claims: TokenClaims,
    request: Optional[Request] = None,
) -> User:
    """
    Get the local user for a verified token, creating it on first login.

    Commits on its own so the login survives a later failure in the same request.
    """
    users = UserRepository(db)
    activity = ActivityService(db)

    user = await users.get_by_firebase_uid(claims.uid)
    if user is not None:
        user.last_login = utcnow()
        await db.flush()
        await activity.log(user.id, ActivityAction.LOGIN, {}, request)
        await db.commit()
        return user

    if not claims.email:
        raise InvalidToken("Token does not carry an email address.")

    try:
        user = await users.create(
            firebase_uid=claims.uid,
            email=claims.email,
            display_name=claims.name or claims.email.split("@")[0],
            role=UserRole.USER,
            last_login=utcnow(),
        )
    except IntegrityError:
        # A concurrent first request for the same uid won the insert
        await db.rollback()
        user = await users.get_by_firebase_uid(claims.uid)
        if user is None:
            raise
        user.last_login = utcnow()
        await db.flush()
        await activity.log(user.id, ActivityAction.LOGIN, {}, request)
        await db.commit()
        return user

    logger.info(f"New user registered: {user.email}")
    await activity.log(user.id, ActivityAction.LOGIN, {"first_login": True}, request)
    await db.commit()
    return user


async def resolve_identity(
    cred: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    verifier: Optional[TokenVerifier] = Depends(get_token_verifier),
) -> AuthResult:
    """Verify the bearer token (if any) and look up the local user, once per request. Read-only."""
    if cred is None:
        return AuthResult(error=AuthenticationRequired())

    if verifier is None:
        logger.error("Token received but no verifier is configured")
        return AuthResult(error=InvalidToken())

    try:
        claims = await verifier.verify(cred.credentials)
        user = await UserRepository(db).get_by_firebase_uid(claims.uid)
    except InvalidToken as e:
        return AuthResult(error=e)
    except Exception as e:
        # Storage and unexpected failures surface as invalid_token as well
        logger.exception(f"Authentication error: {e}")
        await db.rollback()
        return AuthResult(error=InvalidToken())

    return AuthResult(claims=claims, user=user)


async def get_current_user(
    request: Request,
    auth: AuthResult = Depends(resolve_identity),
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency for protected routes. Records the login."""
    if auth.claims is None:
        raise auth.error or AuthenticationRequired()

    try:
        user = await sync_user(db, auth.claims, request)
    except InvalidToken:
        raise
    except Exception as e:
        logger.exception(f"Authentication error: {e}")
        await db.rollback()
        raise InvalidToken()

    request.state.user = user
    return user


async def get_optional_user(auth: AuthResult = Depends(resolve_identity)) -> Optional[User]:
    """Optional auth - the existing local user, None when anonymous, invalid or not signed in yet."""
    return auth.user


def require_roles(*roles: UserRole) -> Callable:
    """Build a dependency that admits only users whose role is in `roles`."""
    allowed = frozenset(roles)

    async def role_gate(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise PermissionDenied()
        return user

    return role_gate


get_current_admin = require_roles(UserRole.ADMIN)
