"""
Pytest global configuration for the Quotes API.

- Every test gets its own SQLite database file (aiosqlite), created by the
  app lifespan (DATABASE_AUTO_CREATE=true).
- Firebase is never contacted: a FakeTokenVerifier is injected through
  app.dependency_overrides and maps bearer tokens to claims.
- Rate limiting is off by default; `rate_limited_client` wires an in-memory
  limiter with a controllable clock.
"""

import os

os.environ["DATABASE_URL"] = "sqlite:///./quotes-test.db"
os.environ["ASYNC_DATABASE_URL"] = "sqlite+aiosqlite:///./quotes-test.db"
os.environ["DATABASE_AUTO_CREATE"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"
os.environ.pop("REDIS_URL", None)

from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select, update

import quotes_api.api.main as main_module
from quotes_api.api.main import app
from quotes_api.core.auth import TokenClaims, TokenVerifier, get_token_verifier
from quotes_api.core.exceptions import InvalidToken
from quotes_api.core.rate_limit import MemoryCounterStore, RateLimiter, RateLimitPolicy, get_rate_limiter
from quotes_api.database import session as db_session
from quotes_api.database.models.user import User
from quotes_api.utils.enums import UserRole


class FakeTokenVerifier(TokenVerifier):
    """Token string -> claims. Unknown tokens are rejected like an invalid Firebase token."""

    def __init__(self):
        self.tokens: Dict[str, TokenClaims] = {}
        self.calls = 0

    def register(self, token: str, uid: str, email: str = None, name: str = None) -> str:
        self.tokens[token] = TokenClaims(uid=uid, email=email, name=name)
        return token

    async def verify(self, token: str) -> TokenClaims:
        self.calls += 1
        try:
            return self.tokens[token]
        except KeyError:
            raise InvalidToken()


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ============================================================================
# DATABASE / APP FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def test_db_url(tmp_path):
    """Rebind the async engine to a fresh SQLite file for this test."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'quotes.db'}"
    db_session.configure_engine(url)
    return url


@pytest.fixture
def verifier():
    return FakeTokenVerifier()


@pytest.fixture(scope="function")
def test_client(test_db_url, verifier, monkeypatch):
    """TestClient with lifespan (tables created) and the fake verifier installed."""
    monkeypatch.setattr(main_module, "init_firebase", lambda settings: None)
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(
        MemoryCounterStore(clock),
        policy=RateLimitPolicy(anonymous_limit=3, user_limit=5, admin_limit=10),
        window_seconds=60,
        clock=clock,
    )


@pytest.fixture
def rate_limited_client(test_client, limiter):
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    yield test_client


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def user_token(verifier):
    return verifier.register("user-token", uid="uid-user", email="Reader@Example.com", name="Reader")


@pytest.fixture
def other_token(verifier):
    return verifier.register("other-token", uid="uid-other", email="other@example.com")


@pytest.fixture
def admin_token(test_client, verifier, test_db_url):
    """Sign the admin in once, then promote them (admins are never created by the API)."""
    token = verifier.register("admin-token", uid="uid-admin", email="admin@example.com", name="Admin")
    r = test_client.post("/api/auth/verify", headers=auth_header(token))
    assert r.status_code == 200
    promote(test_db_url, r.json()["user"]["uid"])
    return token


def promote(async_url: str, firebase_uid: str) -> None:
    """Set role=admin straight in the database (same path as scripts/create-admin.py)."""
    engine = create_engine(async_url.replace("sqlite+aiosqlite", "sqlite"))
    try:
        with engine.begin() as conn:
            conn.execute(update(User).where(User.firebase_uid == firebase_uid).values(role=UserRole.ADMIN))
    finally:
        engine.dispose()


def user_count(async_url: str) -> int:
    engine = create_engine(async_url.replace("sqlite+aiosqlite", "sqlite"))
    try:
        with engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(User)).scalar_one()
    finally:
        engine.dispose()


# ============================================================================
# DATA FIXTURES
# ============================================================================

@pytest.fixture
def sample_quote_data():
    """Valid payload for POST /api/quotes (schema QuoteCreate)."""
    return {
        "text": "The only way to do great work is to love what you do.",
        "author": "Steve Jobs",
        "source": "Stanford commencement",
        "tags": ["Work", "passion", " work "],
    }


@pytest.fixture
def create_quote(test_client, admin_token):
    def _create(**overrides):
        payload = {"text": "Stay hungry, stay foolish.", "author": "Whole Earth Catalog"}
        payload.update(overrides)
        r = test_client.post("/api/quotes", json=payload, headers=auth_header(admin_token))
        assert r.status_code == 201, r.text
        return r.json()["quote"]

    return _create
