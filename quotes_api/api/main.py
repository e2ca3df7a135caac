"""
Quotes API - FastAPI Application

Motivational quotes backend: Firebase-authenticated users, favorites, view
history, activity log and an admin surface, behind per-identity rate limits.

Usage:
    uvicorn quotes_api.api.main:app --reload --host 0.0.0.0 --port 5000

Docs:
    http://localhost:5000/docs (Swagger UI)
    http://localhost:5000/redoc (ReDoc)
"""

from dotenv import load_dotenv

load_dotenv()  # load .env from current working directory (project root)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from quotes_api.api.routers import admin, auth, quotes, users
from quotes_api.core.auth import init_firebase
from quotes_api.core.config import get_settings
from quotes_api.core.exceptions import register_exception_handlers
from quotes_api.core.logging import setup_logger
from quotes_api.core.middleware import request_logger
from quotes_api.core.rate_limit import build_rate_limiter
from quotes_api.database import session as db_session

APP_NAME = "Motivational Quotes API"
APP_VERSION = "1.0.0"

settings = get_settings()
setup_logger(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown."""
    logger.info(f"{APP_NAME} starting...")

    app.state.token_verifier = init_firebase(settings)
    app.state.rate_limiter = build_rate_limiter(settings.rate_limit)

    if settings.database_auto_create:
        await db_session.init_models()
        logger.info("Database tables ensured")

    try:
        async with db_session.async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection OK")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")

    logger.info("API ready")
    yield

    logger.info(f"{APP_NAME} shutting down...")
    if app.state.rate_limiter is not None:
        try:
            await app.state.rate_limiter.close()
        except Exception as e:
            logger.warning(f"Rate limit store did not close cleanly: {e}")
    await db_session.async_engine.dispose()


app = FastAPI(
    title=APP_NAME,
    description="REST API for motivational quotes, favorites and user activity.",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS - frontend origins from CORS_ORIGINS (comma-separated)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
)


def _cors_headers(request: Request) -> dict:
    """Headers so error responses (e.g. 500) still satisfy CORS in the browser."""
    origin = request.headers.get("origin", "")
    if origin and origin in settings.cors_origins:
        return {"Access-Control-Allow-Origin": origin, "Access-Control-Allow-Credentials": "true"}
    return {}


app.middleware("http")(request_logger)
register_exception_handlers(app, _cors_headers)


# Health endpoints
@app.get("/", tags=["Health"])
async def root():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    health = {"status": "healthy", "components": {"api": "ok"}}
    try:
        async with db_session.async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        health["components"]["database"] = "ok"
    except Exception as e:
        health["status"] = "degraded"
        health["components"]["database"] = f"error: {str(e)}"

    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        health["components"]["rate_limit"] = "disabled"
    else:
        try:
            await limiter.store.ping()
            health["components"]["rate_limit"] = "ok"
        except Exception as e:
            # Requests are still served (fail open), so this does not degrade the API
            health["components"]["rate_limit"] = f"error: {str(e)}"
    return health


# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(quotes.router, prefix="/api/quotes", tags=["Quotes"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

logger.info("Routers registered: auth, quotes, users, admin")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("quotes_api.api.main:app", host="0.0.0.0", port=settings.port, reload=True)
