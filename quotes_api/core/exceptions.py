"""
API error types and the handlers that turn them into the wire envelope:

    {"error": {"code": "...", "message": "...", "details": ...}}
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message or self.message
        self.code = code or self.code
        self.details = details
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return {"error": body}


class BadRequest(ApiError):
    status_code = 400
    code = "bad_request"
    message = "Bad request"


class ValidationFailed(BadRequest):
    code = "validation_error"
    message = "Validation failed"


class AuthenticationRequired(ApiError):
    status_code = 401
    code = "authentication_required"
    message = "Authentication required. Please provide a valid token."

    def __init__(self, message: Optional[str] = None, **kwargs):
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class InvalidToken(AuthenticationRequired):
    code = "invalid_token"
    message = "Invalid or expired authentication token."


class PermissionDenied(ApiError):
    status_code = 403
    code = "permission_denied"
    message = "Admin privileges required for this operation."


class NotFound(ApiError):
    status_code = 404
    code = "not_found"
    message = "The requested resource was not found"


class Conflict(ApiError):
    status_code = 409
    code = "duplicate_error"
    message = "A record with this information already exists"


class RateLimitExceeded(ApiError):
    status_code = 429
    code = "rate_limit_exceeded"
    message = "Rate limit exceeded. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None):
        super().__init__(
            message,
            details={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class InternalError(ApiError):
    pass


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    problems = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        problems.append({"field": ".".join(loc) or "body", "message": err.get("msg", "invalid")})
    return problems


def register_exception_handlers(app: FastAPI, extra_headers: Callable[[Request], Dict[str, str]]) -> None:
    """Install the envelope handlers. `extra_headers` adds e.g. CORS headers to every error."""

    def respond(request: Request, error: ApiError) -> JSONResponse:
        headers = dict(extra_headers(request))
        headers.update(error.headers or {})
        return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.code} - {exc.message}")
        return respond(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return respond(request, ValidationFailed(details=_field_errors(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            error: ApiError = NotFound()
        elif exc.status_code == 405:
            error = ApiError("Method not allowed", code="method_not_allowed")
            error.status_code = 405
        else:
            error = ApiError(str(exc.detail), code="http_error")
            error.status_code = exc.status_code
        error.headers = getattr(exc, "headers", None)
        return respond(request, error)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")
        return respond(request, Conflict())

    @app.exception_handler(Exception)
    async def any_exception_handler(request: Request, exc: Exception):
        """Catch-all so unhandled exceptions still return the envelope and CORS headers."""
        logger.exception("Unhandled exception: %s", exc)
        return respond(request, InternalError())
