import logging
import time

from fastapi import Request

from quotes_api.core.config import get_settings

logger = logging.getLogger("quotes_api.requests")


def client_ip(request: Request) -> str:
    """Best-effort client address; honours X-Forwarded-For only when trusted."""
    if get_settings().trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def request_logger(request: Request, call_next):
    start = time.time()

    response = await call_next(request)

    elapsed = time.time() - start
    logger.info(
        f"{request.method} {request.url.path} "
        f"[{response.status_code}] ({elapsed:.3f}s)"
    )

    response.headers["X-Process-Time"] = str(elapsed)
    return response
