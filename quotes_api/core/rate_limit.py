"""
Fixed-window rate limiting.

Each request increments a counter keyed by identity and window:

    ratelimit:user:42:28861234     (authenticated)
    ratelimit:uid:Xy7:28861234     (verified token, no local user yet)
    ratelimit:ip:10.0.0.7:28861234 (anonymous)

where the last part is floor(now / window_seconds). Counters live in a
CounterStore: Redis when REDIS_URL is configured, process memory otherwise.
Increment-and-get is a single atomic step in both stores.

If the store fails the request is allowed (fail open). With
RATE_LIMIT_MEMORY_FALLBACK=true the limiter counts in process memory for the
duration of the outage instead.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol

from fastapi import Depends, Request, Response
from redis import asyncio as aioredis

from quotes_api.core.auth import AuthResult, resolve_identity
from quotes_api.core.config import RateLimitSettings
from quotes_api.core.exceptions import RateLimitExceeded
from quotes_api.core.middleware import client_ip
from quotes_api.database.models.user import User

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CounterStore(Protocol):
    async def incr(self, key: str, ttl_seconds: int) -> int:
        """Atomically increment `key` and return the new value; the key expires after ttl_seconds."""
        ...

    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        ...


class MemoryCounterStore:
    """In-process counters. Counts are per process, so a fleet may undercount."""

    PRUNE_EVERY = 1000

    def __init__(self, clock: Clock = time.time):
        self.clock = clock
        self._counters: Dict[str, List[float]] = {}
        self._ops = 0

    async def incr(self, key: str, ttl_seconds: int) -> int:
        # No await between read and write: atomic on the event loop
        now = self.clock()
        self._ops += 1
        if self._ops % self.PRUNE_EVERY == 0:
            self._prune(now)

        entry = self._counters.get(key)
        if entry is None or entry[1] <= now:
            entry = [0, now + ttl_seconds]
            self._counters[key] = entry
        entry[0] += 1
        return int(entry[0])

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._counters.items() if expires_at <= now]
        for key in expired:
            del self._counters[key]

    def __len__(self) -> int:
        return len(self._counters)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._counters.clear()


class RedisCounterStore:
    """Shared counters for multi-instance deployments (INCR + EXPIRE in one MULTI/EXEC)."""

    def __init__(self, client: aioredis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str, timeout: float) -> "RedisCounterStore":
        return cls(aioredis.from_url(
            url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            decode_responses=True,
        ))

    async def incr(self, key: str, ttl_seconds: int) -> int:
        async with self.client.pipeline(transaction=True) as pipe:
            count, _ = await pipe.incr(key).expire(key, ttl_seconds).execute()
        return int(count)

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self) -> None:
        await self.client.aclose()


@dataclass(frozen=True)
class RateLimitPolicy:
    anonymous_limit: int = 30
    user_limit: int = 60
    admin_limit: int = 300

    def limit_for(self, user: Optional[User]) -> int:
        if user is None:
            return self.anonymous_limit
        if user.is_admin:
            return self.admin_limit
        return self.user_limit


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: Optional[int]
    reset_after: int


class RateLimiter:
    def __init__(
        self,
        store: CounterStore,
        policy: RateLimitPolicy = RateLimitPolicy(),
        window_seconds: int = 60,
        key_prefix: str = "ratelimit",
        fallback: Optional[CounterStore] = None,
        clock: Clock = time.time,
    ):
        self.store = store
        self.policy = policy
        self.window_seconds = window_seconds
        self.key_prefix = key_prefix
        self.fallback = fallback
        self.clock = clock

    async def hit(self, identity: str, limit: int) -> RateLimitDecision:
        now = self.clock()
        window = int(now // self.window_seconds)
        reset_after = max(1, math.ceil((window + 1) * self.window_seconds - now))
        key = f"{self.key_prefix}:{identity}:{window}"

        try:
            count = await self.store.incr(key, self.window_seconds)
        except Exception as e:
            if self.fallback is None:
                logger.warning(f"Rate limit store unavailable, allowing request: {e}")
                return RateLimitDecision(True, limit, None, reset_after)
            logger.warning(f"Rate limit store unavailable, counting in process memory: {e}")
            count = await self.fallback.incr(key, self.window_seconds)

        return RateLimitDecision(
            allowed=count <= limit,
            limit=limit,
            remaining=max(0, limit - count),
            reset_after=reset_after,
        )

    async def close(self) -> None:
        await self.store.close()


def build_rate_limiter(settings: RateLimitSettings) -> Optional[RateLimiter]:
    if not settings.enabled:
        logger.info("Rate limiting disabled")
        return None

    if settings.redis_url:
        store: CounterStore = RedisCounterStore.from_url(settings.redis_url, settings.redis_timeout)
        logger.info("Rate limiting backed by Redis")
    else:
        store = MemoryCounterStore()
        logger.info("Rate limiting backed by process memory (REDIS_URL not set)")

    return RateLimiter(
        store,
        policy=RateLimitPolicy(
            anonymous_limit=settings.anonymous_limit,
            user_limit=settings.user_limit,
            admin_limit=settings.admin_limit,
        ),
        window_seconds=settings.window_seconds,
        key_prefix=settings.key_prefix,
        fallback=MemoryCounterStore() if settings.memory_fallback and settings.redis_url else None,
    )


def get_rate_limiter(request: Request) -> Optional[RateLimiter]:
    return getattr(request.app.state, "rate_limiter", None)


async def enforce_rate_limit(
    request: Request,
    response: Response,
    auth: AuthResult = Depends(resolve_identity),
    limiter: Optional[RateLimiter] = Depends(get_rate_limiter),
) -> None:
    """
    Router-level dependency: count the request and reject it past the caller's limit.

    Runs on the read-only token lookup, before any login is recorded.
    """
    if limiter is None:
        return

    if auth.user is not None:
        identity = f"user:{auth.user.id}"
        limit = limiter.policy.limit_for(auth.user)
    elif auth.claims is not None:
        identity = f"uid:{auth.claims.uid}"
        limit = limiter.policy.user_limit
    else:
        identity = f"ip:{client_ip(request)}"
        limit = limiter.policy.anonymous_limit
    decision = await limiter.hit(identity, limit)

    if not decision.allowed:
        logger.info(f"Rate limit exceeded for {identity}")
        raise RateLimitExceeded(retry_after=decision.reset_after)

    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    if decision.remaining is not None:
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    response.headers["X-RateLimit-Reset"] = str(decision.reset_after)
