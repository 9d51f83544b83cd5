"""
Rate Limiting

Per-client request limits for the public authentication endpoints. Two
policies exist: LOGIN (staff and student login) and ACCOUNT_CHANGE
(registration and password reset).

Windows slide: a Redis sorted set per key when Redis is connected, an
in-process list of timestamps otherwise. The in-process fallback is per
worker and is purged periodically by ``core.jobs``.
"""

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any

from fastapi import HTTPException, Request, status

from chenaniah.core.redis import get_redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "rate_limit"

# {key: [timestamp, ...]} oldest first
_memory_store: dict[str, list[float]] = {}


@dataclass(frozen=True)
class RateLimitPolicy:
    limit: int
    window_seconds: int


LOGIN = RateLimitPolicy(limit=10, window_seconds=60)
ACCOUNT_CHANGE = RateLimitPolicy(limit=5, window_seconds=300)


class RateLimitExceeded(HTTPException):
    """429 carrying the standard error envelope and a Retry-After header."""

    def __init__(self, policy: RateLimitPolicy):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": (
                    f"Too many attempts. Please try again in "
                    f"{policy.window_seconds} seconds."
                ),
                "code": "RATE_LIMIT_EXCEEDED",
                "retry_after_seconds": policy.window_seconds,
            },
            headers={"Retry-After": str(policy.window_seconds)},
        )


async def _allow_redis(client, key: str, limit: int, window_seconds: int) -> bool:
    now = time.time()

    async with client.pipeline(transaction=True) as pipe:
        pipe.zremrangebyscore(key, 0, now - window_seconds)
        pipe.zcard(key)
        pipe.zadd(key, {str(now): now})
        pipe.expire(key, window_seconds)
        _, in_window, _, _ = await pipe.execute()

    return in_window < limit


def _allow_memory(key: str, limit: int, window_seconds: int) -> bool:
    now = time.time()
    recent = [ts for ts in _memory_store.get(key, []) if ts > now - window_seconds]

    allowed = len(recent) < limit
    if allowed:
        recent.append(now)
    _memory_store[key] = recent
    return allowed


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Record an attempt under ``key`` and report whether it is allowed.

    Redis errors are logged and the in-process window is used instead, so a
    Redis outage never blocks logins.
    """
    client = get_redis()

    if client is not None:
        try:
            return await _allow_redis(client, key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _allow_memory(key, limit, window_seconds)


def reset_memory_store() -> None:
    """Forget all in-memory windows."""
    _memory_store.clear()


def purge_memory_store(max_age_seconds: int) -> int:
    """
    Drop in-memory keys with no request in the last ``max_age_seconds``.

    ``max_age_seconds`` must be at least the longest window in use.

    Returns:
        Number of keys removed
    """
    cutoff = time.time() - max_age_seconds
    stale = [key for key, window in _memory_store.items() if not window or window[-1] <= cutoff]
    for key in stale:
        del _memory_store[key]
    return len(stale)


def client_key(request: Request) -> str:
    """Limit key for a caller: client IP plus the endpoint path."""
    client_ip = request.client.host if request.client else "unknown"
    return f"{KEY_PREFIX}:{client_ip}:{request.url.path}"


def rate_limit(policy: RateLimitPolicy):
    """
    Apply ``policy`` to an endpoint.

    The endpoint must declare a ``request: Request`` parameter:

        @router.post("/student/login")
        @rate_limit(LOGIN)
        async def student_login(request: Request, ...):
            ...
    """

    def decorator(endpoint):
        @wraps(endpoint)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request = kwargs.get("request")
            if not isinstance(request, Request):
                raise TypeError(f"{endpoint.__name__} must accept a 'request: Request' argument")

            key = client_key(request)
            if not await check_rate_limit(key, policy.limit, policy.window_seconds):
                logger.warning(
                    f"Rate limit exceeded for {key}: {policy.limit}/{policy.window_seconds}s"
                )
                raise RateLimitExceeded(policy)

            return await endpoint(*args, **kwargs)

        return wrapper

    return decorator


__all__ = [
    "ACCOUNT_CHANGE",
    "LOGIN",
    "RateLimitExceeded",
    "RateLimitPolicy",
    "check_rate_limit",
    "client_key",
    "purge_memory_store",
    "rate_limit",
    "reset_memory_store",
]
