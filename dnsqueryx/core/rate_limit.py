"""Admission control dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Explicit ownership: the limiter is built by the app factory and stored on
  ``app.state``; routes reach it through the request, never a module global.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.

Rate limiting strategy:
- Token bucket per client, keyed by the peer (source) address.
- Rejections raise HTTP 429 with the admission layer's own body rather than
  the response envelope.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import HTTPException, Request, status

from dnsqueryx.adapters.rate_limit.base import AbstractRateLimiter
from dnsqueryx.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter
from dnsqueryx.core.config import RateLimitSettings

logger = logging.getLogger(__name__)


def build_rate_limiter(rate_limit_settings: RateLimitSettings) -> AbstractRateLimiter | None:
    """Create the limiter described by the settings.

    Returns:
        The limiter, or None when rate limiting is disabled.
    """

    if not rate_limit_settings.enabled:
        return None

    return InMemoryTokenBucketRateLimiter(
        per_second=rate_limit_settings.per_second,
        burst_size=rate_limit_settings.burst_size,
        prune_interval_seconds=rate_limit_settings.prune_interval_seconds,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter | None:
    """Return the limiter owned by the application serving ``request``."""

    return getattr(request.app.state, "rate_limiter", None)


def build_client_key(request: Request) -> str:
    """Build the limiter key for the current request from its peer address."""

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key so log lines correlate after ``client_key`` is redacted."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing per-client admission control.

    Spends one token from the client's bucket. When the bucket is empty the
    request is rejected before the route handler runs.

    Args:
        request: FastAPI request.

    Raises:
        HTTPException: 429 Too Many Requests when no token is available.
    """

    limiter = get_rate_limiter(request)
    if limiter is None:
        return

    key = build_client_key(request)
    key_hash = _hash_limiter_key(key)

    decision = limiter.admit(key)
    if decision.admitted:
        logger.debug(
            "rate_limit.admitted",
            extra={
                "client_key": key,
            "key_hash": key_hash,
                "limit": decision.limit,
                "remaining": decision.remaining,
            },
        )
        return

    retry_after = decision.retry_after_seconds or 1
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_key": key,
            "key_hash": key_hash,
            "limit": decision.limit,
            "remaining": decision.remaining,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    app_settings = getattr(request.app.state, "settings", None)
    if app_settings is None or app_settings.rate_limit.include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(decision.limit)
        headers["X-RateLimit-Remaining"] = str(decision.remaining)

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Too Many Requests! Wait for {retry_after}s",
        headers=headers or None,
    )
