"""In-memory token bucket rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from dnsqueryx.adapters.rate_limit.base import AbstractRateLimiter, AdmissionDecision

logger = logging.getLogger(__name__)

# Absorbs float drift from continuous refill (0.1 + 0.2 style errors)
_EPSILON = 1e-9


@dataclass
class _BucketState:
    tokens: float
    updated_at: float


class InMemoryTokenBucketRateLimiter(AbstractRateLimiter):
    """Rate limiter giving every key its own token bucket.

    Each bucket starts full with ``burst_size`` tokens and refills
    continuously at ``per_second`` tokens per second, never beyond
    ``burst_size``. An admitted request spends one token.

    Buckets that have refilled to capacity carry no information (a fresh
    bucket would be identical), so they are dropped by :meth:`prune`, which
    also runs automatically every ``prune_interval_seconds``.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        per_second: int,
        burst_size: int,
        prune_interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            per_second: Tokens added back to each bucket per second.
            burst_size: Bucket capacity.
            prune_interval_seconds: Minimum time between automatic sweeps of
                full buckets; 0 disables automatic sweeps.
            clock: Monotonic time source in seconds.

        Raises:
            ValueError: If per_second, burst_size or the prune interval are invalid.
        """
        if per_second < 1:
            raise ValueError("per_second must be >= 1")
        if burst_size < 1:
            raise ValueError("burst_size must be >= 1")
        if prune_interval_seconds < 0:
            raise ValueError("prune_interval_seconds must be >= 0")

        self._per_second = per_second
        self._burst_size = burst_size
        self._prune_interval = prune_interval_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._buckets: dict[str, _BucketState] = {}
        self._last_prune = clock()

    @property
    def per_second(self) -> int:
        return self._per_second

    @property
    def burst_size(self) -> int:
        return self._burst_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _refill(self, state: _BucketState, now: float) -> None:
        """Top up a bucket for the time elapsed since its last update."""
        elapsed = now - state.updated_at
        if elapsed <= 0:
            # Clock did not advance (or went backwards); never add tokens
            return
        state.tokens = min(
            float(self._burst_size),
            state.tokens + elapsed * self._per_second,
        )
        state.updated_at = now

    def _get_bucket(self, key: str, now: float) -> _BucketState:
        """Return the refilled bucket for key, creating a full one if missing."""
        state = self._buckets.get(key)
        if state is None:
            state = _BucketState(tokens=float(self._burst_size), updated_at=now)
            self._buckets[key] = state
        else:
            self._refill(state, now)
        return state

    def _seconds_until(self, state: _BucketState, tokens: float) -> float:
        """Seconds until the bucket holds at least ``tokens`` tokens."""
        missing = tokens - state.tokens
        if missing <= _EPSILON:
            return 0.0
        return missing / self._per_second

    def _maybe_prune(self, now: float) -> None:
        if self._prune_interval <= 0:
            return
        if now - self._last_prune < self._prune_interval:
            return
        self._prune_locked(now)

    def _prune_locked(self, now: float) -> int:
        stale = []
        for key, state in self._buckets.items():
            self._refill(state, now)
            if state.tokens >= self._burst_size - _EPSILON:
                stale.append(key)
        for key in stale:
            del self._buckets[key]
        self._last_prune = now
        if stale:
            logger.debug(
                "rate_limit.pruned",
                extra={"pruned": len(stale), "tracked": len(self._buckets)},
            )
        return len(stale)

    def prune(self) -> int:
        """Drop buckets that have refilled to capacity.

        Returns:
            Number of buckets removed.
        """
        with self._lock:
            return self._prune_locked(self._clock())

    def admit(self, key: str, *, cost: int = 1) -> AdmissionDecision:
        """Spend ``cost`` tokens from the key's bucket if it has them.

        Refill and spend happen under one lock, so concurrent callers for the
        same key can never both spend the same token.

        Args:
            key: Unique identifier for rate limiting (e.g., client address).
            cost: Tokens to spend (default 1).

        Returns:
            AdmissionDecision with the decision and bucket metadata.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            self._maybe_prune(now)
            state = self._get_bucket(key, now)

            if state.tokens + _EPSILON >= cost:
                state.tokens = max(0.0, state.tokens - cost)
                return AdmissionDecision(
                    admitted=True,
                    limit=self._burst_size,
                    remaining=int(state.tokens + _EPSILON),
                    reset_after_seconds=self._seconds_until(state, self._burst_size),
                    retry_after_seconds=None,
                )

            wait = self._seconds_until(state, cost)
            return AdmissionDecision(
                admitted=False,
                limit=self._burst_size,
                remaining=0,
                reset_after_seconds=self._seconds_until(state, self._burst_size),
                retry_after_seconds=max(1, int(math.ceil(wait))),
            )
