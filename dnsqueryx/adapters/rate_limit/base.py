"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the storage backend can be swapped later (e.g., Redis) with minimal
changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class AdmissionDecision:
    """Result of an admission check.

    Attributes:
        admitted: Whether the request is allowed to proceed.
        limit: Bucket capacity (the burst size).
        remaining: Whole tokens left after this decision.
        reset_after_seconds: Seconds until the bucket is full again.
        retry_after_seconds: Seconds until a token is available, when rejected.
    """

    admitted: bool
    limit: int
    remaining: int
    reset_after_seconds: float
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-client rate limiters."""

    @abstractmethod
    def admit(self, key: str, *, cost: int = 1) -> AdmissionDecision:
        """Decide whether a request from ``key`` may proceed.

        Admitting spends ``cost`` units of the key's budget; rejecting spends
        nothing.

        Args:
            key: Client identity (e.g., source address).
            cost: Units to consume (default 1).

        Returns:
            AdmissionDecision describing whether it was admitted.
        """
        raise NotImplementedError
