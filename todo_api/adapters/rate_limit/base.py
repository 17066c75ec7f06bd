"""Rate limiter interfaces.

The HTTP layer depends on this abstraction rather than the concrete store,
so the in-memory implementation can be swapped without touching middleware.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

UNKNOWN_CLIENT_KEY = "unknown"


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of evaluating one request against the limiter.

    Attributes:
        admitted: Whether the request may proceed downstream.
        limit: Max requests per window.
        remaining: Requests left in the window after this one (0 when rejected).
        reset_at: UNIX epoch seconds reported in ``X-RateLimit-Reset``.
        retry_after_seconds: Suggested wait in seconds; None when admitted.
    """

    admitted: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for per-client rate limiters."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Maximum admitted requests per window."""

    @property
    @abstractmethod
    def window_seconds(self) -> int:
        """Window length in seconds."""

    @abstractmethod
    def evaluate(self, client_key: str, now: float | None = None) -> RateLimitDecision:
        """Decide admission for one request from ``client_key``.

        Implementations must never raise: they sit on the path of every request.

        Args:
            client_key: Identity of the caller (e.g., client IP address).
            now: UNIX time in seconds; the limiter clock is used when omitted.

        Returns:
            RateLimitDecision describing the outcome.
        """
        raise NotImplementedError
