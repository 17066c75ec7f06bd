"""Rate limiting adapters.

This package keeps the limiter behind a small interface so the in-memory
sliding window can later be replaced by a shared store without changing the
HTTP layer.
"""

from todo_api.adapters.rate_limit.base import (
    UNKNOWN_CLIENT_KEY,
    AbstractRateLimiter,
    RateLimitDecision,
)
from todo_api.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = [
    "UNKNOWN_CLIENT_KEY",
    "AbstractRateLimiter",
    "InMemorySlidingWindowRateLimiter",
    "RateLimitDecision",
]
