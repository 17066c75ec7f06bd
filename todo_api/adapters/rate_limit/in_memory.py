"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: one lock guards prune, count and append for every key.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from typing import Callable

from todo_api.adapters.rate_limit.base import (
    UNKNOWN_CLIENT_KEY,
    AbstractRateLimiter,
    RateLimitDecision,
)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping a log of admission timestamps per key.

    Only admissions within the trailing ``window_seconds`` count toward the
    quota. Timestamps older than ``now - window_seconds`` are evicted before
    each decision; an entry exactly ``window_seconds`` old still counts.
    Rejected requests are never recorded, so hammering a full window neither
    consumes nor extends it.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
        sweep_interval_seconds: float | None = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Length of the sliding window in seconds.
            clock: Time source returning UNIX time in seconds.
            sweep_interval_seconds: Minimum time between sweeps that drop keys
                with no timestamp left in the window (default: window_seconds).

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._log_by_key: dict[str, deque[float]] = {}
        self._sweep_interval = (
            window_seconds if sweep_interval_seconds is None else sweep_interval_seconds
        )
        self._last_sweep: float | None = None

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def __len__(self) -> int:
        """Number of keys currently holding at least one timestamp."""
        with self._lock:
            return len(self._log_by_key)

    def _prune(self, key: str, now: float) -> deque[float] | None:
        """Evict expired timestamps for key, dropping the record when empty.

        Must be called with the lock held.
        """
        log = self._log_by_key.get(key)
        if log is None:
            return None

        cutoff = now - self._window_seconds
        while log and log[0] < cutoff:
            log.popleft()

        if not log:
            del self._log_by_key[key]
            return None
        return log

    def _sweep_stale(self, now: float) -> None:
        """Drop every key whose newest timestamp has left the window.

        Runs at most once per sweep interval. Must be called with the lock held.
        """
        if self._last_sweep is not None and now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now

        cutoff = now - self._window_seconds
        stale = [key for key, log in self._log_by_key.items() if not log or log[-1] < cutoff]
        for key in stale:
            del self._log_by_key[key]

    def _reset_at(self, now: float) -> int:
        return int(math.ceil(now + self._window_seconds))

    def evaluate(self, client_key: str, now: float | None = None) -> RateLimitDecision:
        """Prune, count and (when admitting) record one request atomically.

        Args:
            client_key: Caller identity; empty or non-string keys are
                bucketed under ``"unknown"``.
            now: UNIX time in seconds; defaults to the configured clock.

        Returns:
            RateLimitDecision with the admission outcome and header values.
        """
        key = client_key if isinstance(client_key, str) and client_key else UNKNOWN_CLIENT_KEY
        if now is None:
            now = self._clock()

        with self._lock:
            self._sweep_stale(now)
            log = self._prune(key, now)
            prior_count = len(log) if log is not None else 0

            if prior_count >= self._limit:
                return RateLimitDecision(
                    admitted=False,
                    limit=self._limit,
                    remaining=0,
                    reset_at=self._reset_at(now),
                    retry_after_seconds=self._window_seconds,
                )

            if log is None:
                log = self._log_by_key[key] = deque()
            log.append(now)

        return RateLimitDecision(
            admitted=True,
            limit=self._limit,
            remaining=max(0, self._limit - (prior_count + 1)),
            reset_at=self._reset_at(now),
        )
