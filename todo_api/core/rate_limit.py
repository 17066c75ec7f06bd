"""Request throttling middleware for the HTTP layer.

This module wires the rate limiting adapter into FastAPI.

Design goals:
- Explicit ownership: the app factory builds one limiter per application and
  hands it to the middleware; nothing is cached at module level.
- Swap-friendly: the middleware only depends on AbstractRateLimiter.
- Throttled callers get a machine-readable 429 plus a Retry-After hint.

Rate limiting strategy:
- Sliding window per client address.
- The first entry of the forwarded-address header wins over the peer address,
  falling back to "unknown" (which is throttled like any other key).
"""

from __future__ import annotations

import hashlib
import logging
import math
from typing import Iterable, Mapping

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from todo_api.adapters.rate_limit.base import (
    UNKNOWN_CLIENT_KEY,
    AbstractRateLimiter,
    RateLimitDecision,
)
from todo_api.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from todo_api.core.config import AppSettings

logger = logging.getLogger(__name__)

DEFAULT_FORWARDED_HEADER = "X-Forwarded-For"


def build_rate_limiter(app_settings: AppSettings) -> AbstractRateLimiter:
    """Create the process-wide limiter from settings.

    Args:
        app_settings: Application settings carrying the rate limit knobs.

    Returns:
        AbstractRateLimiter: A fresh limiter with empty state.
    """
    return InMemorySlidingWindowRateLimiter(
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
    )


def resolve_client_key(
    headers: Mapping[str, str],
    peer_address: str | None,
    *,
    forwarded_header: str = DEFAULT_FORWARDED_HEADER,
) -> str:
    """Derive the throttling key for a request.

    Pure function: the result depends only on its arguments.

    Args:
        headers: Request headers (any mapping; the lookup ignores case).
        peer_address: Direct peer address, if known.
        forwarded_header: Name of the proxy header listing client addresses.

    Returns:
        str: Client key.

    Examples:
        >>> resolve_client_key({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}, "10.0.0.1")
        '203.0.113.7'
        >>> resolve_client_key({}, "198.51.100.2")
        '198.51.100.2'
        >>> resolve_client_key({}, None)
        'unknown'
    """
    wanted = forwarded_header.lower()
    for name, value in headers.items():
        if name.lower() != wanted:
            continue
        first = (value or "").split(",")[0].strip()
        if first:
            return first
        break

    if peer_address and peer_address.strip():
        return peer_address.strip()
    return UNKNOWN_CLIENT_KEY


def _hash_client_key(key: str) -> str:
    """Hash the client key for logging without exposing addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """Informational headers attached to every throttled route response."""
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(decision.reset_at),
    }


def build_rate_limited_response(
    decision: RateLimitDecision, window_seconds: int
) -> JSONResponse:
    """Build the 429 response for a rejected request.

    Args:
        decision: Rejecting decision from the limiter.
        window_seconds: Limiter window length, used for the wait hint.

    Returns:
        JSONResponse: 429 with JSON body, Retry-After and X-RateLimit-* headers.
    """
    wait_minutes = math.ceil(window_seconds / 60)
    retry_after = decision.retry_after_seconds or window_seconds

    headers = rate_limit_headers(decision)
    headers["X-RateLimit-Remaining"] = "0"
    headers["Retry-After"] = str(retry_after)

    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "message": (
                f"Too many requests. Limit: {decision.limit} requests "
                f"every {wait_minutes} minutes."
            ),
            "limit": decision.limit,
            "wait_minutes": wait_minutes,
        },
        headers=headers,
        media_type="application/json; charset=utf-8",
    )


class RateLimitMiddleware:
    """HTTP middleware admitting or rejecting requests per client key.

    Usage:
        app.middleware("http")(RateLimitMiddleware(limiter))
    """

    def __init__(
        self,
        limiter: AbstractRateLimiter,
        *,
        forwarded_header: str = DEFAULT_FORWARDED_HEADER,
        exempt_paths: Iterable[str] = (),
    ) -> None:
        self.limiter = limiter
        self.forwarded_header = forwarded_header
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, request: Request, call_next) -> Response:
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        peer = request.client.host if request.client else None
        key = resolve_client_key(
            request.headers, peer, forwarded_header=self.forwarded_header
        )
        decision = self.limiter.evaluate(key)

        log_extra = {
            "key_hash": _hash_client_key(key),
            "limit": decision.limit,
            "remaining": decision.remaining,
            "window_s": self.limiter.window_seconds,
        }

        if not decision.admitted:
            logger.warning(
                "rate_limit.exceeded",
                extra={**log_extra, "retry_after_s": decision.retry_after_seconds},
            )
            return build_rate_limited_response(decision, self.limiter.window_seconds)

        logger.debug("rate_limit.allowed", extra=log_extra)
        response = await call_next(request)
        response.headers.update(rate_limit_headers(decision))
        return response
