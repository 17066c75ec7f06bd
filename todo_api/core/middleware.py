"""HTTP middleware for request ID propagation and access logging.

The middleware:
- Accepts the incoming request id header (LOG_REQUEST_ID_HEADER) or generates a UUID
- Stores request_id in contextvars for access throughout the request lifecycle
- Injects request_id and total duration into response headers
- Emits one ``request.completed`` log event per request

Usage:
    app.middleware("http")(RequestIdMiddleware(settings.log.request_id_header))
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from todo_api.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware:
    """Attach a correlation id to the request context and the response.

    Registered outermost among the HTTP middlewares so throttled (429)
    responses carry the id as well.
    """

    def __init__(self, header_name: str = DEFAULT_REQUEST_ID_HEADER) -> None:
        self.header_name = header_name

    async def __call__(self, request: Request, call_next) -> Response:
        """Run the downstream handler with the request id in context.

        Args:
            request: The incoming HTTP request object.
            call_next: The next middleware/route handler in the stack.

        Returns:
            Response: The downstream response with the request id and
                ``X-Request-Duration-ms`` headers added.
        """
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        set_request_id(request_id)
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "request.completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
        finally:
            clear_request_id()

        response.headers[self.header_name] = request_id
        response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
        return response
