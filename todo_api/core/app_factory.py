from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (logging, storage, throttle, middleware,
handlers, routers) so tests can build isolated apps from custom settings.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from todo_api.api.routes import health_router, tasks_router
from todo_api.core.config import Settings, settings as default_settings, split_csv
from todo_api.core.exception_handlers import setup_exception_handlers
from todo_api.core.logging import configure_logging
from todo_api.core.middleware import RequestIdMiddleware
from todo_api.core.openapi import apply_openapi_customizations
from todo_api.core.rate_limit import RateLimitMiddleware, build_rate_limiter
from todo_api.db.database import build_engine, build_session_factory, init_db


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    The rate limiter is built here, once per application, and stored on
    ``app.state.rate_limiter`` alongside the database engine.

    Args:
        settings: Settings to build from; the global instance when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title="Task List API",
        description=(
            "CRUD API for a task list backed by a relational table. Every "
            "request is throttled per client address with a sliding window "
            "and reports X-RateLimit-* headers."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
    )

    engine = build_engine(cfg.database)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # Middleware: the last one registered runs first.
    exempt_paths = split_csv(cfg.app.rate_limit_exempt_paths)
    app.state.rate_limiter = None
    if cfg.app.rate_limit_enabled:
        limiter = build_rate_limiter(cfg.app)
        app.state.rate_limiter = limiter
        app.middleware("http")(
            RateLimitMiddleware(
                limiter,
                forwarded_header=cfg.app.rate_limit_forwarded_header,
                exempt_paths=exempt_paths,
            )
        )
    app.middleware("http")(RequestIdMiddleware(cfg.log.request_id_header))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=split_csv(cfg.app.cors_allow_origins) or ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["X-Requested-With", "Content-Type", "Accept", "Origin", "Authorization"],
        expose_headers=[
            "Retry-After",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            cfg.log.request_id_header,
        ],
        max_age=86400,
    )

    setup_exception_handlers(app)

    app.include_router(tasks_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(
        app,
        throttled=cfg.app.rate_limit_enabled,
        exempt_paths=exempt_paths,
    )

    return app
