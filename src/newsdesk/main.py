"""FastAPI application entry-point.

Assembles routers, middleware, exception handlers, and lifecycle hooks.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from typing import Callable

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from newsdesk.adapters.inbound.rest.routers import (
    ai_router,
    health_router,
    providers_router,
)
from newsdesk.config import Settings, get_settings
from newsdesk.dependencies import Runtime, build_runtime
from newsdesk.shared.errors import register_exception_handlers
from newsdesk.shared.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    RequestIdMiddleware,
)
from newsdesk.shared.observability import configure_logging

logger = structlog.get_logger(__name__)

RuntimeFactory = Callable[[Settings], Runtime]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifecycle — build the provider fleet, start the scheduler."""
    settings: Settings = app.state.settings
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )

    runtime: Runtime = app.state.runtime_factory(settings)
    app.state.runtime = runtime
    await runtime.orchestrator.start()
    logger.info(
        "application_starting",
        app=settings.app_name,
        env=settings.app_env.value,
        providers=runtime.orchestrator.registry.ids,
    )

    try:
        yield
    finally:
        await runtime.close()
        logger.info("application_shutdown")


def create_app(
    settings: Settings | None = None,
    *,
    runtime_factory: RuntimeFactory = build_runtime,
) -> FastAPI:
    """Application factory — creates a fully configured FastAPI instance."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Newsdesk AI",
        description=(
            "AI provider orchestration for the editorial back office: "
            "draft generation with priority failover, provider quarantine, "
            "and a status panel API."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.runtime_factory = runtime_factory

    # ── Middleware (order matters: first added = outermost) ───
    cors_origins = settings.cors_origins
    allow_all_origins = "*" in cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if allow_all_origins else cors_origins,
        allow_origin_regex=".*" if allow_all_origins else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # ── Exception handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── REST routers (versioned) ─────────────────────────────
    api_v1 = "/api/v1"
    app.include_router(health_router, prefix=api_v1)
    app.include_router(ai_router, prefix=api_v1)
    app.include_router(providers_router, prefix=api_v1)

    return app


# Uvicorn entry-point
app = create_app()
