"""
FastAPI application entry point for the AgriLoop marketplace API.

This module provides the main FastAPI application with:
- Health and readiness endpoints
- Marketplace routers (auth, users, waste, orders, showcase, dashboard)
- Request/response logging with correlation ids
- Prometheus metrics
- OpenTelemetry distributed tracing
- CORS, security headers, and rate limiting
- MongoDB client lifecycle management
- Graceful startup and shutdown
"""

import structlog
import uvicorn
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from fastapi import FastAPI, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CONTENT_TYPE_LATEST

from agriloop import database
from agriloop.config import Settings, get_settings
from agriloop.errors import setup_error_handlers
from agriloop.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware, setup_rate_limiting
from agriloop.routers import ROUTERS
from agriloop_shared.logging import configure_logging
from agriloop_shared.metrics import get_marketplace_metrics, render_latest
from agriloop_shared.tracing import configure_tracing, shutdown_tracing

logger = structlog.get_logger(__name__)


# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - MongoDB client initialization and index creation
    - Graceful shutdown and resource cleanup
    """
    settings: Settings = app.state.settings

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    try:
        await database.init_mongo()
        logger.info(
            "application_started",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment
        )

        yield

    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        raise

    finally:
        logger.info("application_shutting_down")
        await database.close_mongo()
        if settings.tracing_enabled:
            shutdown_tracing()
        logger.info("application_shutdown_complete")


# ============================================================================
# Application Factory
# ============================================================================

def create_app(settings: Settings = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to the cached environment settings)

    Returns:
        Configured application
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name="agriloop-api",
        environment=settings.environment,
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Marketplace API connecting farmers who list agricultural waste "
            "with creators who turn it into products."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings

    # ------------------------------------------------------------------------
    # Middleware (last added runs first)
    # ------------------------------------------------------------------------

    setup_rate_limiting(app, settings)

    if settings.security_headers_enabled:
        app.add_middleware(
            SecurityHeadersMiddleware,
            require_https=settings.security_require_https,
            hsts_max_age=settings.security_hsts_max_age,
        )

    app.add_middleware(RequestLoggingMiddleware, metrics_enabled=settings.metrics_enabled)
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    if settings.cors_enabled:
        logger.info("configuring_cors", origins=settings.cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=settings.cors_allow_methods,
            allow_headers=settings.cors_allow_headers,
        )

    setup_error_handlers(app)

    # ------------------------------------------------------------------------
    # Tracing
    # ------------------------------------------------------------------------

    if settings.tracing_enabled:
        logger.info("initializing_tracing", endpoint=settings.tracing_otlp_endpoint)
        configure_tracing(
            service_name="agriloop-api",
            otlp_endpoint=settings.tracing_otlp_endpoint,
            sampling_rate=settings.tracing_sample_rate,
            service_version=settings.app_version,
        )
        FastAPIInstrumentor.instrument_app(app)

    # ------------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------------

    for router in ROUTERS:
        app.include_router(router, prefix=settings.api_prefix)

    register_operational_routes(app, settings)

    if settings.metrics_enabled:
        # create the marketplace counters so /metrics lists them from the start
        get_marketplace_metrics()

    return app


# ============================================================================
# Health, Readiness and Metrics Endpoints
# ============================================================================

def register_operational_routes(app: FastAPI, settings: Settings) -> None:
    """Attach /health, /ready and /metrics outside the API prefix."""

    @app.get("/health", tags=["Health"], response_class=JSONResponse)
    async def health_check() -> Dict[str, Any]:
        """
        Health check endpoint.

        Returns basic health status without checking dependencies.
        Use for container health checks.
        """
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment
        }

    @app.get("/ready", tags=["Health"], response_class=JSONResponse)
    async def readiness_check():
        """
        Readiness check endpoint.

        Pings MongoDB; answers 503 while it is unreachable.
        """
        checks = {"database": "healthy" if await database.ping() else "unhealthy"}

        all_healthy = all(value == "healthy" for value in checks.values())
        return JSONResponse(
            status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ready" if all_healthy else "not_ready",
                "service": settings.app_name,
                "version": settings.app_version,
                "checks": checks
            }
        )

    if settings.metrics_enabled:
        @app.get("/metrics", tags=["Monitoring"], response_class=PlainTextResponse)
        async def metrics() -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=render_latest(),
                media_type=CONTENT_TYPE_LATEST
            )


app = create_app()


# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    settings = get_settings()

    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "agriloop.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
