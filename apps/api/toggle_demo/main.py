"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from toggle_demo.core.config import settings
from toggle_demo.core.features import FeatureToggleService, FlagClientRegistry
from toggle_demo.core.logging import configure_logging
from toggle_demo.api.routes import router as api_router
from toggle_demo.api.middleware import CorrelationIdMiddleware, LoggingMiddleware
from toggle_demo.utils.context import internal_error_response

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    configure_logging(
        level=settings.log_level,
        fmt=settings.log_format,
        sdk_level=settings.flags.sdk_log_level,
    )

    registry = FlagClientRegistry.from_settings(settings.flags)
    app.state.flag_clients = registry
    app.state.feature_toggles = FeatureToggleService(registry)
    logger.info(
        "Application started",
        backend=settings.flags.backend,
        projects=registry.projects(),
    )

    yield

    # Shutdown
    registry.close()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Two endpoints whose responses are shaped by feature flags from two "
            "independent ConfigCat projects (user-management, payment). "
            "Send `X-Correlation-ID` to trace a request across logs."
        ),
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Middleware (order matters - last added is outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    # Routes
    app.include_router(api_router, prefix="/api")

    # Exception handlers
    # Errors inside the middleware stack are answered by CorrelationIdMiddleware;
    # this covers anything raised outside it.
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        return internal_error_response(exc)

    # Health checks
    @app.get("/health")
    async def health_check():
        """Quick health check endpoint (for load balancers)."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
        }

    @app.get("/health/detailed")
    async def health_check_detailed(request: Request):
        """
        Detailed health check with component status.

        Reports the cache state of every flag client.
        """
        from toggle_demo.utils.health import HealthStatus, check_flag_clients

        toggles = getattr(request.app.state, "feature_toggles", None)
        health = await check_flag_clients(
            toggles.registry.items() if toggles is not None else [],
            version=settings.app_version,
            environment=settings.environment,
        )
        status_code = 503 if health.status == HealthStatus.UNHEALTHY else 200

        return JSONResponse(content=health.to_dict(), status_code=status_code)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "toggle_demo.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        workers=settings.workers,
        log_config=None,
    )
