"""
FastAPI application factory with middleware, CORS, and request tracing.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from metrics_api import __version__
from metrics_api.auth import require_session
from metrics_api.config import get_settings
from metrics_api.routers import metrics, pushfire, somara, system, ulink
from metrics_api.routers.params import MetricsRequestError, envelope_response
from metrics_api.services import build_container
from metrics_api.utils.logging import configure_logging, get_logger

# Configure logging at module level
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Builds the service container on startup; on shutdown waits for pending
    cache writes and closes upstream clients.
    """
    settings = get_settings()

    logger.info(
        "application_startup",
        version=app.version,
        cache_backend=settings.cache_backend,
        dev_mode=settings.dev_mode,
    )

    if getattr(app.state, "container", None) is None:
        app.state.container = build_container(settings)

    yield

    await app.state.container.aclose()
    logger.info("application_shutdown")


def create_app() -> FastAPI:
    """
    Application factory.
    Creates and configures FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Metrics API",
        description="Multi-product dashboard metrics aggregation with caching",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Request tracing middleware
    @app.middleware("http")
    async def request_tracing_middleware(request: Request, call_next):
        """Add request ID to all requests and contain unexpected failures."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )

            return response
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "data": None,
                    "error": "Internal server error",
                    "cached": False,
                    "cachedAt": None,
                    "requestId": request_id,
                },
                headers={"X-Request-ID": request_id},
            )

    @app.exception_handler(MetricsRequestError)
    async def metrics_request_error_handler(request: Request, exc: MetricsRequestError):
        logger.info("metrics_request_rejected", path=request.url.path, reason=exc.message)
        return envelope_response(exc.to_result())

    # Health check endpoint
    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "version": app.version,
            "cache_backend": settings.cache_backend,
        }

    session = [Depends(require_session)]

    app.include_router(metrics.router, prefix="/api/metrics", tags=["Analytics"], dependencies=session)
    app.include_router(ulink.router, prefix="/api/metrics/ulink", tags=["ULink"], dependencies=session)
    app.include_router(
        pushfire.router, prefix="/api/metrics/pushfire", tags=["PushFire"], dependencies=session
    )
    app.include_router(
        somara.router, prefix="/api/metrics/somara", tags=["Somara"], dependencies=session
    )
    app.include_router(system.router, prefix="/api/products", tags=["Products"], dependencies=session)

    logger.info("application_configured", routers_count=5)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "metrics_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
