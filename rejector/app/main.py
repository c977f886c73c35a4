from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rejector import __version__
from rejector.app.api.routes import METRICS_PATH, build_routes, register_routes
from rejector.app.core.config import Settings, settings as default_settings
from rejector.app.core.logging import get_logger, setup_logging
from rejector.app.exceptions import RejectionServiceError
from rejector.app.middleware.rate_limit import RateLimitMiddleware
from rejector.app.middleware.request_filter import RequestFilterMiddleware
from rejector.app.middleware.request_id import RequestIdMiddleware
from rejector.app.middleware.security_headers import SecurityHeadersMiddleware
from rejector.app.runtime import RejectionRuntime


def create_app(
    settings: Optional[Settings] = None,
    runtime: Optional[RejectionRuntime] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to the environment-derived settings)
        runtime: Pre-built runtime, mainly for tests

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or default_settings
    runtime = runtime or RejectionRuntime(settings)

    setup_logging()
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the runtime on startup and close it on shutdown.

        A store initialization failure propagates and aborts startup.
        """
        async with runtime:
            logger.info(
                "Rejection as a Service started successfully",
                extra={"api_prefix": settings.api_prefix, "debug_mode": settings.debug},
            )
            yield
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Rejection as a Service",
        description="Returns a random rejection reason, rate limited per client IP",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.runtime = runtime
    app.state.settings = settings

    routes = build_routes(settings.api_prefix)
    health_path = f"{settings.api_prefix}/health"

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=runtime.limiter,
        route_limiters={
            health_path: runtime.health_limiter,
            METRICS_PATH: None,
        },
    )
    app.add_middleware(
        RequestFilterMiddleware,
        max_content_length=settings.max_content_length,
        suspicious_patterns=settings.suspicious_user_agent_patterns,
    )
    # Request ID wraps the filters so rejected requests are traceable too
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
        max_age=settings.cors_max_age,
    )

    register_routes(app, routes)

    @app.exception_handler(RejectionServiceError)
    async def rejection_service_error_handler(
        request: Request, exc: RejectionServiceError
    ) -> JSONResponse:
        """Translate service errors to their HTTP status and JSON body."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled exceptions.

        The traceback is logged server-side and never returned to the client.
        """
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={
                "request_id": request_id,
                "exception_type": type(exc).__name__,
            },
        )

        content = {
            "error": "Internal Server Error",
            "message": "Internal server error",
            "requestId": request_id,
        }
        if settings.debug:
            content["message"] = str(exc)
            content["exceptionType"] = type(exc).__name__
        return JSONResponse(status_code=500, content=content)

    return app


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "rejector.app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_config=None,
    )


# Create the application instance
app = create_app()
