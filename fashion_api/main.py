"""
FastAPI application entry point for the Fashion Forecast service.

This module provides the main FastAPI application with:
- Health and readiness endpoints
- Session authentication and admin authorization (via dependencies)
- Request logging with correlation IDs
- Prometheus metrics
- CORS, security headers, and login rate limiting
- MongoDB client and outbound HTTP session lifecycle
- Translation of domain errors into redirects and error responses
"""

import time
import uuid
import aiohttp
import structlog
import uvicorn
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Any, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from fashion_api.config import get_settings, Settings
from fashion_api.exceptions import (
    CityNotFoundError,
    InvalidStyleIdError,
    LoginRequiredError,
    UpstreamServiceError,
)
from fashion_api.rate_limit import configure_rate_limits, limiter
from fashion_api.repositories.user_repo import UserRepository
from fashion_api.routers import admin, auth, pages
from fashion_api.services.auth_service import AuthService
from fashion_shared.logging import configure_logging

logger = structlog.get_logger(__name__)

# ============================================================================
# Prometheus Metrics
# ============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"]
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method", "endpoint"]
)


def _endpoint_label(request: Request) -> str:
    """Route template for metrics labels, falling back to the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - MongoDB client creation and user index setup
    - Optional bootstrap administrator
    - Shared aiohttp session for the weather and photo clients
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
        app.state.mongo_client = MongoClient(
            settings.database_url,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        )
        app.state.database = app.state.mongo_client[settings.mongodb_database]
        logger.info("database_client_created", database=settings.mongodb_database)

        user_repo = UserRepository(app.state.database[settings.users_collection])
        user_repo.ensure_indexes()

        if settings.bootstrap_admin_username and settings.bootstrap_admin_password:
            AuthService(user_repo, settings).ensure_admin(
                settings.bootstrap_admin_username,
                settings.bootstrap_admin_password
            )

        app.state.http_session = aiohttp.ClientSession()

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

        http_session: Optional[aiohttp.ClientSession] = getattr(app.state, "http_session", None)
        if http_session is not None:
            await http_session.close()
            app.state.http_session = None

        mongo_client: Optional[MongoClient] = getattr(app.state, "mongo_client", None)
        if mongo_client is not None:
            mongo_client.close()
            app.state.mongo_client = None
            app.state.database = None
            logger.info("database_client_closed")

        logger.info("application_shutdown_complete")


# ============================================================================
# Middleware
# ============================================================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging and metrics."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
        start_time = time.time()

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_ip=client_ip
        )

        http_requests_in_progress.labels(method=method, endpoint=path).inc()
        try:
            response = await call_next(request)

            duration = time.time() - start_time
            endpoint = _endpoint_label(request)

            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration:.3f}s"
            )

            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            raise

        finally:
            http_requests_in_progress.labels(method=method, endpoint=path).dec()
            structlog.contextvars.unbind_contextvars("correlation_id")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


# ============================================================================
# Exception Handlers
# ============================================================================

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None)
    )


async def invalid_style_id_handler(request: Request, exc: InvalidStyleIdError):
    """Send malformed style identifiers back to the style list."""
    logger.warning("invalid_style_id", path=request.url.path, style_id=exc.style_id)
    return RedirectResponse(url=admin.ADMIN_HOME, status_code=status.HTTP_303_SEE_OTHER)


async def login_required_handler(request: Request, exc: LoginRequiredError):
    """Send unauthenticated visitors to the login page."""
    logger.info("login_redirect", path=request.url.path)
    return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)


async def city_not_found_handler(request: Request, exc: CityNotFoundError):
    """Handle unknown cities."""
    logger.warning("city_not_found", path=request.url.path, city=exc.city)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "City not found"}
    )


async def upstream_error_handler(request: Request, exc: UpstreamServiceError):
    """Handle weather and photo service failures."""
    logger.error(
        "upstream_service_error",
        path=request.url.path,
        service=exc.service,
        status=exc.status,
        error=str(exc)
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"}
    )


async def database_error_handler(request: Request, exc: PyMongoError):
    """Handle MongoDB failures."""
    logger.error(
        "database_error",
        path=request.url.path,
        error=str(exc)
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"}
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"}
    )


# ============================================================================
# Health, Readiness and Metrics Endpoints
# ============================================================================

def health_check(request: Request) -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns basic health status without checking dependencies.
    """
    settings: Settings = request.app.state.settings
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


def readiness_check(request: Request) -> JSONResponse:
    """
    Readiness check endpoint.

    Verifies MongoDB answers a ping.
    """
    settings: Settings = request.app.state.settings
    checks = {"database": "unknown"}

    mongo_client: Optional[MongoClient] = getattr(request.app.state, "mongo_client", None)
    try:
        if mongo_client is None:
            raise RuntimeError("database client not initialized")
        mongo_client.admin.command("ping")
        checks["database"] = "healthy"
    except (PyMongoError, RuntimeError) as e:
        logger.error("database_health_check_failed", error=str(e))
        checks["database"] = "unhealthy"

    all_healthy = all(state == "healthy" for state in checks.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if all_healthy else "not_ready",
            "service": settings.app_name,
            "version": settings.app_version,
            "checks": checks
        }
    )


def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# ============================================================================
# Application Factory
# ============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to the cached settings)

    Returns:
        Configured application
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name="fashion-api",
        environment=settings.environment,
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Style list management and weather-matched outfit inspiration "
            "from stock photo search."
        ),
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings

    configure_rate_limits(settings.rate_limit_enabled, settings.login_rate_limit)
    app.state.limiter = limiter

    if settings.cors_enabled:
        logger.info("configuring_cors", origins=settings.cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    if settings.security_headers_enabled:
        app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(InvalidStyleIdError, invalid_style_id_handler)
    app.add_exception_handler(LoginRequiredError, login_required_handler)
    app.add_exception_handler(CityNotFoundError, city_not_found_handler)
    app.add_exception_handler(UpstreamServiceError, upstream_error_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/ready", readiness_check, methods=["GET"], tags=["Health"])
    if settings.metrics_enabled:
        app.add_api_route(
            "/metrics",
            metrics,
            methods=["GET"],
            tags=["Monitoring"],
            response_class=PlainTextResponse
        )

    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(admin.router)

    return app


app = create_app()


if __name__ == "__main__":
    """
    Run the application with Uvicorn for development.
    """
    settings = get_settings()

    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "fashion_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
