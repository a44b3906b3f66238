"""
FastAPI dependency injection for database, clients, and identity.

Provides injectable dependencies for:
- The MongoDB database opened during application startup
- Repository and service instances
- External HTTP clients sharing one aiohttp session
- The identity context resolved from the session cookie or bearer token
- Authorization (admin role)

Shared resources live on ``app.state`` (see ``fashion_api.main.lifespan``)
and reach handlers only through these dependencies, so tests can replace
any of them with ``app.dependency_overrides``.
"""

import aiohttp
import structlog
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pymongo.database import Database

from fashion_api.clients.photos import PhotoSearchClient
from fashion_api.clients.weather import WeatherClient
from fashion_api.config import Settings, get_settings
from fashion_api.exceptions import LoginRequiredError
from fashion_api.models.auth import CurrentUser, Role
from fashion_api.repositories.style_repo import StyleRepository
from fashion_api.repositories.user_repo import UserRepository
from fashion_api.services.auth_service import AuthService
from fashion_api.services.explore_service import ExploreService
from fashion_api.services.keywords import get_keyword_table
from fashion_shared.metrics import ForecastMetrics, get_metrics

logger = structlog.get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


# ============================================================================
# SETTINGS AND SHARED RESOURCES
# ============================================================================


def get_settings_dependency(request: Request) -> Settings:
    """
    Get the settings the application was created with.

    Returns:
        Settings instance
    """
    return getattr(request.app.state, "settings", None) or get_settings()


def get_database(request: Request) -> Database:
    """
    Get the MongoDB database opened at startup.

    Raises:
        RuntimeError: If the application has not been started
    """
    database = getattr(request.app.state, "database", None)
    if database is None:
        logger.error("database_not_initialized")
        raise RuntimeError("Database not initialized. Is the application lifespan running?")
    return database


def get_http_session(request: Request) -> aiohttp.ClientSession:
    """
    Get the aiohttp session opened at startup.

    Raises:
        RuntimeError: If the application has not been started
    """
    session = getattr(request.app.state, "http_session", None)
    if session is None:
        logger.error("http_session_not_initialized")
        raise RuntimeError("HTTP session not initialized. Is the application lifespan running?")
    return session


def get_metrics_dependency() -> ForecastMetrics:
    """Get outbound call metrics."""
    return get_metrics()


# ============================================================================
# REPOSITORY AND SERVICE DEPENDENCIES
# ============================================================================


def get_style_repository(
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dependency)
) -> StyleRepository:
    """Get style repository bound to the styledata collection."""
    return StyleRepository(db[settings.styles_collection])


def get_user_repository(
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dependency)
) -> UserRepository:
    """Get user repository bound to the users collection."""
    return UserRepository(db[settings.users_collection])


def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings_dependency)
) -> AuthService:
    """Get authentication service."""
    return AuthService(user_repo, settings)


def get_weather_client(
    session: aiohttp.ClientSession = Depends(get_http_session),
    settings: Settings = Depends(get_settings_dependency),
    metrics: ForecastMetrics = Depends(get_metrics_dependency)
) -> WeatherClient:
    """Get OpenWeatherMap client."""
    return WeatherClient(
        session,
        api_key=settings.weather_api_key,
        base_url=settings.weather_api_url,
        units=settings.weather_units,
        timeout_seconds=settings.http_timeout_seconds,
        metrics=metrics,
    )


def get_photo_client(
    session: aiohttp.ClientSession = Depends(get_http_session),
    settings: Settings = Depends(get_settings_dependency),
    metrics: ForecastMetrics = Depends(get_metrics_dependency)
) -> PhotoSearchClient:
    """Get Pexels search client."""
    return PhotoSearchClient(
        session,
        api_key=settings.pexels_api_key,
        base_url=settings.photo_search_url,
        per_page=settings.photo_page_size,
        timeout_seconds=settings.http_timeout_seconds,
        metrics=metrics,
    )


def get_explore_service(
    weather_client: WeatherClient = Depends(get_weather_client),
    photo_client: PhotoSearchClient = Depends(get_photo_client),
    settings: Settings = Depends(get_settings_dependency),
    metrics: ForecastMetrics = Depends(get_metrics_dependency)
) -> ExploreService:
    """Get explore service using the configured keyword table."""
    return ExploreService(
        weather_client,
        photo_client,
        keyword_table=get_keyword_table(settings.weather_keyword_table),
        metrics=metrics,
    )


# ============================================================================
# AUTHENTICATION DEPENDENCIES
# ============================================================================


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings_dependency)
) -> Optional[str]:
    """
    Extract the session token.

    The session cookie wins; an ``Authorization: Bearer`` header is
    accepted for API clients.

    Returns:
        Token string or None
    """
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials

    return None


def get_optional_user(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[CurrentUser]:
    """
    Get current user if authenticated, None otherwise.

    Does not raise for missing or invalid tokens.
    """
    if not token:
        return None
    return auth_service.get_current_user(token)


def get_current_user(
    current_user: Optional[CurrentUser] = Depends(get_optional_user)
) -> CurrentUser:
    """
    Get current authenticated user.

    Raises:
        LoginRequiredError: If the request carries no valid session
    """
    if current_user is None:
        logger.warning("auth_login_required")
        raise LoginRequiredError()
    return current_user


def require_admin(
    current_user: CurrentUser = Depends(get_current_user)
) -> CurrentUser:
    """
    Require admin role.

    Raises:
        HTTPException: If user is not admin
    """
    if not current_user.has_role(Role.ADMIN):
        logger.warning(
            "access_denied_admin_required",
            user_id=current_user.id,
            username=current_user.username,
            role=current_user.role.value
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )

    return current_user


# ============================================================================
# UTILITY DEPENDENCIES
# ============================================================================


def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.

    Checks X-Forwarded-For header first (for proxies),
    then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
