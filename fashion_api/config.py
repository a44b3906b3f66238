"""
FastAPI application configuration using Pydantic Settings.

Provides centralized configuration for:
- Database connection (MongoDB)
- External services (OpenWeatherMap, Pexels)
- Session tokens and password hashing
- API settings (CORS, rate limiting, security headers)
- Logging and monitoring

All settings support environment variable overrides and .env file loading.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator
from typing import List, Optional
from functools import lru_cache
from urllib.parse import quote_plus


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    prefix "FASHION_" (e.g., FASHION_MONGODB_URL). The external API keys
    also accept the legacy names WEATHER_API and PEXELS_API, and the
    database credentials the legacy DB_USER, DB_PWD and DB_HOST.

    Environment variables are loaded from:
    1. System environment
    2. .env file in the current directory
    3. Default values defined below
    """

    # =========================================================================
    # API Settings
    # =========================================================================

    app_name: str = Field(
        default="Fashion Forecast",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="API version"
    )

    debug: bool = Field(
        default=False,
        description="Debug mode - enables verbose logging and error traces"
    )
    environment: str = Field(
        default="production",
        description="Environment: development|staging|production"
    )

    host: str = Field(
        default="0.0.0.0",
        description="API bind host"
    )
    port: int = Field(
        default=8888,
        description="API bind port",
        gt=0,
        lt=65536,
        validation_alias=AliasChoices("FASHION_PORT", "PORT"),
    )

    # =========================================================================
    # Database Settings (MongoDB)
    # =========================================================================

    mongodb_url: Optional[str] = Field(
        default=None,
        description="MongoDB connection URL; built from db_user/db_password/db_host when unset"
    )
    db_user: Optional[str] = Field(
        default=None,
        description="MongoDB Atlas user",
        validation_alias=AliasChoices("FASHION_DB_USER", "DB_USER"),
    )
    db_password: Optional[str] = Field(
        default=None,
        description="MongoDB Atlas password",
        validation_alias=AliasChoices("FASHION_DB_PASSWORD", "DB_PWD"),
    )
    db_host: Optional[str] = Field(
        default=None,
        description="MongoDB Atlas cluster host",
        validation_alias=AliasChoices("FASHION_DB_HOST", "DB_HOST"),
    )
    mongodb_database: str = Field(
        default="fashionforecast",
        description="Database name"
    )
    styles_collection: str = Field(
        default="styledata",
        description="Collection holding style records"
    )
    users_collection: str = Field(
        default="users",
        description="Collection holding user records"
    )
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long pymongo waits for a reachable server (milliseconds)",
        gt=0
    )

    # =========================================================================
    # External Services
    # =========================================================================

    weather_api_key: str = Field(
        default="",
        description="OpenWeatherMap API key",
        validation_alias=AliasChoices("FASHION_WEATHER_API_KEY", "WEATHER_API"),
    )
    weather_api_url: str = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        description="OpenWeatherMap current weather endpoint"
    )
    weather_units: str = Field(
        default="metric",
        description="Units requested from the weather service"
    )

    pexels_api_key: str = Field(
        default="",
        description="Pexels API key",
        validation_alias=AliasChoices("FASHION_PEXELS_API_KEY", "PEXELS_API"),
    )
    photo_search_url: str = Field(
        default="https://api.pexels.com/v1/search",
        description="Pexels photo search endpoint"
    )
    photo_page_size: int = Field(
        default=5,
        description="Photos requested per search",
        gt=0,
        le=80
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        description="Total timeout for each outbound HTTP call (seconds)",
        gt=0
    )

    # =========================================================================
    # Explore Page Defaults
    # =========================================================================

    default_city: str = Field(
        default="toronto",
        description="City used when the explore request names none"
    )
    default_gender: str = Field(
        default="Woman",
        description="Gender used when the explore request names none"
    )
    weather_keyword_table: str = Field(
        default="accessory",
        description="Weather keyword table used by explore: accessory|outfit"
    )

    # =========================================================================
    # Session Token Settings
    # =========================================================================

    jwt_secret_key: str = Field(
        default="change-this-secret-key-in-production-use-an-env-var-minimum-32-chars",
        description="Secret key for session token signing (MUST be changed in production)",
        min_length=32
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    jwt_access_token_expire_minutes: int = Field(
        default=60,
        description="Session lifetime in minutes",
        gt=0,
        le=1440
    )
    session_cookie_name: str = Field(
        default="session",
        description="Cookie carrying the session token"
    )
    session_cookie_secure: bool = Field(
        default=False,
        description="Only send the session cookie over HTTPS"
    )

    # =========================================================================
    # Password Hashing Settings
    # =========================================================================

    password_bcrypt_rounds: int = Field(
        default=12,
        description="BCrypt hash rounds (higher = slower but more secure)",
        ge=4,
        le=14
    )

    bootstrap_admin_username: Optional[str] = Field(
        default=None,
        description="Administrator created at startup when missing"
    )
    bootstrap_admin_password: Optional[str] = Field(
        default=None,
        description="Password for the bootstrap administrator"
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_enabled: bool = Field(
        default=False,
        description="Enable CORS middleware"
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:8888"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials (cookies, authorization headers) in CORS"
    )

    # =========================================================================
    # Rate Limiting and Security
    # =========================================================================

    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting"
    )
    login_rate_limit: str = Field(
        default="10/minute",
        description="Login attempts allowed per client address"
    )
    security_headers_enabled: bool = Field(
        default=True,
        description="Enable security headers (X-Frame-Options, etc.)"
    )

    # =========================================================================
    # Logging and Monitoring
    # =========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )
    metrics_enabled: bool = Field(
        default=True,
        description="Expose Prometheus metrics"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Validate JWT algorithm is a supported HMAC algorithm."""
        allowed = ["HS256", "HS384", "HS512"]
        if v not in allowed:
            raise ValueError(f"jwt_algorithm must be one of {allowed}, got: {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        allowed = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("weather_keyword_table")
    @classmethod
    def validate_weather_keyword_table(cls, v: str) -> str:
        """Validate the keyword table name."""
        allowed = ["accessory", "outfit"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"weather_keyword_table must be one of {allowed}, got: {v}")
        return v_lower

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def database_url(self) -> str:
        """
        Resolve the MongoDB connection URL.

        An explicit mongodb_url wins. Otherwise, when db_host is set, an
        Atlas SRV URL is assembled from the credentials; failing both, a
        local server is assumed.
        """
        if self.mongodb_url:
            return self.mongodb_url
        if self.db_host:
            credentials = ""
            if self.db_user:
                credentials = quote_plus(self.db_user)
                if self.db_password:
                    credentials += ":" + quote_plus(self.db_password)
                credentials += "@"
            return f"mongodb+srv://{credentials}{self.db_host}/"
        return "mongodb://localhost:27017/"

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="FASHION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once and shared
    across the application.

    Returns:
        Settings: Cached settings instance
    """
    return Settings()


def clear_settings_cache():
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
