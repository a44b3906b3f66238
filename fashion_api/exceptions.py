"""
Domain exceptions for the Fashion Forecast service.

Handlers registered in ``fashion_api.main`` translate these into HTTP
responses: input problems become redirects or 4xx, upstream failures
become a generic 500.
"""

from typing import Optional


class FashionForecastError(Exception):
    """Base class for all service errors."""


class InvalidStyleIdError(FashionForecastError):
    """A style identifier is missing or not a valid ObjectId."""

    def __init__(self, style_id: Optional[str]):
        self.style_id = style_id
        super().__init__(f"Invalid style id: {style_id!r}")


class UserAlreadyExistsError(FashionForecastError):
    """A user with the same username already exists."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' already exists")


class LoginRequiredError(FashionForecastError):
    """The request needs an authenticated session."""


class CityNotFoundError(FashionForecastError):
    """The weather service does not know the requested city."""

    def __init__(self, city: str):
        self.city = city
        super().__init__(f"City not found: {city}")


class UpstreamServiceError(FashionForecastError):
    """An external HTTP service failed or returned an unusable response."""

    def __init__(self, service: str, message: str, status: Optional[int] = None):
        self.service = service
        self.status = status
        super().__init__(f"{service}: {message}")
