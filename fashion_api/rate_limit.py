"""
Rate limiting with slowapi.

The limiter is keyed on the client address and shared by every router
that applies a limit. ``create_app`` switches it on or off and sets the
login limit from the settings it was given.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

DEFAULT_LOGIN_RATE_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address)

_login_rate_limit = DEFAULT_LOGIN_RATE_LIMIT


def configure_rate_limits(enabled: bool, login_limit: str) -> None:
    """
    Apply rate limit settings.

    Args:
        enabled: Whether limits are enforced
        login_limit: Login attempts allowed per client address, e.g. ``10/minute``
    """
    global _login_rate_limit
    limiter.enabled = enabled
    _login_rate_limit = login_limit


def login_rate_limit() -> str:
    """Current login rate limit."""
    return _login_rate_limit
