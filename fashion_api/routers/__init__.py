"""API routers: visitor pages, authentication and administration."""

from fashion_api.routers import admin, auth, pages

__all__ = ["admin", "auth", "pages"]
