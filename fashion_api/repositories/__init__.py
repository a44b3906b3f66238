"""MongoDB repositories for styles and users."""

from fashion_api.repositories.style_repo import StyleRepository, parse_style_id
from fashion_api.repositories.user_repo import UserRepository

__all__ = ["StyleRepository", "UserRepository", "parse_style_id"]
