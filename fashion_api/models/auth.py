"""
Authentication and user management models.

Provides Pydantic schemas for:
- User records as stored in MongoDB
- Login and user creation requests
- Session token payloads and responses
- The identity context injected into request handlers
"""

from datetime import datetime
from typing import Any, Dict, Optional
from enum import Enum
import re

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Role Enum
# ============================================================================


class Role(str, Enum):
    """
    User roles.

    - ADMIN: manages the style list and user accounts
    - USER: regular visitor with a saved login
    """
    ADMIN = "admin"
    USER = "user"


# ============================================================================
# Stored Models
# ============================================================================


class UserDB(BaseModel):
    """User record as stored in the users collection."""
    id: str = Field(..., description="User ID (ObjectId hex)")
    username: str
    password_hash: str
    role: Role = Role.USER
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UserDB":
        """Build a user from a raw MongoDB document."""
        return cls(
            id=str(document["_id"]),
            username=document["username"],
            password_hash=document["password"],
            role=document.get("role", Role.USER.value),
            created_at=document.get("created_at"),
        )


# ============================================================================
# Pydantic Request Models
# ============================================================================


class LoginRequest(BaseModel):
    """Login request schema."""
    username: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Username"
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Password"
    )


class CreateUserRequest(BaseModel):
    """Create user request schema."""
    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Username (3-50 characters)"
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="Password (8-72 characters)"
    )
    role: Role = Field(
        default=Role.USER,
        description="User role"
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username format."""
        if not re.match(r"^[a-zA-Z0-9_.-]+$", v):
            raise ValueError(
                "Username must contain only letters, numbers, dots, hyphens, and underscores"
            )
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "stylist1",
                "password": "SecurePassword123!",
                "role": "user"
            }
        }
    }


# ============================================================================
# Pydantic Response Models
# ============================================================================


class TokenResponse(BaseModel):
    """Session token response schema."""
    access_token: str = Field(
        ...,
        min_length=10,
        description="Signed session token"
    )
    token_type: str = Field(
        default="bearer",
        description="Token type"
    )
    expires_in: int = Field(
        ...,
        gt=0,
        description="Token expiration time in seconds"
    )


class UserResponse(BaseModel):
    """User information response schema."""
    id: str
    username: str
    role: Role
    created_at: Optional[datetime] = None


class ErrorResponse(BaseModel):
    """Error response schema."""
    detail: str = Field(
        ...,
        min_length=1,
        description="Error message"
    )


# ============================================================================
# Token Models
# ============================================================================


class TokenPayload(BaseModel):
    """Claims carried by a session token."""
    sub: str = Field(..., description="Subject (user ID)")
    username: str
    role: Role
    exp: int = Field(..., description="Expiration timestamp (Unix epoch)")
    iat: int = Field(..., description="Issued at timestamp (Unix epoch)")


class CurrentUser(BaseModel):
    """
    Current authenticated user.

    Resolved from the session token by a dependency and passed to request
    handlers as the identity context.
    """
    id: str
    username: str
    role: Role

    def has_role(self, role: Role) -> bool:
        """Check if user has a specific role."""
        return self.role == role

    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.has_role(Role.ADMIN)
