"""
Authentication service for user login and session tokens.

Provides:
- Password hashing and verification (passlib + bcrypt)
- Session token creation and validation (python-jose JWT)
- User authentication against the users collection
- Resolving the identity context of a request from its token
"""

import structlog
from typing import Optional
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from jose import JWTError, jwt
from pydantic import ValidationError

from fashion_api.config import Settings, get_settings
from fashion_api.models.auth import (
    UserDB, CurrentUser, TokenPayload, Role,
    LoginRequest, TokenResponse
)
from fashion_api.repositories.user_repo import UserRepository

logger = structlog.get_logger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, user_repo: UserRepository, settings: Optional[Settings] = None):
        """
        Initialize auth service.

        Args:
            user_repo: User repository
            settings: Application settings (defaults to the cached settings)
        """
        self.user_repo = user_repo
        self.settings = settings or get_settings()

        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self.settings.password_bcrypt_rounds
        )

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password
        """
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password

        Returns:
            True if password matches, False otherwise
        """
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.warning("password_verify_failed", error=str(e))
            return False

    def create_access_token(
        self,
        user: UserDB,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a signed session token.

        Args:
            user: Authenticated user
            expires_delta: Custom expiration time (optional)

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.jwt_access_token_expire_minutes)

        now = datetime.now(timezone.utc)
        expire = now + expires_delta

        payload = {
            "sub": user.id,
            "username": user.username,
            "role": user.role.value,
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp())
        }

        token = jwt.encode(
            payload,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm
        )

        logger.info(
            "access_token_created",
            user_id=user.id,
            username=user.username,
            expires_in=expires_delta.total_seconds()
        )

        return token

    def decode_token(self, token: str) -> Optional[TokenPayload]:
        """
        Decode and validate a session token.

        Args:
            token: JWT token string

        Returns:
            Token payload or None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm]
            )
            return TokenPayload(**payload)

        except JWTError as e:
            logger.warning("token_decode_failed", error=str(e))
            return None
        except ValidationError as e:
            logger.warning("token_claims_invalid", error=str(e))
            return None

    def authenticate_user(self, login_request: LoginRequest) -> Optional[UserDB]:
        """
        Authenticate user with username and password.

        Args:
            login_request: Login credentials

        Returns:
            User if authenticated, None otherwise
        """
        user = self.user_repo.get_user_by_username(login_request.username)

        if not user:
            logger.warning("authentication_failed_user_not_found", username=login_request.username)
            return None

        if not self.verify_password(login_request.password, user.password_hash):
            logger.warning("authentication_failed_invalid_password", username=login_request.username)
            return None

        logger.info("user_authenticated", user_id=user.id, username=user.username)
        return user

    def login(self, login_request: LoginRequest) -> Optional[TokenResponse]:
        """
        Login user and create a session token.

        Args:
            login_request: Login credentials

        Returns:
            Token response or None if authentication failed
        """
        user = self.authenticate_user(login_request)

        if not user:
            return None

        return TokenResponse(
            access_token=self.create_access_token(user),
            token_type="bearer",
            expires_in=self.settings.jwt_access_token_expire_minutes * 60
        )

    def get_current_user(self, token: str) -> Optional[CurrentUser]:
        """
        Resolve the user a session token belongs to.

        The role is read from the stored user, so role changes apply to
        existing sessions.

        Args:
            token: JWT token string

        Returns:
            Current user or None if the token is invalid or the user is gone
        """
        payload = self.decode_token(token)

        if not payload:
            return None

        user = self.user_repo.get_user_by_id(payload.sub)

        if not user:
            logger.warning("get_current_user_failed_user_not_found", user_id=payload.sub)
            return None

        return CurrentUser(id=user.id, username=user.username, role=user.role)

    def register_user(self, username: str, password: str, role: Role = Role.USER) -> UserDB:
        """
        Hash a password and store a new user.

        Raises:
            UserAlreadyExistsError: If the username is taken
        """
        return self.user_repo.create_user(
            username=username,
            password_hash=self.hash_password(password),
            role=role
        )

    def ensure_admin(self, username: str, password: str) -> Optional[UserDB]:
        """
        Create an administrator unless the username already exists.

        Returns:
            The created administrator, or None if the user already existed
        """
        if self.user_repo.get_user_by_username(username):
            logger.info("bootstrap_admin_exists", username=username)
            return None

        user = self.register_user(username, password, Role.ADMIN)
        logger.info("bootstrap_admin_created", user_id=user.id, username=username)
        return user
