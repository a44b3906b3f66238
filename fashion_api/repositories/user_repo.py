"""
User repository for database operations.

Provides lookups and inserts for the users collection using pymongo.
Documents are stored as
``{"_id": ObjectId, "username": str, "password": <bcrypt hash>, "role": str}``.
"""

import structlog
from datetime import datetime, timezone
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from fashion_api.exceptions import UserAlreadyExistsError
from fashion_api.models.auth import Role, UserDB

logger = structlog.get_logger(__name__)


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, collection: Collection):
        """
        Initialize user repository.

        Args:
            collection: users collection
        """
        self.collection = collection

    def ensure_indexes(self) -> None:
        """Create the unique username index."""
        self.collection.create_index([("username", ASCENDING)], unique=True)
        logger.info("user_indexes_ensured")

    def create_user(self, username: str, password_hash: str, role: Role = Role.USER) -> UserDB:
        """
        Create a new user.

        Args:
            username: Username
            password_hash: Hashed password
            role: User role

        Returns:
            Created user

        Raises:
            UserAlreadyExistsError: If the username is taken
        """
        document = {
            "username": username,
            "password": password_hash,
            "role": role.value,
            "created_at": datetime.now(timezone.utc),
        }

        try:
            result = self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning("username_already_exists", username=username)
            raise UserAlreadyExistsError(username) from e
        except Exception as e:
            logger.error("user_create_failed", error=str(e), username=username)
            raise

        document["_id"] = result.inserted_id
        logger.info("user_created", user_id=str(result.inserted_id), username=username, role=role.value)
        return UserDB.from_document(document)

    def get_user_by_id(self, user_id: str) -> Optional[UserDB]:
        """
        Get user by ID.

        Args:
            user_id: User ID (ObjectId hex)

        Returns:
            User or None if not found or the ID is malformed
        """
        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            logger.debug("user_id_invalid", user_id=user_id)
            return None

        try:
            document = self.collection.find_one({"_id": object_id})
        except Exception as e:
            logger.error("user_get_by_id_failed", error=str(e), user_id=user_id)
            raise

        if not document:
            logger.debug("user_not_found", user_id=user_id)
            return None

        return UserDB.from_document(document)

    def get_user_by_username(self, username: str) -> Optional[UserDB]:
        """
        Get user by username.

        Args:
            username: Username

        Returns:
            User or None if not found
        """
        try:
            document = self.collection.find_one({"username": username})
        except Exception as e:
            logger.error("user_get_by_username_failed", error=str(e), username=username)
            raise

        if not document:
            logger.debug("user_not_found", username=username)
            return None

        return UserDB.from_document(document)
