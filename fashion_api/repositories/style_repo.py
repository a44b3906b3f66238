"""
Style repository for database operations.

Provides CRUD operations for the styledata collection using pymongo.
Documents are stored as ``{"_id": ObjectId, "stylename": str}``.
"""

import structlog
from typing import List, Optional
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection

from fashion_api.exceptions import InvalidStyleIdError
from fashion_api.models.style import Style

logger = structlog.get_logger(__name__)


def parse_style_id(style_id: Optional[str]) -> ObjectId:
    """
    Convert a hex style identifier to an ObjectId.

    Args:
        style_id: 24-character hex string

    Returns:
        ObjectId

    Raises:
        InvalidStyleIdError: If the identifier is missing or malformed
    """
    if not style_id:
        raise InvalidStyleIdError(style_id)
    try:
        return ObjectId(style_id)
    except (InvalidId, TypeError) as e:
        raise InvalidStyleIdError(style_id) from e


class StyleRepository:
    """Repository for style database operations."""

    def __init__(self, collection: Collection):
        """
        Initialize style repository.

        Args:
            collection: styledata collection
        """
        self.collection = collection

    def list_styles(self) -> List[Style]:
        """
        Get all styles in insertion order.

        Returns:
            List of styles
        """
        try:
            styles = [Style.from_document(doc) for doc in self.collection.find({})]
            logger.debug("styles_listed", count=len(styles))
            return styles
        except Exception as e:
            logger.error("style_list_failed", error=str(e))
            raise

    def get_style(self, style_id: str) -> Optional[Style]:
        """
        Get style by ID.

        Args:
            style_id: Style ID (ObjectId hex)

        Returns:
            Style or None if not found

        Raises:
            InvalidStyleIdError: If the identifier is malformed
        """
        object_id = parse_style_id(style_id)
        try:
            document = self.collection.find_one({"_id": object_id})
        except Exception as e:
            logger.error("style_get_failed", error=str(e), style_id=style_id)
            raise

        if not document:
            logger.debug("style_not_found", style_id=style_id)
            return None

        return Style.from_document(document)

    def add_style(self, name: str) -> Style:
        """
        Insert a new style.

        Args:
            name: Style name

        Returns:
            Created style
        """
        try:
            result = self.collection.insert_one({"stylename": name})
        except Exception as e:
            logger.error("style_add_failed", error=str(e), name=name)
            raise

        style = Style(id=str(result.inserted_id), name=name)
        logger.info("style_added", style_id=style.id, name=name)
        return style

    def update_style(self, style_id: str, name: str) -> bool:
        """
        Rename a style.

        Args:
            style_id: Style ID (ObjectId hex)
            name: New style name

        Returns:
            True if a style matched, False otherwise

        Raises:
            InvalidStyleIdError: If the identifier is malformed
        """
        object_id = parse_style_id(style_id)
        try:
            result = self.collection.update_one(
                {"_id": object_id},
                {"$set": {"stylename": name}}
            )
        except Exception as e:
            logger.error("style_update_failed", error=str(e), style_id=style_id)
            raise

        logger.info(
            "style_updated",
            style_id=style_id,
            name=name,
            matched=result.matched_count
        )
        return result.matched_count > 0

    def delete_style(self, style_id: str) -> bool:
        """
        Delete a style.

        Args:
            style_id: Style ID (ObjectId hex)

        Returns:
            True if a style was deleted, False otherwise

        Raises:
            InvalidStyleIdError: If the identifier is malformed
        """
        object_id = parse_style_id(style_id)
        try:
            result = self.collection.delete_one({"_id": object_id})
        except Exception as e:
            logger.error("style_delete_failed", error=str(e), style_id=style_id)
            raise

        logger.info("style_deleted", style_id=style_id, deleted=result.deleted_count)
        return result.deleted_count > 0
