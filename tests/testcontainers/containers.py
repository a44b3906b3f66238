"""Reusable Testcontainers configuration for integration tests.

Provides a MongoDB container shared by the whole test session.
"""

import time
from typing import Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError
from testcontainers.mongodb import MongoDbContainer as BaseMongoDbContainer


class MongoDBContainer(BaseMongoDbContainer):
    """Standalone MongoDB server for repository and API tests."""

    def __init__(
        self,
        image: str = "mongo:7.0",
        **kwargs: object,
    ) -> None:
        """Initialize MongoDB container.

        Args:
            image: MongoDB image tag
            **kwargs: Additional container arguments
        """
        super().__init__(image=image, **kwargs)

    def start(self) -> "MongoDBContainer":
        """Start MongoDB container and wait until it answers a ping.

        Returns:
            Started container instance
        """
        super().start()

        client = MongoClient(self.get_connection_url(), serverSelectionTimeoutMS=1000)
        try:
            for _ in range(30):
                try:
                    client.admin.command("ping")
                    break
                except PyMongoError:
                    time.sleep(1)
        finally:
            client.close()

        return self


# Singleton container instance for test session
_mongodb_container: Optional[MongoDBContainer] = None


def get_mongodb_container() -> MongoDBContainer:
    """Get or create MongoDB container instance.

    Returns:
        MongoDBContainer instance
    """
    global _mongodb_container
    if _mongodb_container is None:
        _mongodb_container = MongoDBContainer()
        _mongodb_container.start()
    return _mongodb_container


def stop_mongodb_container() -> None:
    """Stop the shared MongoDB container if it was started."""
    global _mongodb_container
    if _mongodb_container is not None:
        _mongodb_container.stop()
        _mongodb_container = None
