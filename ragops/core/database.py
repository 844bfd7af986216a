"""Database connectivity layer for RAGOps."""

from __future__ import annotations

import logging
from typing import Optional

import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ragops.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Lazily establishes connections to the metadata, usage and cache stores."""

    def __init__(self, config: Optional[Settings] = None) -> None:
        self.settings = config or default_settings
        self.redis: Optional[redis.Redis] = None
        self.mongodb: Optional[AsyncIOMotorClient] = None

    @property
    def database(self) -> Optional[AsyncIOMotorDatabase]:
        if self.mongodb is None:
            return None
        return self.mongodb[self.settings.MONGODB_DATABASE]

    async def initialize(self) -> None:
        """Connect to all backing services."""

        if self.mongodb is not None and self.redis is not None:
            return

        logger.info("Initializing RAGOps database manager")

        # Redis holds the query cache
        self.redis = redis.from_url(str(self.settings.REDIS_URL), decode_responses=True)

        # MongoDB for document metadata and usage events
        self.mongodb = AsyncIOMotorClient(str(self.settings.MONGODB_URL), tz_aware=True)

        logger.info("Database manager initialized")

    async def close(self) -> None:
        """Tear down connections gracefully."""

        logger.info("Closing database connections")

        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None

        if self.mongodb is not None:
            self.mongodb.close()
            self.mongodb = None


# Singleton instance used by the service container
database_manager = DatabaseManager()
