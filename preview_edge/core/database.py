from __future__ import annotations

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from preview_edge.core.config import settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Holds the Motor client backing the request log.

    The redirect path never waits on it: writes happen in background tasks
    and only ``GET /_logs`` reads from it.
    """

    def __init__(self) -> None:
        self._client: AsyncIOMotorClient | None = None

    async def connect(self) -> None:
        self._client = AsyncIOMotorClient(
            settings.mongo_uri,
            maxPoolSize=settings.mongo_max_pool_size,
        )
        await self._client.admin.command("ping")
        logger.info("Request log sink ready (database %s).", settings.mongo_db)

    async def disconnect(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.info("Request log sink closed.")

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        if self._client is None:
            raise RuntimeError("Request log database is not connected.")
        return self._client[settings.mongo_db][name]


db = DatabaseManager()
