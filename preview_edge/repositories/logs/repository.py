from __future__ import annotations

import logging

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from preview_edge.core.collections import CollectionNames
from preview_edge.models.logs.document import LogEntry
from preview_edge.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

LOG_KEY_PREFIX = "log-"


class LogRepository(BaseRepository):
    """MongoDB repository for the append-only ``request_logs`` collection."""

    COLLECTION_NAME = CollectionNames.REQUEST_LOGS

    async def ensure_indexes(self) -> None:
        await self._col.create_index("key", unique=True)

    async def insert(self, entry: LogEntry) -> None:
        """Append *entry*.

        Errors are left to the caller: ``DuplicateKeyError`` when the key
        already exists, ``AutoReconnect`` on transient connection loss.
        """
        await self._col.insert_one(entry.model_dump())

    async def list_all(self) -> list[LogEntry]:
        """Return every stored entry, oldest key first."""
        try:
            cursor = self._col.find(
                {"key": {"$regex": f"^{LOG_KEY_PREFIX}"}}, {"_id": 0}
            ).sort("key", ASCENDING)
            docs = await cursor.to_list(length=None)
        except PyMongoError as exc:
            logger.exception("MongoDB read of request logs failed")
            raise RuntimeError("Database read error") from exc
        return [LogEntry(**doc) for doc in docs]
