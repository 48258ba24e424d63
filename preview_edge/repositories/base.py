"""Base class for the MongoDB repositories.

A repository subclasses ``BaseRepository``, sets ``COLLECTION_NAME`` to a
value from ``CollectionNames`` and overrides ``ensure_indexes()`` when the
collection needs indexes.  Indexes are created from the app lifespan
(``main.py``).
"""

from __future__ import annotations

from abc import ABC
from typing import ClassVar, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection

from preview_edge.core.database import DatabaseManager

T = TypeVar("T", bound="BaseRepository")


class BaseRepository(ABC):
    """Binds a repository to its Motor collection."""

    COLLECTION_NAME: ClassVar[str]

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._col = collection

    @classmethod
    def from_db(cls: type[T], db: DatabaseManager) -> T:
        """Build the repository on the live ``DatabaseManager``.

        Usage::

            repo = LogRepository.from_db(db)
        """
        return cls(db.get_collection(cls.COLLECTION_NAME))

    async def ensure_indexes(self) -> None:
        """Create collection indexes.  Called once at startup; no-op here."""
