from __future__ import annotations

from preview_edge.core.database import db
from preview_edge.repositories.logs.repository import LogRepository
from preview_edge.services.logs.service import LogService


def get_log_service() -> LogService:
    """FastAPI dependency that builds a ``LogService`` for each request."""
    return LogService(LogRepository.from_db(db))
