from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from preview_edge.api.deps import get_log_service
from preview_edge.core.config import settings
from preview_edge.models.logs.document import LogEntry
from preview_edge.services.logs.service import LogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["logs"])


def _authorized(token: Optional[str]) -> bool:
    expected = settings.log_read_token
    if not token or not expected:
        return False
    return secrets.compare_digest(token.encode(), expected.encode())


@router.get(
    "/_logs",
    response_model=list[LogEntry],
    responses={401: {"description": "Missing or wrong token"}},
    summary="List every recorded request",
)
@router.get("/_logs/", response_model=list[LogEntry], include_in_schema=False)
async def read_logs(
    token: Optional[str] = None,
    service: LogService = Depends(get_log_service),
) -> list[LogEntry] | PlainTextResponse:
    """Return all stored log entries as a JSON array.

    - **200** — entries returned, oldest first
    - **401** — ``token`` missing or not equal to the configured read token
    - **500** — database failure
    """
    if not _authorized(token):
        return PlainTextResponse("Unauthorized", status_code=401)
    try:
        return await service.list_entries()
    except Exception as exc:
        logger.error("GET /_logs DB error: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
