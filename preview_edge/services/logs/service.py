from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Mapping, Optional

from pymongo.errors import AutoReconnect, DuplicateKeyError
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    wait_exponential,
)

from preview_edge.core.config import settings
from preview_edge.models.logs.document import GeoInfo, LogEntry
from preview_edge.repositories.logs.repository import LOG_KEY_PREFIX, LogRepository

logger = logging.getLogger(__name__)

_KEY_ALPHABET = string.digits + string.ascii_lowercase


def new_log_key(now_ms: Optional[int] = None) -> str:
    """Return ``log-<epoch ms>-<5 random base36 chars>``."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_KEY_ALPHABET) for _ in range(5))
    return f"{LOG_KEY_PREFIX}{now_ms}-{suffix}"


def build_log_entry(
    target: str,
    headers: Mapping[str, str],
    client_host: Optional[str] = None,
) -> LogEntry:
    """Build the log record for a request that resolved to *target*.

    The client IP comes from ``cf-connecting-ip``, then the first
    ``x-forwarded-for`` hop, then the socket peer.  Geo fields come from
    Cloudflare visitor-location headers when the edge adds them.
    """
    forwarded = headers.get("x-forwarded-for", "").split(",")[0].strip()
    return LogEntry(
        key=new_log_key(),
        ts=datetime.now(timezone.utc),
        target=target,
        ip=headers.get("cf-connecting-ip") or forwarded or client_host,
        ua=headers.get("user-agent"),
        referer=headers.get("referer"),
        accept_language=headers.get("accept-language"),
        geo=GeoInfo(
            country=headers.get("cf-ipcountry"),
            city=headers.get("cf-ipcity"),
            region=headers.get("cf-region"),
            asn=headers.get("cf-ipasn"),
        ),
    )


class LogService:
    """Writes and reads the request log."""

    def __init__(self, repo: LogRepository) -> None:
        self._repo = repo

    async def list_entries(self) -> list[LogEntry]:
        return await self._repo.list_all()

    @retry(
        retry=retry_if_exception_type(AutoReconnect),
        stop=lambda rs: rs.attempt_number >= settings.log_write_max_retries + 1,
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=False,
    )
    async def _write(self, entry: LogEntry) -> None:
        try:
            await self._repo.insert(entry)
        except DuplicateKeyError:
            # a retried insert whose first attempt had landed
            logger.warning("Log entry %s already exists; not rewritten.", entry.key)

    async def record(self, entry: LogEntry) -> None:
        """Fire-and-forget write of *entry*, run as a background task.

        Transient connection loss is retried; every failure is logged and
        swallowed since losing a log line must never affect the response.
        """
        try:
            await self._write(entry)
        except RetryError as exc:
            logger.error(
                "Dropped log entry %s after %s attempts: %s",
                entry.key,
                settings.log_write_max_retries + 1,
                exc.last_attempt.exception(),
            )
        except Exception as exc:
            logger.exception("Unexpected error writing log entry %s: %s", entry.key, exc)
