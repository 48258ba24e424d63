from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class GeoInfo(BaseModel):
    """Coarse location attributes taken from edge-proxy request headers."""

    country: str | None = None
    city: str | None = None
    region: str | None = None
    asn: str | None = None


class LogEntry(BaseModel):
    """One request that reached target resolution.

    ``key`` is ``log-<epoch ms>-<random suffix>`` and is unique per entry.
    """

    key: str
    ts: datetime
    target: str
    ip: str | None = None
    ua: str | None = None
    referer: str | None = None
    accept_language: str | None = None
    geo: GeoInfo = Field(default_factory=GeoInfo)
