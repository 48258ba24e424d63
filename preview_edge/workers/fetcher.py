"""Async page fetcher.

Retrieves the destination page's HTML for metadata extraction.

Uses a single shared httpx.AsyncClient for the whole process; see
``get_http_client`` and ``close_http_client`` for lifecycle hooks.
Each call makes exactly one attempt; callers fall back to a plain redirect
on failure.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from preview_edge.core.config import settings

logger = logging.getLogger(__name__)

# Module-level shared client
_http_client: Optional[httpx.AsyncClient] = None

_TEXT_CONTENT_TYPES = ("text/", "application/xhtml+xml", "application/xml")


def get_http_client() -> httpx.AsyncClient:
    """Return the shared AsyncClient.  Creates one if missing."""
    global _http_client  # noqa: PLW0603
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout),
            follow_redirects=True,
            verify=settings.http_verify_ssl,
            headers={"User-Agent": settings.fallback_user_agent},
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared AsyncClient gracefully."""
    global _http_client  # noqa: PLW0603
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
        _http_client = None
        logger.info("HTTP client closed.")


class FetchError(Exception):
    """Raised when the destination page cannot be fetched as text."""


def _is_text(content_type: str) -> bool:
    if not content_type:
        return True
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime.startswith(_TEXT_CONTENT_TYPES)


async def fetch_page(
    url: str,
    user_agent: Optional[str] = None,
    accept_language: Optional[str] = None,
) -> str:
    """GET *url* and return the decoded body.

    The caller's ``User-Agent`` and ``Accept-Language`` are forwarded so the
    destination serves the same variant it would serve the crawler; when
    absent, a Facebook-crawler UA and ``en`` are sent instead.

    Non-2xx responses are returned like any other as long as they are
    text.  Raises :class:`FetchError` on network errors, timeouts, invalid
    URLs and non-text responses.
    """
    client = get_http_client()
    headers = {
        "User-Agent": user_agent or settings.fallback_user_agent,
        "Accept-Language": accept_language or settings.fallback_accept_language,
    }

    try:
        response = await client.get(url, headers=headers)
    except httpx.InvalidURL as exc:
        raise FetchError(f"Invalid URL '{url}': {exc}") from exc
    except httpx.TimeoutException as exc:
        raise FetchError(f"Timed out fetching '{url}'") from exc
    except httpx.RequestError as exc:
        raise FetchError(f"Request error for '{url}': {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if not _is_text(content_type):
        raise FetchError(f"Non-text response from '{url}': {content_type}")

    if response.status_code >= 400:
        logger.info("Fetched %s with status %s.", url, response.status_code)
    return response.text
