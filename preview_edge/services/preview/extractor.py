"""Destination-page metadata extraction.

The page is scanned once, front to back, with a tolerant callback parser;
no DOM is built since destination markup is third-party and often broken.
The scanner reports three kinds of events to a visitor:

- ``on_title_text(text)`` for each text chunk inside ``<title>``
- ``on_meta(attrs)`` for each ``<meta>`` tag, with lower-cased attribute names
- ``on_canonical(href)`` for each ``<link rel="canonical">``

``MetaCollector`` is the visitor used to build :class:`PageMetadata`.
"""

from __future__ import annotations

import html
import logging
import re
from html.parser import HTMLParser
from typing import Optional, Protocol

from preview_edge.models.preview.metadata import PageMetadata
from preview_edge.workers.fetcher import fetch_page

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)


class MetaVisitor(Protocol):
    def on_title_text(self, text: str) -> None: ...

    def on_meta(self, attrs: dict[str, str]) -> None: ...

    def on_canonical(self, href: str) -> None: ...


class MetaTagScanner(HTMLParser):
    """Single-pass scanner that forwards metadata events to a visitor."""

    def __init__(self, visitor: MetaVisitor) -> None:
        super().__init__(convert_charrefs=True)
        self._visitor = visitor
        self._title_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "title":
            self._title_depth += 1
            return
        if tag == "meta":
            self._visitor.on_meta({k: v or "" for k, v in attrs})
            return
        if tag == "link":
            attrs_dict = {k: v or "" for k, v in attrs}
            rels = attrs_dict.get("rel", "").lower().split()
            href = attrs_dict.get("href", "")
            if "canonical" in rels and href:
                self._visitor.on_canonical(href)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        # <title/> opens nothing
        if tag != "title":
            self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        if tag == "title" and self._title_depth:
            self._title_depth -= 1

    def handle_data(self, data: str) -> None:
        if self._title_depth:
            self._visitor.on_title_text(data)


class MetaCollector:
    """Visitor that accumulates title text, meta values and the canonical URL.

    Meta values are keyed by ``property`` (else ``name``), lower-cased.
    Tags without ``content`` are ignored; a later tag overrides an earlier
    one with the same key.
    """

    def __init__(self) -> None:
        self.title_parts: list[str] = []
        self.meta: dict[str, str] = {}
        self.canonical: Optional[str] = None

    def on_title_text(self, text: str) -> None:
        self.title_parts.append(text)

    def on_meta(self, attrs: dict[str, str]) -> None:
        content = attrs.get("content")
        if not content:
            return
        key = (attrs.get("property") or attrs.get("name") or "").lower()
        if key:
            self.meta[key] = content

    def on_canonical(self, href: str) -> None:
        self.canonical = href

    @property
    def title(self) -> str:
        return "".join(self.title_parts).strip()

    def first(self, *keys: str) -> str:
        """Return the first non-empty meta value among *keys*."""
        for key in keys:
            value = self.meta.get(key)
            if value:
                return value
        return ""


def scan(markup: str, visitor: MetaVisitor) -> None:
    """Run the scanner over *markup*, reporting events to *visitor*."""
    scanner = MetaTagScanner(visitor)
    scanner.feed(markup)
    scanner.close()


def _title_by_regex(markup: str) -> str:
    match = _TITLE_RE.search(markup)
    if match is None:
        return ""
    return html.unescape(match.group(1).strip())


def extract_metadata(markup: str, target: str) -> PageMetadata:
    """Derive :class:`PageMetadata` for *target* from its HTML.

    Deterministic, and never fails on missing markup: each field falls
    back to a default so the result is always complete.
    """
    collected = MetaCollector()
    scan(markup, collected)

    title = (
        collected.first("og:title", "twitter:title")
        or collected.title
        or _title_by_regex(markup)
    )
    description = collected.first("og:description", "twitter:description", "description")
    image = collected.first("og:image", "twitter:image")
    og_url = collected.first("og:url") or target
    twitter_card = collected.first("twitter:card") or (
        "summary_large_image" if image else "summary"
    )

    return PageMetadata(
        title=title,
        description=description,
        image=image,
        og_type=collected.first("og:type") or "website",
        og_url=og_url,
        twitter_card=twitter_card,
        canonical=collected.canonical or og_url,
    )


async def fetch_and_extract(
    target: str,
    user_agent: Optional[str] = None,
    accept_language: Optional[str] = None,
) -> PageMetadata:
    """Fetch *target* and extract its preview metadata.

    Raises:
        FetchError: propagated from the fetcher.
    """
    markup = await fetch_page(target, user_agent=user_agent, accept_language=accept_language)
    meta = extract_metadata(markup, target)
    logger.debug("Extracted metadata for %s: %s", target, meta)
    return meta
