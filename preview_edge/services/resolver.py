"""Target resolution.

Turns an incoming request (path + query) into the absolute destination URL.
An explicit ``target`` query parameter always wins; otherwise the path is
matched against the short-link table below, first match wins.

New short-link kinds are added by appending a ``ShortLinkRule`` to
``SHORT_LINK_RULES``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

INSTAGRAM_BASE_URL = "https://www.instagram.com"

_ID = r"[A-Za-z0-9_-]+"


@dataclass(frozen=True)
class ShortLinkRule:
    """A path pattern and the destination URL template it expands to.

    ``template`` is formatted with the pattern's named groups.
    """

    name: str
    pattern: re.Pattern[str]
    template: str

    def expand(self, path: str) -> Optional[str]:
        match = self.pattern.match(path)
        if match is None:
            return None
        return self.template.format(**match.groupdict())


SHORT_LINK_RULES: tuple[ShortLinkRule, ...] = (
    ShortLinkRule(
        name="post",
        pattern=re.compile(rf"^/p/(?P<id>{_ID})$"),
        template=INSTAGRAM_BASE_URL + "/p/{id}/",
    ),
    ShortLinkRule(
        name="reel",
        pattern=re.compile(rf"^/reels?/(?P<id>{_ID})$"),
        template=INSTAGRAM_BASE_URL + "/reel/{id}/",
    ),
    ShortLinkRule(
        name="tv",
        pattern=re.compile(rf"^/tv/(?P<id>{_ID})$"),
        template=INSTAGRAM_BASE_URL + "/tv/{id}/",
    ),
    ShortLinkRule(
        name="story",
        pattern=re.compile(rf"^/stories/(?P<user>[A-Za-z0-9_.]+)/(?P<id>{_ID})$"),
        template=INSTAGRAM_BASE_URL + "/stories/{user}/{id}/",
    ),
)


def normalize_path(path: str) -> str:
    """Strip trailing slashes; the root path stays ``/``."""
    return path.rstrip("/") or "/"


def first_values(items: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Collapse repeated query parameters, keeping the first occurrence."""
    query: dict[str, str] = {}
    for key, value in items:
        query.setdefault(key, value)
    return query


def resolve_target(path: str, query: Mapping[str, str]) -> Optional[str]:
    """Return the destination URL for a request, or ``None`` if there is none.

    The ``target`` parameter is returned exactly as received: no
    re-encoding and no scheme check.
    """
    explicit = query.get("target")
    if explicit:
        return explicit

    normalized = normalize_path(path)
    for rule in SHORT_LINK_RULES:
        url = rule.expand(normalized)
        if url is not None:
            return url
    return None
