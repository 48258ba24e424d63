from __future__ import annotations

import html

from preview_edge.models.preview.metadata import PageMetadata


def esc(value: str | None) -> str:
    """Entity-escape ``& < > " '`` for text and attribute positions."""
    return html.escape(value or "", quote=True)


def build_preview_html(meta: PageMetadata, target: str) -> str:
    """Render the preview page served to unfurl bots.

    Carries the Open Graph and Twitter Card tags for *meta* and redirects
    immediately to *target*, with a plain link for agents that ignore
    ``refresh``.  Image tags are omitted when there is no image.
    """
    lines = [
        "<!doctype html>",
        '<html><head><meta charset="utf-8">',
        f'<link rel="canonical" href="{esc(meta.canonical)}">',
        f"<title>{esc(meta.title)}</title>",
        f'<meta name="description" content="{esc(meta.description)}">',
        f'<meta property="og:title" content="{esc(meta.title)}">',
        f'<meta property="og:description" content="{esc(meta.description)}">',
        f'<meta property="og:type" content="{esc(meta.og_type)}">',
        f'<meta property="og:url" content="{esc(meta.og_url)}">',
    ]
    if meta.image:
        lines.append(f'<meta property="og:image" content="{esc(meta.image)}">')
    lines += [
        f'<meta name="twitter:card" content="{esc(meta.twitter_card)}">',
        f'<meta name="twitter:title" content="{esc(meta.title)}">',
        f'<meta name="twitter:description" content="{esc(meta.description)}">',
    ]
    if meta.image:
        lines.append(f'<meta name="twitter:image" content="{esc(meta.image)}">')
    lines += [
        f'<meta http-equiv="refresh" content="0; url={esc(target)}">',
        "</head><body>",
        f'If you are not redirected, <a href="{esc(target)}">continue to the page</a>.',
        "</body></html>",
    ]
    return "\n".join(lines)
