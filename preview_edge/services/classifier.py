from __future__ import annotations

from preview_edge.models.preview.metadata import ClassificationResult

# Lowercase User-Agent fragments of link-unfurl and search crawlers.
BOT_SIGNATURES: frozenset[str] = frozenset(
    {
        # messaging / social unfurlers
        "whatsapp",
        "facebookexternalhit",
        "twitterbot",
        "slackbot",
        "linkedinbot",
        "discordbot",
        "telegrambot",
        "skypeuripreview",
        "vkshare",
        "pinterest",
        "applebot",
        "embedly",
        "iframely",
        "quora link preview",
        # search engines
        "googlebot",
        "bingbot",
        "duckduckbot",
        "yandexbot",
        "ia_archiver",
    }
)


def looks_like_unfurl_bot(user_agent: str | None) -> bool:
    """True if *user_agent* contains any known crawler signature."""
    if not user_agent:
        return False
    ua = user_agent.lower()
    return any(sig in ua for sig in BOT_SIGNATURES)


def classify(user_agent: str | None, force_preview: bool = False) -> ClassificationResult:
    """Decide whether the preview page (rather than a redirect) is served."""
    ua = (user_agent or "").lower()
    return ClassificationResult(
        is_bot=force_preview or looks_like_unfurl_bot(ua),
        user_agent=ua,
        forced=force_preview,
    )
