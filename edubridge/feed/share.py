"""Share, copy-link and report helpers for feed posts."""
from __future__ import annotations

import logging
from typing import Callable, Iterable
from urllib.parse import quote
from uuid import UUID

from ..config import get_settings
from ..constants import SHARE_FALLBACK_TEXT, SHARE_TAGLINE
from ..schemas import PostResponse

logger = logging.getLogger(__name__)

CopyStrategy = Callable[[str], None]


def _encode(value: str) -> str:
    # Same reserved set as a browser's encodeURIComponent.
    return quote(value, safe="-_.!~*'()")


def post_url(post_id: UUID | str, base_url: str | None = None) -> str:
    base = (base_url or get_settings().public_base_url).rstrip("/")
    return f"{base}/?page=feed&post={post_id}"


def share_text(post: PostResponse) -> str:
    text = post.content or post.resource_title or SHARE_FALLBACK_TEXT
    return f'"{text}" - {SHARE_TAGLINE}'


def twitter_share_url(post: PostResponse, base_url: str | None = None) -> str:
    return (
        "https://twitter.com/intent/tweet"
        f"?text={_encode(share_text(post))}&url={_encode(post_url(post.id, base_url))}"
    )


def whatsapp_share_url(post: PostResponse, base_url: str | None = None) -> str:
    return f"https://wa.me/?text={_encode(share_text(post))}%20{_encode(post_url(post.id, base_url))}"


def report_mailto(post_id: UUID | str, email: str | None = None) -> str:
    """``mailto:`` link that opens a prefilled report about ``post_id``."""

    recipient = email or get_settings().report_email
    subject = _encode(f"Report on Post ID: {post_id}")
    body = _encode(
        f"I would like to report Post ID: {post_id} for the following reason:\n\n"
        "[Please describe the issue here]\n\n"
    )
    return f"mailto:{recipient}?subject={subject}&body={body}"


def copy_with_fallback(text: str, strategies: Iterable[CopyStrategy]) -> bool:
    """Try each copy strategy in order until one succeeds.

    Returns ``False`` when every strategy raised.
    """

    for strategy in strategies:
        try:
            strategy(text)
        except Exception:
            logger.debug("Copy strategy %r failed", strategy, exc_info=True)
            continue
        return True
    logger.warning("Could not copy %s to the clipboard", text)
    return False


__all__ = [
    "CopyStrategy",
    "copy_with_fallback",
    "post_url",
    "report_mailto",
    "share_text",
    "twitter_share_url",
    "whatsapp_share_url",
]
