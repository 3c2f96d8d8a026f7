"""First-URL extraction, preview resolution and the debounce timer used while typing."""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Protocol

from ..schemas import LinkPreview

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"https?://[^\s/$.?#].[^\s]*", re.IGNORECASE)

_KNOWN_PREVIEWS: dict[str, dict[str, str]] = {
    "google.com": {
        "title": "Google - Search the world's information",
        "description": "Search the world's information, including webpages, images, videos and more.",
        "image": "https://www.google.com/images/branding/googlelogo/1x/googlelogo_color_272x92dp.png",
    },
    "wikipedia.org": {
        "title": "Wikipedia, the free encyclopedia",
        "description": (
            "Wikipedia is a free online encyclopedia, created and maintained by a community of volunteer "
            "editors through open collaboration and using a wiki-based editing system."
        ),
        "image": "https://upload.wikimedia.org/wikipedia/en/thumb/8/80/Wikipedia-logo-v2.svg/1200px-Wikipedia-logo-v2.svg.png",
    },
}


def extract_first_url(text: str | None) -> str | None:
    if not text:
        return None
    match = URL_PATTERN.search(text)
    return match.group(0) if match else None


class LinkPreviewResolver(Protocol):
    async def resolve(self, url: str) -> LinkPreview:
        ...


class StaticLinkPreviewResolver:
    """Resolves a handful of well-known sites; anything else previews as its own URL."""

    async def resolve(self, url: str) -> LinkPreview:
        for domain, preview in _KNOWN_PREVIEWS.items():
            if domain in url:
                return LinkPreview(url=url, **preview)
        return LinkPreview(url=url, title=url)


async def resolve_link_preview(url: str, resolver: LinkPreviewResolver | None = None) -> LinkPreview:
    """Resolve ``url``; a failing resolver degrades to a title-only preview."""

    try:
        return await (resolver or StaticLinkPreviewResolver()).resolve(url)
    except Exception:
        logger.warning("Failed to resolve link preview for %s", url, exc_info=True)
        return LinkPreview(url=url, title=url)


async def preview_for_text(text: str | None, resolver: LinkPreviewResolver | None = None) -> LinkPreview | None:
    """Preview of the first URL in ``text``, or ``None`` when it holds no URL."""

    url = extract_first_url(text)
    if url is None:
        return None
    return await resolve_link_preview(url, resolver)


class Debouncer:
    """Runs ``callback`` once ``delay`` seconds after the most recent :meth:`schedule` call.

    Each call cancels the pending timer and starts a new one; a callback that has
    already started is left to finish.
    """

    def __init__(self, delay: float, callback: Callable[..., Awaitable[Any]]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[Any] | None = None
        self._settled = asyncio.Event()
        self._settled.set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, *args: Any) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._settled.clear()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._settle()

    async def wait(self) -> None:
        """Wait until no timer is pending and the last started callback has finished."""

        await self._settled.wait()

    def _settle(self, _task: asyncio.Task[Any] | None = None) -> None:
        if self._handle is None and (self._task is None or self._task.done()):
            self._settled.set()

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        self._task = asyncio.get_running_loop().create_task(self._run(args))
        self._task.add_done_callback(self._settle)

    async def _run(self, args: tuple[Any, ...]) -> None:
        try:
            await self._callback(*args)
        except Exception:
            logger.exception("Debounced callback failed")


__all__ = [
    "URL_PATTERN",
    "Debouncer",
    "LinkPreviewResolver",
    "StaticLinkPreviewResolver",
    "extract_first_url",
    "preview_for_text",
    "resolve_link_preview",
]
