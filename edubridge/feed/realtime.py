"""Bridges pushed change events from the store into the :class:`FeedStore`."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator
from uuid import UUID

from pydantic import ValidationError

from ..constants import ChangeKind, FeedTable
from ..schemas import ChangeEvent, PostResponse, PostRow
from .errors import FeedError
from .gateway import FeedGateway
from .store import FeedStore

logger = logging.getLogger(__name__)


async def refetch_feed(store: FeedStore, gateway: FeedGateway) -> bool:
    """Replace the whole feed from the store; on failure keep the current state."""

    try:
        posts = await gateway.fetch_posts()
    except Exception:
        logger.warning("Could not fetch posts; keeping %d cached posts", len(store), exc_info=True)
        return False
    store.replace_all(posts)
    return True


class RealtimeAdapter:
    """Subscribes to post, like and comment changes and reconciles them into ``store``.

    Post rows are applied incrementally. Any like or comment change triggers a
    full refetch. Events are applied in delivery order and nothing guards a
    refetch racing a later push: whichever write lands last wins.
    """

    def __init__(self, store: FeedStore, gateway: FeedGateway) -> None:
        self.store = store
        self.gateway = gateway
        self._events: AsyncIterator[ChangeEvent] | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refetch(self) -> bool:
        return await refetch_feed(self.store, self.gateway)

    async def dispatch(self, event: ChangeEvent) -> None:
        if event.table == FeedTable.POSTS:
            self._apply_post_change(event)
        elif event.table in (FeedTable.LIKES, FeedTable.COMMENTS):
            await self.refetch()
        else:
            logger.debug("Ignoring change on %s", event.table)

    def _apply_post_change(self, event: ChangeEvent) -> None:
        if event.event == ChangeKind.INSERT and event.row:
            self.store.upsert(PostResponse.model_validate(event.row))
        elif event.event == ChangeKind.UPDATE and event.row:
            row = PostRow.model_validate(event.row)
            fields: dict[str, Any] = {name: getattr(row, name) for name in row.model_fields_set if name != "id"}
            self.store.patch(row.id, fields)
        elif event.event == ChangeKind.DELETE:
            source = event.old or event.row or {}
            if "id" in source:
                self.store.remove(UUID(str(source["id"])))

    async def start(self) -> None:
        """Load the feed and open the change subscription."""

        if self.running:
            return
        await self.refetch()
        self._events = self.gateway.subscribe()
        self._task = asyncio.create_task(self._consume(self._events))
        logger.info("Feed subscription opened")

    async def stop(self) -> None:
        """Release the subscription; safe to call at any time."""

        task, events = self._task, self._events
        self._task = None
        self._events = None
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            try:
                await aclose()
            except Exception:
                logger.warning("Failed to close feed subscription cleanly", exc_info=True)
        if task is not None:
            logger.info("Feed subscription closed")

    async def __aenter__(self) -> "RealtimeAdapter":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _consume(self, events: AsyncIterator[ChangeEvent]) -> None:
        try:
            async for event in events:
                try:
                    await self.dispatch(event)
                except (ValidationError, ValueError):
                    logger.warning("Discarding malformed %s %s event", event.table, event.event, exc_info=True)
        except FeedError:
            logger.warning("Feed subscription ended", exc_info=True)
        except Exception:
            logger.exception("Feed subscription failed")


__all__ = ["RealtimeAdapter", "refetch_feed"]
