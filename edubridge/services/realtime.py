"""In-memory fan-out of row-level change events to feed subscribers."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator

from fastapi import WebSocket

from ..constants import ChangeKind, FeedTable
from ..schemas import ChangeEvent

logger = logging.getLogger(__name__)

_QUEUE_SIZE = 256


class ChangeFeedHub:
    """Tracks websocket connections and stream queues and broadcasts change events."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._queues: set[asyncio.Queue[ChangeEvent]] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.discard(websocket)

    async def open_queue(self) -> asyncio.Queue[ChangeEvent]:
        queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=_QUEUE_SIZE)
        async with self._lock:
            self._queues.add(queue)
        return queue

    async def close_queue(self, queue: asyncio.Queue[ChangeEvent]) -> None:
        async with self._lock:
            self._queues.discard(queue)

    async def stream(self) -> AsyncIterator[ChangeEvent]:
        """Yield events as they are published until the consumer stops iterating."""

        queue = await self.open_queue()
        try:
            while True:
                yield await queue.get()
        finally:
            await self.close_queue(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._connections) + len(self._queues)

    async def publish(self, event: ChangeEvent) -> None:
        payload = event.model_dump_json()
        async with self._lock:
            targets = list(self._connections)
            queues = list(self._queues)
        for queue in queues:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning("Dropping %s %s event for a slow subscriber", event.table, event.event)
        for connection in targets:
            try:
                await connection.send_text(payload)
            except Exception:
                await self.disconnect(connection)


def row_payload(record: Any, columns: tuple[str, ...] | None = None) -> dict[str, Any]:
    """Serialise the column values of an ORM row into JSON-safe primitives."""

    names = columns or tuple(column.name for column in record.__table__.columns)
    return json.loads(json.dumps({name: getattr(record, name) for name in names}, default=str))


change_feed = ChangeFeedHub()


async def publish_change(
    table: FeedTable,
    event: ChangeKind,
    *,
    row: dict[str, Any] | None = None,
    old: dict[str, Any] | None = None,
) -> None:
    """Broadcast a change without letting a subscriber failure reach the caller."""

    try:
        await change_feed.publish(ChangeEvent(table=table, event=event, row=row, old=old))
    except Exception:  # pragma: no cover - best effort logging
        logger.exception("Failed to broadcast %s %s change", table, event)


__all__ = ["change_feed", "ChangeFeedHub", "publish_change", "row_payload"]
