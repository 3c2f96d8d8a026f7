"""Realtime endpoints that push row-level feed changes."""
from __future__ import annotations

import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import StreamingResponse

from ..services.realtime import change_feed

router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)


@router.websocket("/ws/feed")
async def feed_updates(websocket: WebSocket) -> None:
    """Maintain a long-lived connection that pushes feed change events."""

    await change_feed.connect(websocket)
    logger.info("Feed socket connected from %s", websocket.client)
    try:
        while True:
            try:
                raw = await websocket.receive_text()
            except WebSocketDisconnect:
                break
            except Exception:
                logger.exception("Feed socket receive failed")
                break

            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                payload = {"type": raw}
            if not isinstance(payload, dict):
                continue

            message_type = (payload.get("type") or "").lower()
            if message_type == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
            elif message_type == "hello":
                await websocket.send_text(json.dumps({"type": "ready"}))
            # All other messages are ignored, but receiving them keeps the connection alive.
    finally:
        await change_feed.disconnect(websocket)
        logger.info("Feed socket disconnected from %s", websocket.client)


@router.get("/realtime/stream")
async def feed_event_stream(request: Request) -> StreamingResponse:
    """Server-sent events carrying one JSON change event per message."""

    async def _events() -> AsyncIterator[str]:
        logger.info("Feed stream opened for %s", request.client)
        yield ": ready\n\n"
        try:
            async for event in change_feed.stream():
                if await request.is_disconnected():
                    break
                yield f"data: {event.model_dump_json()}\n\n"
        finally:
            logger.info("Feed stream closed for %s", request.client)

    return StreamingResponse(_events(), media_type="text/event-stream", headers={"Cache-Control": "no-cache"})


__all__ = ["router"]
