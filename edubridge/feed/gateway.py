"""Data-access interface between the feed and the remote store, plus its httpx implementation."""
from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Protocol
from uuid import UUID

import httpx
from pydantic import ValidationError

from ..config import get_settings
from ..constants import NotificationKind
from ..schemas import (
    ChangeEvent,
    CommentResponse,
    DonationPostCreate,
    PostFeedResponse,
    PostResponse,
    PostUpdate,
    ProfileResponse,
    SeekingPostCreate,
    WisdomPostCreate,
)
from .errors import RemoteOperationError

logger = logging.getLogger(__name__)

PostDraft = WisdomPostCreate | DonationPostCreate | SeekingPostCreate


class FeedGateway(Protocol):
    """Operations the feed needs from the store.

    Mutations act on behalf of the signed-in viewer; the store scopes post
    updates and deletes by (id, owner) and likes by (post, viewer).
    """

    async def fetch_posts(self) -> list[PostResponse]:
        ...

    async def insert_post(self, draft: PostDraft) -> PostResponse:
        ...

    async def update_post(self, post_id: UUID, fields: PostUpdate) -> None:
        ...

    async def delete_post(self, post_id: UUID) -> None:
        ...

    async def insert_like(self, post_id: UUID) -> None:
        ...

    async def delete_like(self, post_id: UUID) -> None:
        ...

    async def insert_comment(self, post_id: UUID, content: str) -> CommentResponse:
        ...

    async def create_notification(self, user_id: UUID, kind: NotificationKind, post_id: UUID) -> None:
        ...

    async def upload_image(self, path: str, data: bytes, content_type: str) -> str:
        ...

    def subscribe(self) -> AsyncIterator[ChangeEvent]:
        ...


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    detail: Any = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail and isinstance(detail[0], dict):
        return str(detail[0].get("msg") or "")
    if isinstance(detail, dict):
        return str(detail.get("message") or "")
    return ""


def parse_event_line(line: str) -> ChangeEvent | None:
    """Decode one server-sent event line; comments and malformed frames give ``None``."""

    if not line.startswith("data:"):
        return None
    try:
        return ChangeEvent.model_validate_json(line[len("data:"):].strip())
    except ValidationError:
        logger.warning("Skipping malformed change frame: %.200s", line)
        return None


class HttpFeedGateway:
    """:class:`FeedGateway` backed by the feed store's HTTP API."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        # Sent per request so several viewers can share one client.
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._owns_client = client is None
        if client is None:
            settings = get_settings()
            client = httpx.AsyncClient(
                base_url=(base_url or settings.feed_api_url).rstrip("/"),
                timeout=timeout or settings.http_timeout,
            )
        self._client = client

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpFeedGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, headers=self._headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteOperationError(_detail(exc.response), status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise RemoteOperationError(str(exc)) from exc
        return response

    async def fetch_profile(self) -> ProfileResponse:
        response = await self._request("GET", "/profiles/me")
        return ProfileResponse.model_validate(response.json())

    async def fetch_posts(self) -> list[PostResponse]:
        response = await self._request("GET", "/posts/feed")
        return PostFeedResponse.model_validate(response.json()).items

    async def insert_post(self, draft: PostDraft) -> PostResponse:
        response = await self._request("POST", "/posts/", json=draft.model_dump(mode="json"))
        return PostResponse.model_validate(response.json())

    async def update_post(self, post_id: UUID, fields: PostUpdate) -> None:
        await self._request("PATCH", f"/posts/{post_id}", json=fields.model_dump(mode="json"))

    async def delete_post(self, post_id: UUID) -> None:
        await self._request("DELETE", f"/posts/{post_id}")

    async def insert_like(self, post_id: UUID) -> None:
        await self._request("POST", f"/posts/{post_id}/likes")

    async def delete_like(self, post_id: UUID) -> None:
        await self._request("DELETE", f"/posts/{post_id}/likes")

    async def insert_comment(self, post_id: UUID, content: str) -> CommentResponse:
        response = await self._request("POST", f"/posts/{post_id}/comments", json={"content": content})
        return CommentResponse.model_validate(response.json())

    async def create_notification(self, user_id: UUID, kind: NotificationKind, post_id: UUID) -> None:
        await self._request(
            "POST",
            "/notifications/",
            json={"user_id": str(user_id), "type": str(kind), "post_id": str(post_id)},
        )

    async def upload_image(self, path: str, data: bytes, content_type: str) -> str:
        filename = path.rsplit("/", 1)[-1]
        response = await self._request(
            "POST",
            "/upload/",
            data={"path": path},
            files={"file": (filename, data, content_type)},
        )
        return str(response.json()["url"])

    async def subscribe(self) -> AsyncIterator[ChangeEvent]:
        """Yield change events from the server-sent event stream until closed."""

        try:
            async with self._client.stream("GET", "/realtime/stream", headers=self._headers, timeout=None) as response:
                if response.is_error:
                    await response.aread()
                    raise RemoteOperationError(_detail(response), status_code=response.status_code)
                async for line in response.aiter_lines():
                    event = parse_event_line(line)
                    if event is not None:
                        yield event
        except httpx.HTTPError as exc:
            raise RemoteOperationError(str(exc)) from exc


__all__ = ["FeedGateway", "HttpFeedGateway", "PostDraft", "parse_event_line"]
