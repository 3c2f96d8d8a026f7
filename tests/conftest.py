"""Shared fixtures for the feed client tests."""
from __future__ import annotations

import asyncio
import os
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Callable
from uuid import UUID, uuid4

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_feed.db")
os.environ.setdefault("JWT_SECRET_KEY", "feed-test-secret")

from edubridge.constants import NotificationKind  # noqa: E402
from edubridge.feed.errors import RemoteOperationError  # noqa: E402
from edubridge.schemas import (  # noqa: E402
    ChangeEvent,
    CommentResponse,
    LikeResponse,
    PostResponse,
    PostUpdate,
    ProfileSummary,
)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_profile(**overrides: Any) -> ProfileSummary:
    values: dict[str, Any] = {
        "id": uuid4(),
        "username": f"member-{uuid4().hex[:6]}",
        "role": "student",
        "verification_status": "verified",
    }
    values.update(overrides)
    return ProfileSummary(**values)


def make_post(
    *,
    author: ProfileSummary | None = None,
    minutes: int = 0,
    likes: int = 0,
    comments: int = 0,
    **overrides: Any,
) -> PostResponse:
    author = author or make_profile()
    post_id = overrides.pop("id", uuid4())
    created_at = overrides.pop("created_at", BASE_TIME + timedelta(minutes=minutes))
    values: dict[str, Any] = {
        "id": post_id,
        "user_id": author.id,
        "post_type": "wisdom",
        "content": "Share what you know",
        "created_at": created_at,
        "profile": author,
        "likes": [
            LikeResponse(id=uuid4(), post_id=post_id, user_id=uuid4(), created_at=created_at)
            for _ in range(likes)
        ],
        "comments": [
            CommentResponse(id=uuid4(), post_id=post_id, user_id=uuid4(), content="nice", created_at=created_at)
            for _ in range(comments)
        ],
    }
    values.update(overrides)
    return PostResponse(**values)


class FakeGateway:
    """In-memory gateway recording calls; ``fail`` names operations that should raise."""

    def __init__(self, posts: list[PostResponse] | None = None) -> None:
        self.posts: list[PostResponse] = list(posts or [])
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail: dict[str, str] = {}
        self.notifications: list[tuple[UUID, NotificationKind, UUID]] = []
        self.uploads: list[tuple[str, bytes, str]] = []
        self.events: asyncio.Queue[ChangeEvent | None] | None = None
        self.subscription_closed = False

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail:
            raise RemoteOperationError(self.fail[name], status_code=500)

    def called(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    async def fetch_posts(self) -> list[PostResponse]:
        self._record("fetch_posts")
        return list(self.posts)

    async def insert_post(self, draft: Any) -> PostResponse:
        self._record("insert_post", draft)
        return make_post(id=uuid4(), post_type=draft.post_type, content=getattr(draft, "content", None))

    async def update_post(self, post_id: UUID, fields: PostUpdate) -> None:
        self._record("update_post", post_id, fields)

    async def delete_post(self, post_id: UUID) -> None:
        self._record("delete_post", post_id)

    async def insert_like(self, post_id: UUID) -> None:
        self._record("insert_like", post_id)

    async def delete_like(self, post_id: UUID) -> None:
        self._record("delete_like", post_id)

    async def insert_comment(self, post_id: UUID, content: str) -> CommentResponse:
        self._record("insert_comment", post_id, content)
        return CommentResponse(id=uuid4(), post_id=post_id, user_id=uuid4(), content=content, created_at=BASE_TIME)

    async def create_notification(self, user_id: UUID, kind: NotificationKind, post_id: UUID) -> None:
        self._record("create_notification", user_id, kind, post_id)
        self.notifications.append((user_id, kind, post_id))

    async def upload_image(self, path: str, data: bytes, content_type: str) -> str:
        self._record("upload_image", path)
        self.uploads.append((path, data, content_type))
        return f"/media/post-images/{path}"

    async def subscribe(self) -> AsyncIterator[ChangeEvent]:
        self._record("subscribe")
        self.events = asyncio.Queue()
        try:
            while True:
                event = await self.events.get()
                if event is None:
                    return
                yield event
        finally:
            self.subscription_closed = True


@pytest.fixture
def profile_factory() -> Callable[..., ProfileSummary]:
    return make_profile


@pytest.fixture
def post_factory() -> Callable[..., PostResponse]:
    return make_post


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
