"""In-memory container of the posts currently visible in the feed."""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping
from uuid import UUID

from ..schemas import PostResponse

logger = logging.getLogger(__name__)

StoreListener = Callable[["FeedStore"], None]


class FeedStore:
    """Single owned collection of posts with synchronous mutation methods.

    The container keeps insertion order only; presentation order is computed by
    :mod:`edubridge.feed.projection`. Every mutation is visible to the next read
    and bumps :attr:`version`.
    """

    def __init__(self, posts: Iterable[PostResponse] = ()) -> None:
        self._posts: list[PostResponse] = list(posts)
        self._listeners: list[StoreListener] = []
        self.version = 0

    @property
    def posts(self) -> list[PostResponse]:
        return list(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __contains__(self, post_id: object) -> bool:
        return self._index(post_id) is not None

    def get(self, post_id: UUID) -> PostResponse | None:
        index = self._index(post_id)
        return None if index is None else self._posts[index]

    def add_listener(self, listener: StoreListener) -> Callable[[], None]:
        """Register ``listener`` to run after every mutation; returns an unregister callable."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def replace_all(self, posts: Iterable[PostResponse]) -> None:
        self._posts = list(posts)
        self._changed()

    def upsert(self, post: PostResponse) -> None:
        """Insert ``post`` at the front, or merge the fields it carries into the existing entry."""

        index = self._index(post.id)
        if index is None:
            self._posts.insert(0, post)
        else:
            fields = {name: getattr(post, name) for name in post.model_fields_set}
            self._posts[index] = self._posts[index].model_copy(update=fields)
        self._changed()

    def patch(self, post_id: UUID, fields: Mapping[str, Any]) -> None:
        """Shallow-merge ``fields`` into the matching post; no-op when absent."""

        index = self._index(post_id)
        if index is None:
            return
        self._posts[index] = self._posts[index].model_copy(update=dict(fields))
        self._changed()

    def remove(self, post_id: UUID) -> None:
        index = self._index(post_id)
        if index is None:
            return
        del self._posts[index]
        self._changed()

    def _index(self, post_id: object) -> int | None:
        for index, post in enumerate(self._posts):
            if post.id == post_id:
                return index
        return None

    def _changed(self) -> None:
        self.version += 1
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Feed store listener failed")


__all__ = ["FeedStore", "StoreListener"]
