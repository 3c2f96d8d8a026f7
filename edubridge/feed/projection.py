"""Search, type filter and ordering applied to the feed before rendering."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Iterable

from ..schemas import PostResponse
from .store import FeedStore

ALL_POST_TYPES = "all"


class FeedSort(StrEnum):
    CREATED_AT = "created_at"
    LIKES = "likes"
    COMMENTS = "comments"


def _timestamp(post: PostResponse) -> datetime:
    created = post.created_at
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def matches_query(post: PostResponse, query: str) -> bool:
    """Case-insensitive substring match on content, resource title or author username."""

    if not query:
        return True
    needle = query.lower()
    username = post.profile.username if post.profile else None
    return any(needle in value.lower() for value in (post.content, post.resource_title, username) if value)


def project_feed(
    posts: Iterable[PostResponse],
    *,
    query: str = "",
    post_type: str = ALL_POST_TYPES,
    sort: FeedSort | str = FeedSort.CREATED_AT,
) -> list[PostResponse]:
    """Return the posts to display, newest first unless sorted by engagement.

    Engagement sorts break ties on the exact creation time; the sort is stable
    so posts equal on every key keep their container order.
    """

    result = [post for post in posts if matches_query(post, query)]
    if post_type != ALL_POST_TYPES:
        result = [post for post in result if post.post_type == post_type]

    if sort == FeedSort.LIKES:
        return sorted(result, key=lambda post: (post.like_count, _timestamp(post)), reverse=True)
    if sort == FeedSort.COMMENTS:
        return sorted(result, key=lambda post: (post.comment_count, _timestamp(post)), reverse=True)
    return sorted(result, key=_timestamp, reverse=True)


class FeedProjection:
    """Memoised :func:`project_feed` over a :class:`FeedStore`."""

    def __init__(self, store: FeedStore) -> None:
        self._store = store
        self._key: tuple[int, str, str, str] | None = None
        self._result: list[PostResponse] = []

    def view(
        self,
        *,
        query: str = "",
        post_type: str = ALL_POST_TYPES,
        sort: FeedSort | str = FeedSort.CREATED_AT,
    ) -> list[PostResponse]:
        key = (self._store.version, query, str(post_type), str(sort))
        if key != self._key:
            self._result = project_feed(self._store.posts, query=query, post_type=post_type, sort=sort)
            self._key = key
        return list(self._result)


__all__ = ["ALL_POST_TYPES", "FeedSort", "FeedProjection", "matches_query", "project_feed"]
