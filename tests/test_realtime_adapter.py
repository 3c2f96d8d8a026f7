"""Tests for reconciling pushed change events into the feed store."""
from __future__ import annotations

import asyncio
from uuid import uuid4

from edubridge.constants import ChangeKind, FeedTable
from edubridge.feed.gateway import parse_event_line
from edubridge.feed.realtime import RealtimeAdapter
from edubridge.feed.store import FeedStore
from edubridge.schemas import ChangeEvent


def _row(post) -> dict:
    return post.model_dump(mode="json", exclude={"profile", "likes", "comments"})


async def _until(predicate, timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.001)


def test_post_insert_update_and_delete_are_applied_incrementally(gateway, post_factory) -> None:
    existing = post_factory(minutes=1, likes=3)
    store = FeedStore([existing])
    adapter = RealtimeAdapter(store, gateway)
    created = post_factory(minutes=2)

    async def _scenario() -> None:
        await adapter.dispatch(ChangeEvent(table=FeedTable.POSTS, event=ChangeKind.INSERT, row=_row(created)))
        updated = _row(existing) | {"content": "edited"}
        await adapter.dispatch(
            ChangeEvent(table=FeedTable.POSTS, event=ChangeKind.UPDATE, row=updated, old={"id": updated["id"]})
        )
        await adapter.dispatch(
            ChangeEvent(table=FeedTable.POSTS, event=ChangeKind.DELETE, old={"id": str(created.id)})
        )

    asyncio.run(_scenario())

    assert [post.id for post in store.posts] == [existing.id]
    kept = store.get(existing.id)
    assert kept.content == "edited"
    assert kept.like_count == 3
    assert gateway.called("fetch_posts") == 0


def test_like_and_comment_events_trigger_a_full_refetch(gateway, post_factory) -> None:
    fresh = post_factory(likes=1)
    gateway.posts = [fresh]
    store = FeedStore([post_factory()])
    adapter = RealtimeAdapter(store, gateway)

    async def _scenario() -> None:
        await adapter.dispatch(ChangeEvent(table=FeedTable.LIKES, event=ChangeKind.INSERT, row={"id": str(uuid4())}))
        await adapter.dispatch(ChangeEvent(table=FeedTable.COMMENTS, event=ChangeKind.DELETE, old={"id": "x"}))

    asyncio.run(_scenario())

    assert gateway.called("fetch_posts") == 2
    assert [post.id for post in store.posts] == [fresh.id]


def test_failed_refetch_keeps_the_current_state(gateway, post_factory) -> None:
    cached = post_factory()
    store = FeedStore([cached])
    gateway.fail["fetch_posts"] = "network down"

    refreshed = asyncio.run(RealtimeAdapter(store, gateway).refetch())

    assert refreshed is False
    assert [post.id for post in store.posts] == [cached.id]


def test_subscription_delivers_events_until_stopped(gateway, post_factory) -> None:
    initial = post_factory(minutes=1)
    gateway.posts = [initial]
    store = FeedStore()
    pushed = post_factory(minutes=5)

    async def _scenario() -> None:
        async with RealtimeAdapter(store, gateway) as adapter:
            assert adapter.running
            assert [post.id for post in store.posts] == [initial.id]
            await _until(lambda: gateway.events is not None)
            await gateway.events.put(ChangeEvent(table=FeedTable.POSTS, event=ChangeKind.INSERT, row=_row(pushed)))
            await gateway.events.put(ChangeEvent(table=FeedTable.POSTS, event=ChangeKind.INSERT, row={"id": "bad"}))
            await _until(lambda: pushed.id in store)
        assert not adapter.running

    asyncio.run(_scenario())

    assert gateway.subscription_closed
    assert [post.id for post in store.posts] == [pushed.id, initial.id]


def test_stop_without_start_is_safe(gateway) -> None:
    asyncio.run(RealtimeAdapter(FeedStore(), gateway).stop())


def test_malformed_event_does_not_stop_the_subscription(gateway, post_factory) -> None:
    store = FeedStore()
    pushed = post_factory()

    async def _scenario() -> None:
        async with RealtimeAdapter(store, gateway) as adapter:
            await _until(lambda: gateway.events is not None)
            await gateway.events.put(
                ChangeEvent(table=FeedTable.POSTS, event=ChangeKind.DELETE, old={"id": "not-a-uuid"})
            )
            await gateway.events.put(ChangeEvent(table=FeedTable.POSTS, event=ChangeKind.INSERT, row=_row(pushed)))
            await _until(lambda: pushed.id in store)
            assert adapter.running

    asyncio.run(_scenario())


def test_event_lines_skip_comments_and_malformed_frames(post_factory) -> None:
    post = post_factory()
    frame = ChangeEvent(table=FeedTable.POSTS, event=ChangeKind.INSERT, row=_row(post)).model_dump_json()

    assert parse_event_line(": ready") is None
    assert parse_event_line("data: {not json") is None
    assert parse_event_line('data: {"table": "stories", "event": "INSERT"}') is None
    assert parse_event_line(f"data: {frame}").row["id"] == str(post.id)
