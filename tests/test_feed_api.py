"""Integration tests for the feed store HTTP API."""
from __future__ import annotations

import os
from io import BytesIO
from typing import Iterator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

# Ensure the database URL and JWT secret are available before importing application modules.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_feed.db")
os.environ.setdefault("JWT_SECRET_KEY", "feed-test-secret")

from edubridge.config import get_settings  # noqa: E402
from edubridge.constants import ChangeKind, FeedTable  # noqa: E402
from edubridge.database import Base, SessionLocal, engine  # noqa: E402
from edubridge.main import app  # noqa: E402
from edubridge.models import Comment, Like, Notification, Post, Profile  # noqa: E402
from edubridge.services import create_access_token  # noqa: E402
from edubridge.services.realtime import change_feed  # noqa: E402


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    """Create all tables needed for the test module."""

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    """Remove persisted rows between tests."""

    with SessionLocal() as session:
        session.execute(delete(Notification))
        session.execute(delete(Comment))
        session.execute(delete(Like))
        session.execute(delete(Post))
        session.execute(delete(Profile))
        session.commit()
    yield


def _profile(role: str = "student", verification_status: str = "verified") -> Profile:
    with SessionLocal() as session:
        profile = Profile(
            username=f"member-{uuid4().hex[:8]}",
            role=role,
            verification_status=verification_status,
        )
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile


def _auth(profile: Profile) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(profile.id)}"}


@pytest.fixture(scope="module")
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def recorded_events(monkeypatch) -> list:
    """Capture change events published by the routes."""

    events: list = []

    async def _publish(event) -> None:
        events.append(event)

    monkeypatch.setattr(change_feed, "publish", _publish)
    return events


def _create_wisdom(client: TestClient, author: Profile, content: str = "Learning never stops") -> dict:
    response = client.post("/posts/", json={"post_type": "wisdom", "content": content}, headers=_auth(author))
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_fetch_feed_newest_first(client, recorded_events) -> None:
    author = _profile()
    first = _create_wisdom(client, author, "first")
    second = _create_wisdom(client, author, "second")

    response = client.get("/posts/feed")

    assert response.status_code == 200
    items = response.json()["items"]
    assert [item["id"] for item in items] == [second["id"], first["id"]]
    assert items[0]["profile"]["username"] == author.username
    assert items[0]["likes"] == [] and items[0]["comments"] == []
    assert [(event.table, event.event) for event in recorded_events] == [
        (FeedTable.POSTS, ChangeKind.INSERT),
        (FeedTable.POSTS, ChangeKind.INSERT),
    ]
    assert recorded_events[0].row["id"] == first["id"]


def test_create_requires_a_bearer_token(client) -> None:
    response = client.post("/posts/", json={"post_type": "wisdom", "content": "hi"})

    assert response.status_code == 401


def test_donation_requires_contact_and_valid_category(client) -> None:
    donor = _profile(role="donor")

    missing_contact = client.post(
        "/posts/",
        json={"post_type": "donation", "resource_title": "Books", "resource_category": "books"},
        headers=_auth(donor),
    )
    bad_category = client.post(
        "/posts/",
        json={
            "post_type": "donation",
            "resource_title": "Desk",
            "resource_category": "furniture",
            "resource_contact": "me@example.com",
        },
        headers=_auth(donor),
    )

    assert missing_contact.status_code == 422
    assert bad_category.status_code == 422


def test_seeking_posts_are_limited_to_students(client) -> None:
    body = {"post_type": "seeking", "resource_title": "Calculator", "resource_category": "electronics"}

    donor_response = client.post("/posts/", json=body, headers=_auth(_profile(role="donor")))
    student_response = client.post("/posts/", json=body, headers=_auth(_profile(role="student")))

    assert donor_response.status_code == 403
    assert student_response.status_code == 201
    assert student_response.json()["resource_category"] == "electronics"


def test_update_and_delete_are_scoped_to_the_owner(client, recorded_events) -> None:
    owner = _profile()
    stranger = _profile()
    post = _create_wisdom(client, owner)

    foreign_update = client.patch(f"/posts/{post['id']}", json={"content": "hijack"}, headers=_auth(stranger))
    foreign_delete = client.delete(f"/posts/{post['id']}", headers=_auth(stranger))
    assert foreign_update.status_code == 404
    assert foreign_delete.status_code == 404

    update = client.patch(
        f"/posts/{post['id']}",
        json={"content": "see https://google.com", "link_url": "https://google.com", "link_title": "Google"},
        headers=_auth(owner),
    )
    assert update.status_code == 200
    assert update.json()["link_title"] == "Google"

    delete_response = client.delete(f"/posts/{post['id']}", headers=_auth(owner))
    assert delete_response.status_code == 204
    assert client.get(f"/posts/{post['id']}").status_code == 404

    update_event, delete_event = recorded_events[-2:]
    assert (update_event.event, update_event.row["content"]) == (ChangeKind.UPDATE, "see https://google.com")
    assert (delete_event.event, delete_event.old["id"]) == (ChangeKind.DELETE, post["id"])


def test_like_unlike_and_duplicate_like(client, recorded_events) -> None:
    author = _profile(role="donor")
    fan = _profile()
    post = _create_wisdom(client, author)

    liked = client.post(f"/posts/{post['id']}/likes", headers=_auth(fan))
    duplicate = client.post(f"/posts/{post['id']}/likes", headers=_auth(fan))

    assert liked.status_code == 201
    assert liked.json()["user_id"] == str(fan.id)
    assert duplicate.status_code == 409
    assert len(client.get(f"/posts/{post['id']}").json()["likes"]) == 1

    assert client.delete(f"/posts/{post['id']}/likes", headers=_auth(fan)).status_code == 204
    assert client.get(f"/posts/{post['id']}").json()["likes"] == []
    assert [event.table for event in recorded_events[-2:]] == [FeedTable.LIKES, FeedTable.LIKES]


def test_like_unknown_post_is_404(client) -> None:
    response = client.post(f"/posts/{uuid4()}/likes", headers=_auth(_profile()))

    assert response.status_code == 404


def test_comments_carry_their_author_profile(client, recorded_events) -> None:
    author = _profile()
    commenter = _profile()
    post = _create_wisdom(client, author)

    response = client.post(
        f"/posts/{post['id']}/comments",
        json={"content": "  Well said  "},
        headers=_auth(commenter),
    )
    blank = client.post(f"/posts/{post['id']}/comments", json={"content": "   "}, headers=_auth(commenter))

    assert response.status_code == 201
    assert response.json()["content"] == "Well said"
    assert response.json()["profile"]["username"] == commenter.username
    assert blank.status_code == 422
    feed_comment = client.get(f"/posts/{post['id']}").json()["comments"][0]
    assert feed_comment["profile"]["id"] == str(commenter.id)
    assert recorded_events[-1].table == FeedTable.COMMENTS


def test_notifications_for_post_authors(client) -> None:
    author = _profile(role="donor")
    actor = _profile()
    post = _create_wisdom(client, author)

    created = client.post(
        "/notifications/",
        json={"user_id": str(author.id), "type": "like", "post_id": post["id"]},
        headers=_auth(actor),
    )
    self_notification = client.post(
        "/notifications/",
        json={"user_id": str(actor.id), "type": "comment", "post_id": post["id"]},
        headers=_auth(actor),
    )

    assert created.status_code == 201
    assert created.json()["actor_id"] == str(actor.id)
    assert self_notification.status_code == 400
    items = client.get("/notifications/", headers=_auth(author)).json()["items"]
    assert [item["type"] for item in items] == ["like"]


def test_profile_me(client) -> None:
    member = _profile(role="student", verification_status="pending")

    response = client.get("/profiles/me", headers=_auth(member))

    assert response.status_code == 200
    assert response.json()["verification_status"] == "pending"
    assert client.get("/profiles/me", headers={"Authorization": "Bearer not-a-token"}).status_code == 401


def test_upload_stores_image_under_uploader_folder(client, monkeypatch, tmp_path) -> None:
    member = _profile()
    monkeypatch.setenv("MEDIA_ROOT", str(tmp_path))
    get_settings.cache_clear()
    try:
        response = client.post(
            "/upload/",
            data={"path": f"{member.id}/1700000000000_photo.png"},
            files={"file": ("photo.png", BytesIO(b"image-bytes"), "image/png")},
            headers=_auth(member),
        )
        again = client.post(
            "/upload/",
            data={"path": f"{member.id}/1700000000000_photo.png"},
            files={"file": ("photo.png", BytesIO(b"image-bytes"), "image/png")},
            headers=_auth(member),
        )
        empty = client.post(
            "/upload/",
            data={"path": "empty.png"},
            files={"file": ("empty.png", BytesIO(b""), "image/png")},
            headers=_auth(member),
        )
    finally:
        get_settings.cache_clear()

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["path"] == f"post-images/{member.id}/1700000000000_photo.png"
    assert body["url"] == f"/media/post-images/{member.id}/1700000000000_photo.png"
    assert (tmp_path / body["path"]).read_bytes() == b"image-bytes"
    assert again.status_code == 409
    assert empty.status_code == 400


def test_health_reports_realtime_subscribers(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["realtime_subscribers"] >= 0


def test_feed_socket_answers_ping(client) -> None:
    with client.websocket_connect("/ws/feed") as websocket:
        websocket.send_text('{"type": "ping"}')
        assert websocket.receive_json() == {"type": "pong"}


def test_http_gateway_round_trip(recorded_events) -> None:
    import asyncio

    import httpx

    from edubridge.feed.errors import RemoteOperationError
    from edubridge.feed.gateway import HttpFeedGateway
    from edubridge.schemas import PostUpdate, WisdomPostCreate

    owner = _profile()
    stranger = _profile()

    async def _scenario() -> None:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://feed.test") as raw:
            gateway = HttpFeedGateway(client=raw, token=create_access_token(owner.id))
            created = await gateway.insert_post(WisdomPostCreate(content="via gateway"))
            await gateway.update_post(created.id, PostUpdate(content="edited via gateway"))
            await gateway.insert_like(created.id)
            await gateway.insert_comment(created.id, "first!")

            posts = await gateway.fetch_posts()
            assert [post.content for post in posts] == ["edited via gateway"]
            assert posts[0].like_count == 1
            assert posts[0].comments[0].content == "first!"
            assert (await gateway.fetch_profile()).id == owner.id

            with pytest.raises(RemoteOperationError) as excinfo:
                await gateway.insert_like(created.id)
            assert excinfo.value.status_code == 409
            assert str(excinfo.value) == "Post already liked"

            intruder = HttpFeedGateway(client=raw, token=create_access_token(stranger.id))
            with pytest.raises(RemoteOperationError) as excinfo:
                await intruder.delete_post(created.id)
            assert excinfo.value.status_code == 404

    asyncio.run(_scenario())
