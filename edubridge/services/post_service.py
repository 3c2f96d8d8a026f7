"""Business logic for feed posts, likes and comments stored via SQLAlchemy."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..constants import PostType, ProfileRole
from ..models import Comment, Like, Post, Profile
from ..schemas import DonationPostCreate, PostUpdate, SeekingPostCreate, WisdomPostCreate
from .realtime import row_payload

logger = logging.getLogger(__name__)


def _commit(db: Session, failure_detail: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(failure_detail)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail) from exc


def _get_post_or_404(db: Session, post_id: UUID) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def _get_owned_post_or_404(db: Session, post_id: UUID, owner_id: UUID) -> Post:
    # Scoped by (id, owner): a foreign post is indistinguishable from a missing one.
    post = db.scalar(select(Post).where(Post.id == post_id, Post.user_id == owner_id))
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def list_feed_posts(db: Session, *, author_id: UUID | None = None) -> list[Post]:
    """Return posts with author profile, likes and comments, newest first."""

    statement = (
        select(Post)
        .options(
            selectinload(Post.profile),
            selectinload(Post.likes),
            selectinload(Post.comments).selectinload(Comment.profile),
        )
        .order_by(Post.created_at.desc())
    )
    if author_id is not None:
        statement = statement.where(Post.user_id == author_id)
    return list(db.scalars(statement))


def get_feed_post(db: Session, post_id: UUID) -> Post:
    statement = (
        select(Post)
        .options(
            selectinload(Post.profile),
            selectinload(Post.likes),
            selectinload(Post.comments).selectinload(Comment.profile),
        )
        .where(Post.id == post_id)
    )
    post = db.scalar(statement)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def create_post_record(
    db: Session,
    *,
    author: Profile,
    payload: WisdomPostCreate | DonationPostCreate | SeekingPostCreate,
) -> Post:
    """Create and persist a new post for the given author."""

    if payload.post_type == PostType.SEEKING and author.role != ProfileRole.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only students can request resources.",
        )

    post = Post(user_id=author.id, **payload.model_dump(mode="json"))
    db.add(post)
    _commit(db, "Failed to create post")
    db.refresh(post)
    return post


def update_post_record(
    db: Session,
    *,
    post_id: UUID,
    owner_id: UUID,
    payload: PostUpdate,
) -> Post:
    """Replace the editable fields of a post owned by ``owner_id``."""

    post = _get_owned_post_or_404(db, post_id, owner_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(post, field, value)
    _commit(db, "Failed to update post")
    db.refresh(post)
    return post


def delete_post_record(db: Session, *, post_id: UUID, owner_id: UUID) -> dict[str, Any]:
    """Delete a post owned by ``owner_id`` and return its last column values."""

    post = _get_owned_post_or_404(db, post_id, owner_id)
    snapshot = row_payload(post)
    db.delete(post)
    _commit(db, "Failed to delete post")
    return snapshot


def add_like(db: Session, *, post_id: UUID, user_id: UUID) -> Like:
    _get_post_or_404(db, post_id)
    like = Like(post_id=post_id, user_id=user_id)
    db.add(like)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Post already liked") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update like") from exc
    db.refresh(like)
    return like


def remove_like(db: Session, *, post_id: UUID, user_id: UUID) -> dict[str, Any] | None:
    """Delete the (post, user) like if present and return its last column values."""

    like = db.scalar(select(Like).where(Like.post_id == post_id, Like.user_id == user_id))
    if like is None:
        return None
    snapshot = row_payload(like)
    db.delete(like)
    _commit(db, "Failed to update like")
    return snapshot


def create_comment(db: Session, *, post_id: UUID, author: Profile, content: str) -> Comment:
    _get_post_or_404(db, post_id)
    text = (content or "").strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Comment cannot be empty")

    comment = Comment(post_id=post_id, user_id=author.id, content=text)
    db.add(comment)
    _commit(db, "Failed to add comment")
    db.refresh(comment)
    return comment


__all__ = [
    "list_feed_posts",
    "get_feed_post",
    "create_post_record",
    "update_post_record",
    "delete_post_record",
    "add_like",
    "remove_like",
    "create_comment",
]
