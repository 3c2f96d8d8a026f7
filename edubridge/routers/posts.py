"""Post, like and comment routes; every mutation is echoed to feed subscribers."""
from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..constants import ChangeKind, FeedTable
from ..database import get_session
from ..models import Profile
from ..schemas import (
    CommentCreate,
    CommentResponse,
    LikeResponse,
    PostCreateRequest,
    PostFeedResponse,
    PostResponse,
    PostUpdate,
)
from ..services import (
    add_like,
    create_comment,
    create_post_record,
    delete_post_record,
    get_current_user,
    get_feed_post,
    list_feed_posts,
    publish_change,
    remove_like,
    row_payload,
    update_post_record,
)

router = APIRouter(prefix="/posts", tags=["posts"])

logger = logging.getLogger(__name__)


@router.get("/feed", response_model=PostFeedResponse)
async def feed_endpoint(db: Session = Depends(get_session)) -> PostFeedResponse:
    """Return every post with author, likes and comments, newest first."""

    posts = [PostResponse.model_validate(post) for post in list_feed_posts(db)]
    return PostFeedResponse(items=posts)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post_endpoint(post_id: UUID, db: Session = Depends(get_session)) -> PostResponse:
    return PostResponse.model_validate(get_feed_post(db, post_id))


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
    payload: PostCreateRequest,
    db: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user),
) -> PostResponse:
    post = create_post_record(db, author=current_user, payload=payload.root)
    await publish_change(FeedTable.POSTS, ChangeKind.INSERT, row=row_payload(post))
    logger.info("Post %s (%s) created by %s", post.id, post.post_type, current_user.id)
    return PostResponse.model_validate(get_feed_post(db, post.id))


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post_endpoint(
    post_id: UUID,
    payload: PostUpdate,
    db: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user),
) -> PostResponse:
    post = update_post_record(db, post_id=post_id, owner_id=current_user.id, payload=payload)
    row = row_payload(post)
    await publish_change(FeedTable.POSTS, ChangeKind.UPDATE, row=row, old={"id": row["id"]})
    return PostResponse.model_validate(get_feed_post(db, post.id))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post_endpoint(
    post_id: UUID,
    db: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user),
) -> None:
    old = delete_post_record(db, post_id=post_id, owner_id=current_user.id)
    await publish_change(FeedTable.POSTS, ChangeKind.DELETE, old=old)


@router.post("/{post_id}/likes", response_model=LikeResponse, status_code=status.HTTP_201_CREATED)
async def like_post_endpoint(
    post_id: UUID,
    db: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user),
) -> LikeResponse:
    like = add_like(db, post_id=post_id, user_id=current_user.id)
    await publish_change(FeedTable.LIKES, ChangeKind.INSERT, row=row_payload(like))
    return LikeResponse.model_validate(like)


@router.delete("/{post_id}/likes", status_code=status.HTTP_204_NO_CONTENT)
async def unlike_post_endpoint(
    post_id: UUID,
    db: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user),
) -> None:
    old = remove_like(db, post_id=post_id, user_id=current_user.id)
    if old is not None:
        await publish_change(FeedTable.LIKES, ChangeKind.DELETE, old=old)


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment_endpoint(
    post_id: UUID,
    payload: CommentCreate,
    db: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user),
) -> CommentResponse:
    comment = create_comment(db, post_id=post_id, author=current_user, content=payload.content)
    await publish_change(FeedTable.COMMENTS, ChangeKind.INSERT, row=row_payload(comment))
    return CommentResponse.model_validate(comment)


__all__ = ["router"]
