"""Notification helper logic for the feed store."""
from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import NotificationKind
from ..models import Notification, Post, Profile

logger = logging.getLogger(__name__)


def list_notifications(db: Session, user_id: UUID) -> list[Notification]:
    """Return notifications for the supplied recipient ordered newest first."""

    stmt = select(Notification).where(Notification.user_id == user_id).order_by(Notification.created_at.desc())
    return list(db.scalars(stmt))


def add_notification(
    db: Session,
    *,
    user_id: UUID,
    actor_id: UUID,
    post_id: UUID,
    type_: NotificationKind | str,
) -> Notification:
    """Persist a ``like`` or ``comment`` notification for the post author."""

    if db.get(Profile, user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient does not exist")
    if db.get(Post, post_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    if user_id == actor_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot notify yourself")

    notification = Notification(user_id=user_id, actor_id=actor_id, post_id=post_id, type=str(type_))
    db.add(notification)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to store %s notification for %s", type_, user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create notification",
        ) from exc
    db.refresh(notification)
    return notification


__all__ = ["list_notifications", "add_notification"]
