"""SQLAlchemy ORM models for posts and their likes and comments."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from edubridge.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    __tablename__ = "posts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    post_type = Column(String(16), nullable=False, index=True)
    content = Column(Text, nullable=True)
    resource_title = Column(String(255), nullable=True)
    resource_category = Column(String(32), nullable=True)
    resource_contact = Column(String(255), nullable=True)
    image_url = Column(String(1024), nullable=True)
    link_url = Column(String(2048), nullable=True)
    link_title = Column(String(512), nullable=True)
    link_description = Column(Text, nullable=True)
    link_image = Column(String(2048), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="posts")
    likes = relationship("Like", back_populates="post", cascade="all, delete-orphan", order_by="Like.created_at")
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )


class Like(Base):
    __tablename__ = "likes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id = Column(UUID(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    post = relationship("Post", back_populates="likes")
    profile = relationship("Profile", back_populates="likes")

    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_likes_post_user"),)


class Comment(Base):
    __tablename__ = "comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id = Column(UUID(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    post = relationship("Post", back_populates="comments")
    profile = relationship("Profile", back_populates="comments")


__all__ = ["Post", "Like", "Comment"]
