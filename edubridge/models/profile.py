"""SQLAlchemy ORM model for member profiles."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from edubridge.constants import ProfileRole, VerificationStatus
from edubridge.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(150), unique=True, nullable=False, index=True)
    avatar_url = Column(String(1024), nullable=True)
    role = Column(String(32), nullable=False, server_default=ProfileRole.OTHER.value, default=ProfileRole.OTHER.value)
    verification_status = Column(
        String(32),
        nullable=False,
        server_default=VerificationStatus.UNVERIFIED.value,
        default=VerificationStatus.UNVERIFIED.value,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    posts = relationship("Post", back_populates="profile", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="profile", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="profile", cascade="all, delete-orphan")
    notifications_received = relationship(
        "Notification",
        foreign_keys="Notification.user_id",
        back_populates="recipient",
        cascade="all, delete-orphan",
    )
    notifications_sent = relationship(
        "Notification",
        foreign_keys="Notification.actor_id",
        back_populates="actor",
    )


__all__ = ["Profile"]
