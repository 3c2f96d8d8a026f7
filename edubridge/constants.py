"""Project-wide constant values."""
from __future__ import annotations

from enum import StrEnum


class PostType(StrEnum):
    WISDOM = "wisdom"
    DONATION = "donation"
    SEEKING = "seeking"


class ResourceCategory(StrEnum):
    BOOKS = "books"
    ELECTRONICS = "electronics"
    COURSES = "courses"
    OTHER = "other"


class ProfileRole(StrEnum):
    STUDENT = "student"
    DONOR = "donor"
    OTHER = "other"


class VerificationStatus(StrEnum):
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"


class NotificationKind(StrEnum):
    LIKE = "like"
    COMMENT = "comment"


class FeedTable(StrEnum):
    POSTS = "posts"
    LIKES = "likes"
    COMMENTS = "comments"


class ChangeKind(StrEnum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


POST_IMAGES_FOLDER = "post-images"

SHARE_TAGLINE = "via @Edubridgepeople"  # appended to shared post text
SHARE_FALLBACK_TEXT = "Check out this post on Edubridgepeople!"

__all__ = [
    "PostType",
    "ResourceCategory",
    "ProfileRole",
    "VerificationStatus",
    "NotificationKind",
    "FeedTable",
    "ChangeKind",
    "POST_IMAGES_FOLDER",
    "SHARE_TAGLINE",
    "SHARE_FALLBACK_TEXT",
]
