"""Convenience exports for ORM models."""
from .notification import Notification
from .post import Comment, Like, Post
from .profile import Profile

__all__ = [
    "Comment",
    "Like",
    "Notification",
    "Post",
    "Profile",
]
