"""Convenience exports for service layer."""
from .auth_service import create_access_token, decode_access_token, get_current_user
from .media_service import MediaStorageError, StoredUpload, store_upload
from .notification_service import add_notification, list_notifications
from .post_service import (
    add_like,
    create_comment,
    create_post_record,
    delete_post_record,
    get_feed_post,
    list_feed_posts,
    remove_like,
    update_post_record,
)
from .realtime import change_feed, publish_change, row_payload

__all__ = [
    "create_access_token",
    "decode_access_token",
    "get_current_user",
    "MediaStorageError",
    "StoredUpload",
    "store_upload",
    "add_notification",
    "list_notifications",
    "add_like",
    "create_comment",
    "create_post_record",
    "delete_post_record",
    "get_feed_post",
    "list_feed_posts",
    "remove_like",
    "update_post_record",
    "change_feed",
    "publish_change",
    "row_payload",
]
