"""Storage layer for feed_ingest."""

from .database import (
    get_database,
    init_database,
    close_database,
    add_feed,
    get_feeds,
    get_feed,
    update_feed,
    delete_feed,
    add_posts,
    get_posts,
    mark_post_read,
    mark_post_unread,
)

__all__ = [
    "get_database",
    "init_database",
    "close_database",
    "add_feed",
    "get_feeds",
    "get_feed",
    "update_feed",
    "delete_feed",
    "add_posts",
    "get_posts",
    "mark_post_read",
    "mark_post_unread",
]
