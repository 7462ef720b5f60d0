"""Database storage for feed_ingest.

This module provides async SQLite operations for managing feed subscriptions
and their posts.
Database location: ~/.feed_ingest/feed_ingest.db (or FEED_INGEST_DB_PATH env var)
"""

from datetime import datetime
from typing import Iterable, List, Optional

import aiosqlite

from feed_ingest.config import get_config
from feed_ingest.errors import DatabaseInitError, DuplicateFeedError
from feed_ingest.logging_config import get_logger
from feed_ingest.models.schemas import Feed, Post


# Singleton connection
_db_connection: Optional[aiosqlite.Connection] = None


async def get_database() -> aiosqlite.Connection:
    """Get or create a singleton database connection.

    Returns:
        Active database connection

    Raises:
        DatabaseInitError: If the database cannot be opened or initialized
    """
    global _db_connection

    if _db_connection is None:
        db_path = get_config().db_path

        try:
            # Ensure directory exists
            db_path.parent.mkdir(parents=True, exist_ok=True)
            connection = await aiosqlite.connect(db_path)
        except (OSError, aiosqlite.Error) as e:
            raise DatabaseInitError(f"cannot open database {db_path}: {e}") from e

        connection.row_factory = aiosqlite.Row
        try:
            await init_database(connection)
        except DatabaseInitError:
            await connection.close()
            raise

        _db_connection = connection
        get_logger(__name__).info(f"Opened database: {db_path}")

    return _db_connection


async def init_database(db: Optional[aiosqlite.Connection] = None) -> None:
    """Initialize database tables if they don't exist.

    Args:
        db: Optional database connection (uses singleton if not provided)

    Raises:
        DatabaseInitError: If the schema cannot be created
    """
    if db is None:
        db = await get_database()

    try:
        # Cascading deletes need foreign keys enabled per connection
        await db.execute("PRAGMA foreign_keys = ON")

        await db.execute("""
            CREATE TABLE IF NOT EXISTS feeds (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT UNIQUE NOT NULL,
                title TEXT
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS posts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                feed_id INTEGER NOT NULL,
                title TEXT NOT NULL,
                link TEXT UNIQUE NOT NULL,
                content TEXT,
                published_at TIMESTAMP,
                read BOOLEAN DEFAULT 0,
                FOREIGN KEY (feed_id) REFERENCES feeds(id) ON DELETE CASCADE
            )
        """)

        # Create index for faster lookups
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_posts_feed_id ON posts(feed_id)
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_posts_read ON posts(read)
        """)

        await db.commit()
    except aiosqlite.Error as e:
        raise DatabaseInitError(f"cannot create schema: {e}") from e


def _row_to_feed(row: aiosqlite.Row) -> Feed:
    return Feed(id=row["id"], url=row["url"], title=row["title"] or "")


def _row_to_post(row: aiosqlite.Row) -> Post:
    return Post(
        id=row["id"],
        feed_id=row["feed_id"],
        title=row["title"],
        link=row["link"],
        content=row["content"] or "",
        read=bool(row["read"]),
        published_at=datetime.fromisoformat(row["published_at"])
        if row["published_at"]
        else None,
    )


async def add_feed(url: str, title: str = "") -> Feed:
    """Add a new feed subscription.

    Args:
        url: Feed URL (callers pass the normalized form)
        title: Display title, may be empty

    Returns:
        The created Feed with its assigned id

    Raises:
        DuplicateFeedError: If a feed with the same URL already exists
    """
    db = await get_database()

    try:
        cursor = await db.execute(
            "INSERT INTO feeds (url, title) VALUES (?, ?)",
            (url, title),
        )
        await db.commit()
    except aiosqlite.IntegrityError as e:
        raise DuplicateFeedError(url) from e

    return Feed(id=cursor.lastrowid, url=url, title=title)


async def get_feeds() -> List[Feed]:
    """List all subscriptions in insertion order, without posts.

    Returns:
        List of Feed objects (empty if there are none)
    """
    db = await get_database()

    cursor = await db.execute("SELECT id, url, title FROM feeds ORDER BY id")
    rows = await cursor.fetchall()

    return [_row_to_feed(row) for row in rows]


async def get_feed(feed_id: int) -> Optional[Feed]:
    """Get a subscription by id with its posts loaded.

    Args:
        feed_id: ID of the feed

    Returns:
        Feed object if found, None otherwise
    """
    db = await get_database()

    cursor = await db.execute("SELECT id, url, title FROM feeds WHERE id = ?", (feed_id,))
    row = await cursor.fetchone()

    if row is None:
        return None

    feed = _row_to_feed(row)
    feed.posts = await get_posts(feed.id)
    return feed


async def update_feed(feed: Feed) -> None:
    """Overwrite the URL and title of the feed with ``feed.id``.

    Updating an id that does not exist changes nothing and is not an error.

    Raises:
        DuplicateFeedError: If the new URL belongs to another feed
    """
    db = await get_database()

    try:
        await db.execute(
            "UPDATE feeds SET url = ?, title = ? WHERE id = ?",
            (feed.url, feed.title, feed.id),
        )
        await db.commit()
    except aiosqlite.IntegrityError as e:
        raise DuplicateFeedError(feed.url) from e


async def delete_feed(feed_id: int) -> None:
    """Remove a feed and all its posts.

    Deleting an id that does not exist is not an error.

    Args:
        feed_id: ID of the feed to remove
    """
    db = await get_database()

    # Posts go with the feed through ON DELETE CASCADE
    await db.execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
    await db.commit()


async def add_posts(feed_id: int, posts: Iterable[Post]) -> int:
    """Add posts to a feed, skipping invalid posts and known links.

    Args:
        feed_id: ID of the feed these posts belong to
        posts: Posts to store

    Returns:
        Number of posts actually added (excludes invalid posts and duplicates)
    """
    logger = get_logger(__name__)
    db = await get_database()
    added_count = 0

    try:
        for post in posts:
            if not post.is_valid():
                logger.debug(f"Skipping invalid post: title={post.title!r}, link={post.link!r}")
                continue

            # A known link is skipped and leaves rowcount at 0
            cursor = await db.execute(
                """
                INSERT INTO posts (feed_id, title, link, content, published_at, read)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(link) DO NOTHING
                """,
                (
                    feed_id,
                    post.title,
                    post.link,
                    post.content,
                    post.published_at.isoformat() if post.published_at else None,
                    post.read,
                ),
            )
            added_count += cursor.rowcount
    except Exception:
        # Leave nothing from a half-written batch in the shared connection
        await db.rollback()
        raise

    await db.commit()
    return added_count


async def get_posts(feed_id: int, include_read: bool = True) -> List[Post]:
    """List a feed's posts in insertion order.

    Args:
        feed_id: ID of the feed
        include_read: Whether to include read posts (default: True)

    Returns:
        List of Post objects
    """
    db = await get_database()

    query = "SELECT * FROM posts WHERE feed_id = ?"
    if not include_read:
        query += " AND read = 0"
    query += " ORDER BY id"

    cursor = await db.execute(query, (feed_id,))
    rows = await cursor.fetchall()

    return [_row_to_post(row) for row in rows]


async def _set_post_read(post_id: int, read: bool) -> Optional[Post]:
    db = await get_database()

    await db.execute(
        "UPDATE posts SET read = ? WHERE id = ?",
        (read, post_id),
    )
    await db.commit()

    cursor = await db.execute("SELECT * FROM posts WHERE id = ?", (post_id,))
    row = await cursor.fetchone()

    if row is None:
        return None

    return _row_to_post(row)


async def mark_post_read(post_id: int) -> Optional[Post]:
    """Mark a post as read.

    Args:
        post_id: ID of the post

    Returns:
        Updated Post object if found, None otherwise
    """
    return await _set_post_read(post_id, True)


async def mark_post_unread(post_id: int) -> Optional[Post]:
    """Mark a post as unread.

    Args:
        post_id: ID of the post

    Returns:
        Updated Post object if found, None otherwise
    """
    return await _set_post_read(post_id, False)


async def close_database() -> None:
    """Close the database connection."""
    global _db_connection

    if _db_connection is not None:
        await _db_connection.close()
        _db_connection = None
