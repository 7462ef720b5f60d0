"""Data models for feed_ingest.

This module defines the canonical feed and post structures shared by the
parser, the store and the sync orchestrator.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional


@dataclass
class Post:
    """A single syndicated entry.

    ``id`` and ``feed_id`` are 0 until the store assigns them.
    """

    title: str
    link: str
    content: str = ""
    id: int = 0
    feed_id: int = 0
    read: bool = False
    published_at: Optional[datetime] = None

    def is_valid(self) -> bool:
        """Check that the post has a non-blank title and link."""
        return bool(self.title.strip()) and bool(self.link.strip())

    def sanitize(self) -> "Post":
        """Return a copy with surrounding whitespace trimmed from title, link and content."""
        return replace(
            self,
            title=self.title.strip(),
            link=self.link.strip(),
            content=self.content.strip(),
        )


@dataclass
class Feed:
    """A subscription endpoint and its posts."""

    url: str
    title: str = ""
    id: int = 0
    posts: List[Post] = field(default_factory=list)

    def has_unread_posts(self) -> bool:
        return any(not post.read for post in self.posts)

    def unread_count(self) -> int:
        return sum(1 for post in self.posts if not post.read)
