"""Feed parser service.

This module turns raw RSS/Atom bytes into Feed and Post objects. Decoding the
XML grammar is delegated to a decoder callable (feedparser by default) so the
mapping rules can be exercised against any source of RawFeed data.
"""

import io
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, List, Optional

import feedparser

from feed_ingest.errors import ParseError
from feed_ingest.logging_config import get_logger
from feed_ingest.models.schemas import Feed, Post
from feed_ingest.services.fetcher import DEFAULT_TIMEOUT, fetch_url


@dataclass
class RawItem:
    """One decoded feed item, before any mapping."""

    title: str = ""
    link: str = ""
    content: str = ""
    description: str = ""
    published: Optional[datetime] = None


@dataclass
class RawFeed:
    """A decoded feed document."""

    title: str = ""
    items: List[RawItem] = field(default_factory=list)


Decoder = Callable[[bytes], RawFeed]

# Encoding complaints leave the document intact
_ENCODING_BOZO = (feedparser.CharacterEncodingOverride, feedparser.NonXMLContentType)


def decode_feed(data: bytes) -> RawFeed:
    """Decode RSS/Atom bytes with feedparser.

    Args:
        data: Raw document bytes

    Returns:
        RawFeed with the channel title and items in document order

    Raises:
        ValueError: If the document is empty, malformed or not RSS/Atom
    """
    if not data.strip():
        raise ValueError("empty document")

    if b"\x00" in data:
        raise ValueError("document contains NUL bytes")

    parsed = feedparser.parse(io.BytesIO(data))

    bozo_exception = parsed.get("bozo_exception")
    if parsed.bozo and not isinstance(bozo_exception, _ENCODING_BOZO):
        # The loose parser recovers most broken markup; give up only if nothing came back
        if not parsed.entries:
            raise ValueError(f"malformed feed: {bozo_exception}")
        get_logger(__name__).warning(
            f"Recovered malformed feed: {bozo_exception}"
        )

    if not parsed.get("version"):
        raise ValueError("not an RSS or Atom document")

    return RawFeed(
        title=parsed.feed.get("title", ""),
        items=[_decode_entry(entry) for entry in parsed.entries],
    )


def _decode_entry(entry: dict) -> RawItem:
    content = ""
    for block in entry.get("content", []):
        value = block.get("value", "")
        if value:
            content = value
            break

    link = entry.get("link", "")
    if not link:
        # Try alternate link
        for candidate in entry.get("links", []):
            if candidate.get("rel") == "alternate" and candidate.get("href"):
                link = candidate["href"]
                break

    return RawItem(
        title=entry.get("title", ""),
        link=link,
        content=content,
        description=entry.get("summary", ""),
        published=_parse_date(entry),
    )


def _parse_date(entry: dict) -> Optional[datetime]:
    """Parse the publication date from a feed entry.

    Args:
        entry: Feed entry dict

    Returns:
        datetime if parsed successfully, None otherwise
    """
    for name in ["published", "updated", "created"]:
        # feedparser normalizes parsed dates to UTC
        parsed = entry.get(f"{name}_parsed")
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (ValueError, TypeError):
                pass

        date_str = entry.get(name, "")
        if not date_str:
            continue

        # Try RFC 2822 format (common in RSS)
        try:
            return parsedate_to_datetime(date_str)
        except (ValueError, TypeError):
            pass

        # Try ISO format
        try:
            return datetime.fromisoformat(date_str.replace("Z", "+00:00"))
        except (ValueError, AttributeError):
            pass

    return None


def parse_feed(url: str, data: bytes, decoder: Decoder = decode_feed) -> Feed:
    """Build a Feed from raw document bytes.

    Post content is the item's content when non-empty, otherwise its
    description, otherwise an empty string. Titles and links are copied
    verbatim; sanitizing them is up to the caller.

    Args:
        url: URL the document was fetched from
        data: Raw document bytes
        decoder: Callable turning bytes into a RawFeed

    Returns:
        Feed with one Post per decoded item

    Raises:
        ParseError: If the decoder rejects the document
    """
    logger = get_logger(__name__)

    try:
        raw = decoder(data)
    except Exception as e:
        logger.warning(f"Feed parsing error for {url}: {e}")
        raise ParseError(url, str(e)) from e

    feed = Feed(url=url, title=raw.title or "")
    for item in raw.items:
        feed.posts.append(Post(
            title=item.title,
            link=item.link,
            content=item.content or item.description or "",
            published_at=item.published,
        ))

    logger.info(f"Parsed {len(feed.posts)} posts from {url}")
    return feed


async def get_feed(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    decoder: Decoder = decode_feed,
) -> Feed:
    """Fetch a feed URL and parse the result.

    Raises:
        FetchError: If the document cannot be retrieved
        ParseError: If the document cannot be decoded
    """
    data = await fetch_url(url, timeout=timeout)
    return parse_feed(url, data, decoder=decoder)
