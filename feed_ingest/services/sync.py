"""Sync orchestrator.

One sync pass walks every subscription in order, fetching, parsing and storing
new posts. A feed that fails to fetch or parse is reported and skipped; the
pass always attempts every subscription.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from feed_ingest.config import get_config
from feed_ingest.errors import FetchError, ParseError
from feed_ingest.logging_config import get_logger
from feed_ingest.models.schemas import Feed, Post
from feed_ingest.services.feed_parser import Decoder, decode_feed, parse_feed
from feed_ingest.services.fetcher import fetch_url
from feed_ingest.services.sanitizer import sanitize_title
from feed_ingest.services.url_utils import normalize_url
from feed_ingest.storage import database


Fetcher = Callable[[str, float], Awaitable[bytes]]


@dataclass
class SyncResult:
    """Outcome of syncing one subscription."""

    feed_id: int
    url: str
    title: str
    new_posts: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def sanitize_post(post: Post) -> Post:
    """Trim a parsed post and clean its title."""
    post = post.sanitize()
    post.title = sanitize_title(post.title)
    return post


async def subscribe(url: str, title: str = "") -> Feed:
    """Add a subscription after normalizing its URL.

    Args:
        url: Feed URL as entered by the user
        title: Optional display title

    Returns:
        The stored Feed

    Raises:
        URLValidationError: If the URL is not a usable http(s) URL
        DuplicateFeedError: If the normalized URL is already subscribed
    """
    logger = get_logger(__name__)

    normalized = normalize_url(url)
    feed = await database.add_feed(normalized, sanitize_title(title))

    logger.info(f"Subscribed to {normalized} (id={feed.id})")
    return feed


async def sync_feed(
    subscription: Feed,
    fetch: Fetcher,
    timeout: float,
    decoder: Decoder = decode_feed,
) -> SyncResult:
    """Fetch, parse and store one subscription.

    Fetch and parse failures are recorded on the result instead of raised.
    """
    logger = get_logger(__name__)
    result = SyncResult(feed_id=subscription.id, url=subscription.url, title=subscription.title)

    try:
        data = await fetch(subscription.url, timeout)
        parsed = parse_feed(subscription.url, data, decoder=decoder)
    except (FetchError, ParseError) as e:
        logger.error(f"Failed to update {subscription.url}: {e}")
        result.error = str(e)
        return result

    posts = [sanitize_post(post) for post in parsed.posts]
    result.new_posts = await database.add_posts(subscription.id, posts)

    # Fill in a missing subscription title from the feed itself
    if not subscription.title and parsed.title:
        title = sanitize_title(parsed.title)
        if title:
            await database.update_feed(Feed(id=subscription.id, url=subscription.url, title=title))
            result.title = title

    logger.info(f"Updated {subscription.url}: {result.new_posts} new of {len(posts)} posts")
    return result


async def sync_feeds(
    fetch: Optional[Fetcher] = None,
    timeout: Optional[float] = None,
    decoder: Decoder = decode_feed,
) -> List[SyncResult]:
    """Run one sync pass over every subscription.

    Args:
        fetch: Async callable ``(url, timeout) -> bytes`` (defaults to fetch_url)
        timeout: Fetch timeout in seconds (defaults to the configured value)
        decoder: Feed decoder passed through to parse_feed

    Returns:
        One SyncResult per subscription, in subscription order
    """
    logger = get_logger(__name__)

    if fetch is None:
        fetch = fetch_url
    if timeout is None:
        timeout = get_config().fetch_timeout

    subscriptions = await database.get_feeds()
    logger.info(f"Updating {len(subscriptions)} feeds...")

    results = []
    for subscription in subscriptions:
        results.append(await sync_feed(subscription, fetch, timeout, decoder=decoder))

    failed = sum(1 for r in results if not r.ok)
    logger.info(f"Sync finished: {len(results) - failed} ok, {failed} failed")
    return results
