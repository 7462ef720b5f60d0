"""Feed fetcher service.

This module retrieves raw feed documents over HTTP.
"""

import httpx

from feed_ingest import __version__
from feed_ingest.errors import FetchError
from feed_ingest.logging_config import get_logger


DEFAULT_TIMEOUT = 10.0
USER_AGENT = f"feed-ingest/{__version__} (RSS Feed Reader)"


async def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Fetch the raw body of a feed URL.

    A single GET is issued; there are no retries. Redirects are followed and
    any non-2xx final status is treated as a failure.

    Args:
        url: URL of the feed
        timeout: Client timeout in seconds

    Returns:
        Response body as bytes

    Raises:
        FetchError: On transport errors, timeouts, HTTP error statuses or body read errors
    """
    logger = get_logger(__name__)
    logger.info(f"Fetching feed: {url}")

    client = httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    )
    try:
        response = await client.get(url)
        response.raise_for_status()
        body = response.content
    except httpx.TimeoutException as e:
        raise FetchError(url, f"timed out after {timeout}s") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {e.response.status_code}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(url, str(e) or type(e).__name__) from e
    finally:
        try:
            await client.aclose()
        except Exception as e:
            logger.warning(f"Failed to close HTTP client for {url}: {e}")

    logger.info(f"Fetched {len(body)} bytes from {url}")
    return body
