"""URL validation and normalization for feed subscriptions.

These are pure functions: no DNS lookups or network checks are made.
Normalization is strict: a URL without an http/https scheme is rejected
rather than guessed at.
"""

from typing import Optional
from urllib.parse import SplitResult, urlsplit, urlunsplit

from feed_ingest.errors import EmptyURLError, InvalidSchemeError, InvalidURLError


ALLOWED_SCHEMES = ("http", "https")

RSS_EXTENSIONS = (".rss", ".xml", ".atom")
RSS_PATH_MARKERS = ("/feed", "/rss", "/atom")


def _port(netloc: str) -> Optional[str]:
    """Return the port text of an authority, or None if the authority is malformed."""
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        rest = hostport.partition("]")[2]
        if rest and not rest.startswith(":"):
            return None
        return rest[1:]
    return hostport.partition(":")[2]


def _split(raw_url: str) -> SplitResult:
    """Parse a URL, mapping syntax failures to InvalidURLError."""
    # A leading colon means a scheme delimiter with no scheme
    if raw_url.startswith(":"):
        raise InvalidURLError()

    try:
        parts = urlsplit(raw_url)
    except ValueError as e:
        raise InvalidURLError() from e

    # Ports must be digits; their range is not checked
    port = _port(parts.netloc)
    if port is None or (port and not (port.isascii() and port.isdigit())):
        raise InvalidURLError()

    return parts


def _has_illegal_characters(url: str) -> bool:
    return any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url)


def validate_url(raw_url: str) -> None:
    """Check that a URL is usable as a feed subscription.

    Args:
        raw_url: URL string as entered by the user

    Raises:
        EmptyURLError: If the URL is empty or whitespace only
        InvalidURLError: If the URL is malformed or has no host
        InvalidSchemeError: If the scheme is not http or https
    """
    url = raw_url.strip()
    if not url:
        raise EmptyURLError()

    if _has_illegal_characters(url):
        raise InvalidURLError()

    parts = _split(url)

    if parts.scheme not in ALLOWED_SCHEMES:
        raise InvalidSchemeError()

    if not parts.hostname:
        raise InvalidURLError()


def normalize_url(raw_url: str) -> str:
    """Return the canonical form of a feed URL.

    Surrounding whitespace is trimmed, scheme and host are lower-cased and the
    fragment is dropped. Userinfo, port, path and query are kept as given.

    Args:
        raw_url: URL string as entered by the user

    Returns:
        Canonical URL string

    Raises:
        EmptyURLError, InvalidURLError, InvalidSchemeError: As for validate_url
    """
    validate_url(raw_url)

    parts = _split(raw_url.strip())

    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{hostport.lower()}"

    return urlunsplit((parts.scheme.lower(), netloc, parts.path, parts.query, ""))


def extract_domain(raw_url: str) -> str:
    """Extract the ``host[:port]`` authority from a URL.

    IPv6 literals keep their brackets. Input that parses but has no authority
    (plain text, whitespace) yields an empty string.

    Raises:
        EmptyURLError: If the URL is an empty string
        InvalidURLError: If the URL cannot be parsed
    """
    if raw_url == "":
        raise EmptyURLError()

    parts = _split(raw_url)
    return parts.netloc.rpartition("@")[2]


def is_valid_rss_path(path: str) -> bool:
    """Guess whether a URL path points at an RSS/Atom feed."""
    if not path:
        return False

    path = path.lower()
    if path.endswith(RSS_EXTENSIONS):
        return True

    return any(marker in path for marker in RSS_PATH_MARKERS)
