"""Error types shared across feed_ingest modules.

Validation errors subclass ValueError so callers that only care about
"bad input" can catch the builtin. Per-feed failures (FetchError, ParseError)
carry the offending URL.
"""


class FeedIngestError(Exception):
    """Base class for all feed_ingest errors."""


class URLValidationError(FeedIngestError, ValueError):
    """Raised when a feed URL fails validation."""


class EmptyURLError(URLValidationError):
    def __init__(self, message: str = "URL cannot be empty"):
        super().__init__(message)


class InvalidURLError(URLValidationError):
    def __init__(self, message: str = "invalid URL format"):
        super().__init__(message)


class InvalidSchemeError(URLValidationError):
    def __init__(self, message: str = "URL must use http or https scheme"):
        super().__init__(message)


class TitleValidationError(FeedIngestError, ValueError):
    """Raised when a feed title fails validation."""


class EmptyTitleError(TitleValidationError):
    def __init__(self, message: str = "title cannot be empty"):
        super().__init__(message)


class TitleTooLongError(TitleValidationError):
    def __init__(self, message: str = "title exceeds maximum length"):
        super().__init__(message)


class FetchError(FeedIngestError):
    """Raised when a feed cannot be retrieved.

    Attributes:
        url: The URL that failed.
        reason: Short description of the failure.
    """

    def __init__(self, url: str, reason: str):
        super().__init__(f"failed to fetch feed {url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(FeedIngestError):
    """Raised when fetched bytes cannot be decoded as an RSS/Atom feed.

    Attributes:
        url: The URL the bytes came from.
        reason: Short description of the failure.
    """

    def __init__(self, url: str, reason: str):
        super().__init__(f"failed to parse feed {url}: {reason}")
        self.url = url
        self.reason = reason


class StoreError(FeedIngestError):
    """Raised for subscription store failures."""


class DuplicateFeedError(StoreError):
    """Raised when a feed URL is already subscribed."""

    def __init__(self, url: str):
        super().__init__(f"feed with URL '{url}' already exists")
        self.url = url


class DatabaseInitError(StoreError):
    """Raised when the database cannot be opened or its schema created."""


__all__ = [
    "FeedIngestError",
    "URLValidationError",
    "EmptyURLError",
    "InvalidURLError",
    "InvalidSchemeError",
    "TitleValidationError",
    "EmptyTitleError",
    "TitleTooLongError",
    "FetchError",
    "ParseError",
    "StoreError",
    "DuplicateFeedError",
    "DatabaseInitError",
]
