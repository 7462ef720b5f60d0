"""Services for feed_ingest."""

from .feed_parser import RawFeed, RawItem, decode_feed, get_feed, parse_feed
from .fetcher import fetch_url
from .sanitizer import (
    MAX_TITLE_LENGTH,
    is_valid_xml_start,
    sanitize_title,
    to_display,
    truncate_description,
    validate_title,
)
from .sync import SyncResult, subscribe, sync_feeds
from .url_utils import extract_domain, is_valid_rss_path, normalize_url, validate_url

__all__ = [
    "RawFeed",
    "RawItem",
    "decode_feed",
    "get_feed",
    "parse_feed",
    "fetch_url",
    "MAX_TITLE_LENGTH",
    "is_valid_xml_start",
    "sanitize_title",
    "to_display",
    "truncate_description",
    "validate_title",
    "SyncResult",
    "subscribe",
    "sync_feeds",
    "extract_domain",
    "is_valid_rss_path",
    "normalize_url",
    "validate_url",
]
