"""Content sanitization for feed titles and descriptions.

Lengths here are measured in UTF-8 bytes, which is what the database stores.
Truncation can therefore split a multi-byte character.
"""

import re

from feed_ingest.errors import EmptyTitleError, TitleTooLongError


MAX_TITLE_LENGTH = 500
ELLIPSIS = "..."

XML_START_PREFIXES = ("<?xml", "<rss", "<feed")

_LINE_BREAKS = str.maketrans({"\t": " ", "\r": " ", "\n": " "})
_SPACE_RUNS = re.compile(" {2,}")


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _decode(data: bytes) -> str:
    # surrogateescape keeps a split trailing sequence as raw bytes
    return data.decode("utf-8", "surrogateescape")


def sanitize_title(title: str) -> str:
    """Clean a feed or post title for display and storage.

    Trims the title, turns tabs and line breaks into spaces, collapses runs of
    spaces and cuts the result to MAX_TITLE_LENGTH bytes. A character split by
    the cut is dropped.

    Args:
        title: Raw title text

    Returns:
        Sanitized title
    """
    title = title.strip().translate(_LINE_BREAKS)
    title = _SPACE_RUNS.sub(" ", title)

    encoded = title.encode("utf-8")
    if len(encoded) > MAX_TITLE_LENGTH:
        title = encoded[:MAX_TITLE_LENGTH].decode("utf-8", "ignore")

    return title


def validate_title(title: str) -> None:
    """Check that a title is non-blank and within MAX_TITLE_LENGTH bytes.

    Raises:
        EmptyTitleError: If the trimmed title is empty
        TitleTooLongError: If the trimmed title is longer than MAX_TITLE_LENGTH bytes
    """
    title = title.strip()

    if not title:
        raise EmptyTitleError()

    if len(title.encode("utf-8")) > MAX_TITLE_LENGTH:
        raise TitleTooLongError()


def truncate_description(desc: str, max_len: int) -> str:
    """Trim a description and cut it to at most ``max_len`` bytes.

    A negative ``max_len`` disables truncation. When there is room, the cut text
    ends in ``...`` and the whole result is exactly ``max_len`` bytes.

    Args:
        desc: Description text
        max_len: Maximum length in bytes

    Returns:
        Truncated description
    """
    desc = desc.strip()

    if max_len < 0:
        return desc
    if max_len == 0:
        return ""

    encoded = _encode(desc)
    if len(encoded) <= max_len:
        return desc

    if max_len <= len(ELLIPSIS):
        return _decode(encoded[:max_len])

    return _decode(encoded[: max_len - len(ELLIPSIS)]) + ELLIPSIS


def to_display(text: str) -> str:
    """Make truncated text printable, replacing a split character with U+FFFD."""
    return _encode(text).decode("utf-8", "replace")


def is_valid_xml_start(content: str) -> bool:
    """Check whether text starts like an XML, RSS or Atom document."""
    content = content.strip()
    if not content:
        return False

    return content.startswith(XML_START_PREFIXES)
