"""
metadata.py — Recover video metadata from the raw watch-page HTML.

The watch page carries its metadata twice: once in inline JSON blobs
(`"title":"…"`, `"author":"…"`, `"channelId":"…"`) and once in meta/link
tags for crawlers.  Neither is guaranteed to be present, so every field
has its own ordered list of (pattern, decoder) pairs.  The first pattern
that yields a non-empty value wins; a field with no match is None.

No function in this module raises on missing data.  One field failing
never prevents the others from being extracted.
"""

from __future__ import annotations

import html as html_lib
import json
import logging
import re
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VideoMetadata:
    """
    Metadata fields scraped from a watch page.  Every field is optional.

    Attributes:
        title:          Video title, unescaped.
        author:         Channel display name, unescaped.
        channel_id:     YouTube's internal channel identifier ("UC…").
        channel_handle: Channel handle without the leading "@".
        publish_date:   The datePublished value as YouTube serves it
                        (an ISO date or timestamp string).
        canonical_url:  The page's canonical link, used to cross-check the
                        video ID derived from the input URL.
    """
    title: str | None = None
    author: str | None = None
    channel_id: str | None = None
    channel_handle: str | None = None
    publish_date: str | None = None
    canonical_url: str | None = None


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def unescape_json_string(raw: str) -> str:
    """
    Resolve JSON string escapes (\\" \\\\ \\n \\uXXXX …) exactly once.

    `raw` is the body of a JSON string literal as captured from the page,
    i.e. without the surrounding quotes.  If the capture is not a valid
    JSON string body, only the two escapes that matter for display
    (\\" and \\\\) are resolved.
    """
    try:
        return json.loads(f'"{raw}"')
    except ValueError:
        # Single left-to-right pass so "\\\\\"" never gets unescaped twice.
        return re.sub(r'\\(["\\])', r"\1", raw)


def _unescape_attr(raw: str) -> str:
    return html_lib.unescape(raw)


def _identity(raw: str) -> str:
    return raw


# ---------------------------------------------------------------------------
# Field patterns, in priority order
# ---------------------------------------------------------------------------

# A JSON string body: any run of non-quote, non-backslash characters or
# backslash escapes.  Handles \" and \\ without stopping early.
_JSON_STRING = r'((?:[^"\\]|\\.)+)'

_Decoder = Callable[[str], str]
_FieldPatterns = list[tuple[re.Pattern[str], _Decoder]]

_TITLE_PATTERNS: _FieldPatterns = [
    (re.compile(r'"title"\s*:\s*"' + _JSON_STRING + '"'), unescape_json_string),
    (re.compile(r'<meta\s+(?:name="title"|itemprop="name")\s+content="([^"]*)"\s*/?>'), _unescape_attr),
]

_AUTHOR_PATTERNS: _FieldPatterns = [
    (re.compile(r'"author"\s*:\s*"' + _JSON_STRING + '"'), unescape_json_string),
]

_CHANNEL_ID_PATTERNS: _FieldPatterns = [
    (re.compile(r'"channelId"\s*:\s*"([^"]+)"'), _identity),
]

_CHANNEL_HANDLE_PATTERNS: _FieldPatterns = [
    (re.compile(r'<link\s+itemprop="url"\s+href="https?://www\.youtube\.com/@([a-zA-Z0-9_.-]+)"'), _identity),
]

_PUBLISH_DATE_PATTERNS: _FieldPatterns = [
    (re.compile(r'<meta\s+itemprop="datePublished"\s+content="([^"]+)"'), _identity),
]

_CANONICAL_URL_PATTERNS: _FieldPatterns = [
    (re.compile(r'<link\s+rel="canonical"\s+href="([^"]*)"\s*/?>'), _unescape_attr),
]


def _first_match(page: str, patterns: _FieldPatterns) -> str | None:
    """Return the first non-empty decoded capture from `patterns`, or None."""
    for pattern, decode in patterns:
        match = pattern.search(page)
        if not match:
            continue
        value = decode(match.group(1)).strip()
        if value:
            return value
    return None


# ---------------------------------------------------------------------------
# Per-field extractors
# ---------------------------------------------------------------------------

def extract_title(page: str) -> str | None:
    """Inline JSON title first, then the <meta name="title"> tag."""
    return _first_match(page, _TITLE_PATTERNS)


def extract_author(page: str) -> str | None:
    return _first_match(page, _AUTHOR_PATTERNS)


def extract_channel_id(page: str) -> str | None:
    return _first_match(page, _CHANNEL_ID_PATTERNS)


def extract_channel_handle(page: str) -> str | None:
    """Handle from the <link itemprop="url"> tag, without the "@"."""
    return _first_match(page, _CHANNEL_HANDLE_PATTERNS)


def extract_publish_date(page: str) -> str | None:
    return _first_match(page, _PUBLISH_DATE_PATTERNS)


def extract_canonical_url(page: str) -> str | None:
    return _first_match(page, _CANONICAL_URL_PATTERNS)


def extract_metadata(page: str) -> VideoMetadata:
    """
    Run every field extractor over the watch-page HTML.

    Args:
        page: Raw watch-page HTML.

    Returns:
        A VideoMetadata whose fields are None wherever nothing matched.
    """
    metadata = VideoMetadata(
        title=extract_title(page),
        author=extract_author(page),
        channel_id=extract_channel_id(page),
        channel_handle=extract_channel_handle(page),
        publish_date=extract_publish_date(page),
        canonical_url=extract_canonical_url(page),
    )

    missing = [name for name, value in vars(metadata).items() if value is None]
    if missing:
        logger.info("Metadata fields not found on page: %s", ", ".join(missing))
    return metadata
