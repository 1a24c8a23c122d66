"""
embedded.py — Locate and parse the inline `ytInitialData` state object.

YouTube serialises most of the watch page's UI state, including caption
track descriptors, into a large JSON literal inside a <script> tag.  How
that literal is assigned varies between page builds (plain `var`,
`window.` property, minified bare assignment, or a property of an outer
object), so extraction is an ordered chain of patterns.  The chain stops
at the first pattern that both matches and parses as JSON.  New shapes
are handled by appending to _INITIAL_DATA_PATTERNS.

The visitor token is pulled out here too; it is optional and only used as
a request header on the caption fetch.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from yt_page_transcript.errors import EmbeddedDataNotFoundError

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


# ---------------------------------------------------------------------------
# Pattern chains, in strict priority order
# ---------------------------------------------------------------------------

# Each body is matched non-greedily up to the first "};" (or, for the
# property form, the first "}").  When that cut lands inside the object,
# parsing falls back to decoding exactly one JSON value from the opening
# brace onwards.
_INITIAL_DATA_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("var", re.compile(r"var ytInitialData\s*=\s*({[\s\S]+?});")),
    ("window", re.compile(r"window\.ytInitialData\s*=\s*({[\s\S]+?});")),
    ("bare", re.compile(r"ytInitialData\s*=\s*({[\s\S]+?});")),
    ("property", re.compile(r'"ytInitialData"\s*:\s*({[\s\S]+?})')),
]

_VISITOR_DATA_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r'"visitorData"\s*:\s*"([^"]+)"'),
    re.compile(r"""visitorData['"]\s*:\s*['"]([^"']+)['"]"""),
]


def _parse_candidate(page: str, match: re.Match[str]) -> dict[str, Any] | None:
    """
    Parse the JSON object captured by `match`, or return None.

    The non-greedy capture is tried first.  If it is not valid JSON, one
    complete value is decoded starting at the capture's opening brace.
    Anything that is not a JSON object counts as a non-match.
    """
    try:
        value = json.loads(match.group(1))
    except ValueError:
        try:
            value, _ = _decoder.raw_decode(page, match.start(1))
        except ValueError:
            return None
    return value if isinstance(value, dict) else None


def extract_initial_data(page: str) -> dict[str, Any]:
    """
    Return the parsed ytInitialData object from the watch-page HTML.

    Patterns are tried in order: `var ytInitialData = {…};`,
    `window.ytInitialData = {…};`, bare `ytInitialData = {…};`, and the
    `"ytInitialData": {…}` property form.

    Raises:
        EmbeddedDataNotFoundError: No pattern produced a valid JSON object.
    """
    tried: list[str] = []
    for name, pattern in _INITIAL_DATA_PATTERNS:
        tried.append(name)
        match = pattern.search(page)
        if not match:
            continue
        data = _parse_candidate(page, match)
        if data is None:
            logger.debug("ytInitialData %r pattern matched but did not parse", name)
            continue
        logger.debug("ytInitialData found via %r pattern", name)
        return data

    raise EmbeddedDataNotFoundError(tried)


def extract_visitor_data(page: str) -> str | None:
    """Return the visitor token, or None when neither pattern matches."""
    for pattern in _VISITOR_DATA_PATTERNS:
        match = pattern.search(page)
        if match:
            return match.group(1)
    return None
