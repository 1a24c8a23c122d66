"""
test_metadata.py — Tests for the watch-page metadata extractors.

Every field is independently optional, so most tests build a page with
one field present (or broken) and check that the rest still work.
"""

from __future__ import annotations

import pytest

from yt_page_transcript.metadata import (
    VideoMetadata,
    extract_author,
    extract_canonical_url,
    extract_channel_handle,
    extract_channel_id,
    extract_metadata,
    extract_publish_date,
    extract_title,
    unescape_json_string,
)


# ---------------------------------------------------------------------------
# Helpers: a realistic page fragment
# ---------------------------------------------------------------------------

_FULL_PAGE = """
<html><head>
<meta name="title" content="Rick Astley - Never Gonna Give You Up (Official Music Video)">
<link rel="canonical" href="https://www.youtube.com/watch?v=dQw4w9WgXcQ">
<meta itemprop="datePublished" content="2009-10-24T23:57:33-07:00">
<link itemprop="url" href="http://www.youtube.com/@RickAstleyYT">
</head><body>
<script>var ytInitialPlayerResponse = {"videoDetails":{"videoId":"dQw4w9WgXcQ",
"title":"Rick Astley - Never Gonna Give You Up (Official Music Video)",
"author":"Rick Astley","channelId":"UCuAXFkgsw1L7xaCfnd5JJOw"}};</script>
</body></html>
"""


# ---------------------------------------------------------------------------
# extract_metadata: all fields together
# ---------------------------------------------------------------------------

class TestExtractMetadata:
    """Tests for extract_metadata() on complete and partial pages."""

    def test_full_page(self) -> None:
        result = extract_metadata(_FULL_PAGE)

        assert isinstance(result, VideoMetadata)
        assert result.title == "Rick Astley - Never Gonna Give You Up (Official Music Video)"
        assert result.author == "Rick Astley"
        assert result.channel_id == "UCuAXFkgsw1L7xaCfnd5JJOw"
        assert result.channel_handle == "RickAstleyYT"
        assert result.publish_date == "2009-10-24T23:57:33-07:00"
        assert result.canonical_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_empty_page_gives_all_none(self) -> None:
        assert extract_metadata("") == VideoMetadata()

    def test_fields_are_independent(self) -> None:
        """A page with only an author still yields the author."""
        page = '<script>{"author":"Rick Astley"}</script>'
        result = extract_metadata(page)

        assert result.author == "Rick Astley"
        assert result.title is None
        assert result.channel_id is None
        assert result.channel_handle is None
        assert result.publish_date is None


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

class TestTitle:
    """Tests for extract_title() and its meta-tag fallback."""

    def test_escaped_quotes(self) -> None:
        page = '"title":"A \\"quoted\\" title"'
        assert extract_title(page) == 'A "quoted" title'

    def test_escaped_backslash(self) -> None:
        page = '"title":"C:\\\\temp"'
        assert extract_title(page) == "C:\\temp"

    def test_no_double_unescaping(self) -> None:
        # Page text: "back\\\"slash" → an escaped backslash, then an escaped quote.
        page = '"title":"back\\\\\\"slash"'
        assert extract_title(page) == 'back\\"slash'

    def test_unicode_escapes(self) -> None:
        page = '"title":"Rock \\u0026 Roll"'
        assert extract_title(page) == "Rock & Roll"

    def test_json_preferred_over_meta(self) -> None:
        page = '<meta name="title" content="Meta Title"> "title":"JSON Title"'
        assert extract_title(page) == "JSON Title"

    def test_meta_name_fallback(self) -> None:
        page = '<meta name="title" content="Tom &amp; Jerry">'
        assert extract_title(page) == "Tom & Jerry"

    def test_meta_itemprop_fallback(self) -> None:
        page = '<meta itemprop="name" content="Itemprop Title">'
        assert extract_title(page) == "Itemprop Title"

    def test_empty_meta_content_is_none(self) -> None:
        assert extract_title('<meta name="title" content="">') is None

    def test_missing(self) -> None:
        assert extract_title("<html></html>") is None


# ---------------------------------------------------------------------------
# Remaining fields
# ---------------------------------------------------------------------------

class TestOtherFields:
    """Tests for author, channel, date and canonical extractors."""

    def test_author_with_escapes(self) -> None:
        assert extract_author('"author":"The \\"Best\\" Channel"') == 'The "Best" Channel'

    def test_author_missing(self) -> None:
        assert extract_author('"title":"x"') is None

    def test_channel_id(self) -> None:
        assert extract_channel_id('"channelId":"UC123abc"') == "UC123abc"

    @pytest.mark.parametrize("href, expected", [
        ("http://www.youtube.com/@RickAstleyYT", "RickAstleyYT"),
        ("https://www.youtube.com/@some.handle-1_x", "some.handle-1_x"),
    ])
    def test_channel_handle(self, href: str, expected: str) -> None:
        page = f'<link itemprop="url" href="{href}">'
        assert extract_channel_handle(page) == expected

    def test_channel_handle_requires_at_sign(self) -> None:
        page = '<link itemprop="url" href="https://www.youtube.com/channel/UC123">'
        assert extract_channel_handle(page) is None

    def test_publish_date(self) -> None:
        page = '<meta itemprop="datePublished" content="2024-01-31">'
        assert extract_publish_date(page) == "2024-01-31"

    def test_canonical_url(self) -> None:
        page = '<link rel="canonical" href="https://www.youtube.com/watch?v=abcdefghijk">'
        assert extract_canonical_url(page) == "https://www.youtube.com/watch?v=abcdefghijk"


# ---------------------------------------------------------------------------
# unescape_json_string
# ---------------------------------------------------------------------------

class TestUnescapeJsonString:
    """Tests for the single-pass JSON unescape helper."""

    def test_plain(self) -> None:
        assert unescape_json_string("hello") == "hello"

    def test_invalid_escape_falls_back(self) -> None:
        # "\q" is not a valid JSON escape; \" must still be resolved.
        assert unescape_json_string('say \\"hi\\" \\q') == 'say "hi" \\q'
