"""
extractor.py — Core transcript extraction pipeline.

This is the heart of yt-page-transcript.  It scrapes a YouTube watch page
directly and exposes a clean, high-level interface for:

    1. Recognising YouTube URLs     → is_youtube_url(), extract_video_id()
    2. Running the whole pipeline   → fetch_transcript()
    3. Formatting output            → format_text(), format_json(),
                                      format_doc(), format_note()
    4. One-call convenience         → extract()

fetch_transcript() stages, strictly in sequence:

    resolve id → fetch page → metadata + ytInitialData → caption track
    → caption fetch → TranscriptResponse

Only an invalid URL or a network failure aborts the call.  A page without
embedded data or without caption tracks still produces a response, with
whatever metadata was found and an empty `lines` tuple.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from yt_page_transcript.captions import (
    CaptionTrack,
    TranscriptLine,
    fetch_caption_payload,
    find_caption_tracks,
    parse_caption_payload,
    select_caption_track,
)
from yt_page_transcript.config import ExtractorConfig
from yt_page_transcript.embedded import extract_initial_data, extract_visitor_data
from yt_page_transcript.errors import (
    EmbeddedDataNotFoundError,
    InvalidUrlError,
    NoCaptionsAvailableError,
)
from yt_page_transcript.fetcher import HttpGet, fetch_page, make_http_get
from yt_page_transcript.metadata import VideoMetadata, extract_metadata

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# The video ID follows "v=", any "/" path separator, or "shorts/".  The
# first capture is the 11-character ID from the base64url alphabet.
_VIDEO_ID_PATTERN = re.compile(r"(?:v=|/|shorts/)([a-zA-Z0-9_-]{11})")

# URL shapes accepted as YouTube video links:
#   - https://www.youtube.com/watch?v=VIDEO_ID (any extra query params)
#   - https://youtu.be/VIDEO_ID
#   - https://www.youtube.com/shorts/VIDEO_ID
_YOUTUBE_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:(?:www|m)\.)?"
    r"(?:youtube\.com/(?:watch\?(?:.*&)?v=|shorts/)|youtu\.be/)"
    r"[a-zA-Z0-9_-]{11}(?![a-zA-Z0-9_-])"
)

_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"
_HANDLE_URL = "https://www.youtube.com/@{handle}"
_CHANNEL_URL = "https://www.youtube.com/channel/{channel_id}"

# Downstream file naming needs non-empty strings for these two.
UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Channel"

# Folder name used for notes when the channel handle is unknown.
UNKNOWN_CHANNEL_FOLDER = "unknown_channel"


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TranscriptResponse:
    """
    Everything fetch_transcript() recovered for one video.

    `title` and `author` always hold a value (a placeholder if the page
    didn't provide one).  The optional fields are None when extraction
    failed.  `lines` is never None: an empty tuple means the video had no
    retrievable transcript.

    Attributes:
        video_id:       The 11-character YouTube video ID.
        title:          Video title.
        author:         Channel display name.
        channel_handle: Channel handle without "@".
        channel_url:    URL of the channel page.
        publish_date:   datePublished as served by YouTube.
        channel_id:     Internal channel ID ("UC…").
        language_code:  Language of the caption track used.
        is_generated:   True if the caption track was auto-generated.
        lines:          Transcript cues in chronological order.
    """
    video_id: str
    title: str
    author: str
    channel_handle: str | None = None
    channel_url: str | None = None
    publish_date: str | None = None
    channel_id: str | None = None
    language_code: str | None = None
    is_generated: bool | None = None
    lines: tuple[TranscriptLine, ...] = ()

    @property
    def text(self) -> str:
        """Plain transcript text, cues joined with single spaces."""
        return " ".join(line.text for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "video_id": self.video_id,
            "title": self.title,
            "author": self.author,
            "channel_handle": self.channel_handle,
            "channel_url": self.channel_url,
            "publish_date": self.publish_date,
            "channel_id": self.channel_id,
            "language_code": self.language_code,
            "is_generated": self.is_generated,
            "lines": [line.to_dict() for line in self.lines],
        }


# ---------------------------------------------------------------------------
# URL resolution
# ---------------------------------------------------------------------------

def is_youtube_url(s: str) -> bool:
    """True for youtube.com/watch, youtu.be and youtube.com/shorts video links."""
    return bool(_YOUTUBE_URL_PATTERN.match(s.strip()))


def extract_video_id(s: str) -> str:
    """
    Extract the 11-character video ID from a YouTube URL.

    Args:
        s: A YouTube URL (watch, youtu.be, or shorts form).

    Returns:
        The video ID.

    Raises:
        InvalidUrlError: If no video ID can be found in the string.
    """
    match = _VIDEO_ID_PATTERN.search(s.strip())
    if not match:
        raise InvalidUrlError(s)
    return match.group(1)


def watch_url(video_id: str) -> str:
    return _WATCH_URL.format(video_id=video_id)


def thumbnail_url(video_id: str) -> str:
    """URL of the video's highest-resolution thumbnail."""
    return _THUMBNAIL_URL.format(video_id=video_id)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def _channel_url(metadata: VideoMetadata) -> str | None:
    if metadata.channel_handle:
        return _HANDLE_URL.format(handle=metadata.channel_handle)
    if metadata.channel_id:
        return _CHANNEL_URL.format(channel_id=metadata.channel_id)
    return None


def _check_canonical_id(video_id: str, metadata: VideoMetadata) -> None:
    """Log when the page's canonical link points at a different video."""
    if not metadata.canonical_url:
        return
    match = _VIDEO_ID_PATTERN.search(metadata.canonical_url)
    if match and match.group(1) != video_id:
        logger.warning(
            "Canonical URL %s does not match requested video %s",
            metadata.canonical_url, video_id,
        )


def assemble_response(
    video_id: str,
    metadata: VideoMetadata,
    lines: list[TranscriptLine] | tuple[TranscriptLine, ...] = (),
    track: CaptionTrack | None = None,
) -> TranscriptResponse:
    """
    Combine extracted metadata, the selected track and the parsed lines.

    Never raises.  Missing title/author become placeholders, and
    channel_url is derived from the handle (preferred) or channel ID.
    """
    return TranscriptResponse(
        video_id=video_id,
        title=metadata.title or UNKNOWN_TITLE,
        author=metadata.author or UNKNOWN_AUTHOR,
        channel_handle=metadata.channel_handle,
        channel_url=_channel_url(metadata),
        publish_date=metadata.publish_date,
        channel_id=metadata.channel_id,
        language_code=track.language_code if track else None,
        is_generated=track.is_generated if track else None,
        lines=tuple(lines),
    )


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def fetch_transcript(
    url: str,
    config: ExtractorConfig | None = None,
    http_get: HttpGet | None = None,
) -> TranscriptResponse:
    """
    Fetch metadata and transcript for the YouTube video at `url`.

    Args:
        url:      A YouTube video URL.
        config:   Caption preference and HTTP settings.  Defaults to
                  ExtractorConfig().
        http_get: Optional HTTP collaborator `(url, headers) -> (status,
                  text)`.  Defaults to a requests-backed getter built from
                  `config`.

    Returns:
        A TranscriptResponse.  `lines` is empty when the page had no
        embedded data or no caption tracks.

    Raises:
        InvalidUrlError: No video ID in `url`.
        NetworkError:    The page or caption fetch failed.
    """
    config = config or ExtractorConfig()
    getter = http_get or make_http_get(config)

    video_id = extract_video_id(url)
    page = fetch_page(watch_url(video_id), getter)

    metadata = extract_metadata(page)
    _check_canonical_id(video_id, metadata)

    track: CaptionTrack | None = None
    lines: list[TranscriptLine] = []
    try:
        data = extract_initial_data(page)
        track = select_caption_track(find_caption_tracks(data), config.caption_preference)
        payload = fetch_caption_payload(track, getter, extract_visitor_data(page))
        lines = parse_caption_payload(payload)
    except EmbeddedDataNotFoundError as exc:
        logger.warning("%s; returning metadata only for %s", exc.message, video_id)
    except NoCaptionsAvailableError:
        logger.info("No caption tracks for %s; returning empty transcript", video_id)

    logger.debug("Assembled %d transcript lines for %s", len(lines), video_id)
    return assemble_response(video_id, metadata, lines, track)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_text(response: TranscriptResponse) -> str:
    """
    Convert transcript lines into plain text, one line per cue.

    Useful for feeding into summarisers or reading directly.
    """
    return "\n".join(line.text for line in response.lines)


def format_json(response: TranscriptResponse) -> dict:
    """
    Build a JSON-serialisable dict: all metadata fields, `line_count`, and
    `lines` (each with text, start, duration).
    """
    data = response.to_dict()
    data["line_count"] = len(response.lines)
    return data


# Paragraph boundary interval for the "doc" format.  A new paragraph starts
# whenever a cue's start time is this many seconds past the paragraph start.
_DOC_PARAGRAPH_INTERVAL_SECS = 30


def _seconds_to_mmss(seconds: float) -> str:
    """
    Convert a float timestamp (in seconds) to a MM:SS string.

    Values above 59:59 wrap naturally (e.g. 3661.0 → "61:01").
    """
    total = int(seconds)
    mins, secs = divmod(total, 60)
    return f"{mins:02d}:{secs:02d}"


def format_doc(response: TranscriptResponse) -> str:
    """
    Convert transcript lines into a readable markdown document.

    Cues are joined with spaces into flowing paragraphs, with a new
    paragraph roughly every 30 seconds.  Each paragraph is prefixed with a
    bold **[MM:SS]** timestamp.  Returns "" for an empty transcript.
    """
    paragraphs: list[str] = []
    current_texts: list[str] = []
    paragraph_start: float | None = None

    for line in response.lines:
        if paragraph_start is None:
            paragraph_start = line.start
            current_texts.append(line.text)
        elif line.start - paragraph_start >= _DOC_PARAGRAPH_INTERVAL_SECS:
            timestamp = _seconds_to_mmss(paragraph_start)
            paragraphs.append(f"**[{timestamp}]** {' '.join(current_texts)}")
            paragraph_start = line.start
            current_texts = [line.text]
        else:
            current_texts.append(line.text)

    if current_texts and paragraph_start is not None:
        timestamp = _seconds_to_mmss(paragraph_start)
        paragraphs.append(f"**[{timestamp}]** {' '.join(current_texts)}")

    return "\n\n".join(paragraphs)


_WHITESPACE_RUN = re.compile(r"\s+")


def _yaml_str(value: str | None) -> str:
    # A JSON string literal is also a valid YAML double-quoted scalar.
    return json.dumps(value or "", ensure_ascii=False)


def format_note(response: TranscriptResponse, video_url: str | None = None) -> str:
    """
    Render a markdown note: YAML frontmatter, title heading, thumbnail and
    the transcript (one cue per line).

    The frontmatter keys are title, channel_name, channel_username,
    channel_url, video_url, video_id and publish_date.  Missing optional
    values become empty strings; a missing handle becomes
    "unknown_channel".
    """
    video_url = video_url or watch_url(response.video_id)
    frontmatter = "\n".join([
        "---",
        f"title: {_yaml_str(response.title)}",
        f"channel_name: {_yaml_str(response.author)}",
        f"channel_username: {_yaml_str(response.channel_handle or UNKNOWN_CHANNEL_FOLDER)}",
        f"channel_url: {_yaml_str(response.channel_url)}",
        f"video_url: {_yaml_str(video_url)}",
        f"video_id: {_yaml_str(response.video_id)}",
        f"publish_date: {_yaml_str(response.publish_date)}",
        "---",
    ])
    return (
        f"{frontmatter}\n\n"
        f"# {_WHITESPACE_RUN.sub(' ', response.title).strip()}\n\n"
        f"![Thumbnail]({thumbnail_url(response.video_id)})\n\n"
        f"{format_text(response)}"
    )


# Characters that are unsafe in filenames on Windows and/or POSIX systems.
_UNSAFE_FILENAME_CHARS = re.compile(r'[/\\?%*:|"<>]')


def sanitize_filename(name: str) -> str:
    """
    Replace filesystem-unsafe characters with hyphens.

    Whitespace runs (newlines included) collapse to one space, and
    leading/trailing whitespace and dots are stripped (leading dots
    make hidden files on POSIX, trailing dots break on Windows).
    """
    name = _WHITESPACE_RUN.sub(" ", name)
    return _UNSAFE_FILENAME_CHARS.sub("-", name).strip().strip(".")


def note_path(response: TranscriptResponse) -> str:
    """
    Relative path for a response's note: "<handle>/<title>.md".

    Falls back to "unknown_channel" for the folder and to the video ID for
    the filename.
    """
    folder = sanitize_filename(response.channel_handle or "") or UNKNOWN_CHANNEL_FOLDER
    filename = sanitize_filename(response.title) or response.video_id
    return f"{folder}/{filename}.md"


# ---------------------------------------------------------------------------
# High-level convenience function (main public API)
# ---------------------------------------------------------------------------

FORMATS = ("text", "json", "doc", "note")


def extract(
    url: str,
    fmt: str = "text",
    *,
    config: ExtractorConfig | None = None,
    http_get: HttpGet | None = None,
) -> str | dict:
    """
    One-call interface: fetch_transcript() → format output.

    Args:
        url:      A YouTube video URL.
        fmt:      "text", "json", "doc" (timestamped markdown paragraphs)
                  or "note" (markdown note with frontmatter).
        config:   Optional ExtractorConfig.
        http_get: Optional HTTP collaborator.

    Returns:
        A string, or a dict for fmt="json".

    Raises:
        ValueError:      Unknown fmt.
        TranscriptError: (or subclass) on a terminal extraction failure.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format {fmt!r}; expected one of {', '.join(FORMATS)}")

    response = fetch_transcript(url, config=config, http_get=http_get)

    if fmt == "json":
        return format_json(response)
    if fmt == "doc":
        return format_doc(response)
    if fmt == "note":
        return format_note(response, video_url=url)
    return format_text(response)
