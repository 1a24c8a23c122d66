"""
yt_page_transcript — Extract metadata and timed transcripts from YouTube watch pages.

Public API:
    fetch_transcript()     URL → TranscriptResponse (metadata + timed lines).
    extract()              High-level one-call interface (URL → formatted output).
    is_youtube_url()       Recognise watch / youtu.be / shorts links.
    extract_video_id()     Pull the 11-character video ID out of a URL.
    TranscriptService      fetch_transcript() behind a single-flight busy guard.
    ExtractorConfig        Caption preference and HTTP settings.
    TranscriptResponse     Result value object.
    TranscriptLine         One timed caption cue.

Exception hierarchy (all importable from this package):
    TranscriptError                  Base exception for all transcript errors.
    ├── InvalidUrlError              No video ID derivable from the input.
    ├── NetworkError                 Page or caption fetch failed.
    ├── EmbeddedDataNotFoundError    No ytInitialData on the page (recoverable).
    ├── NoCaptionsAvailableError     No caption tracks (recoverable).
    └── BusyError                    Another extraction is in progress.

Usage:
    from yt_page_transcript import fetch_transcript
    response = fetch_transcript("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
    print(response.title, response.text)
"""

from yt_page_transcript.captions import CaptionTrack, TranscriptLine
from yt_page_transcript.config import CaptionPreference, ExtractorConfig
from yt_page_transcript.errors import (
    BusyError,
    EmbeddedDataNotFoundError,
    InvalidUrlError,
    NetworkError,
    NoCaptionsAvailableError,
    TranscriptError,
)
from yt_page_transcript.extractor import (
    TranscriptResponse,
    extract,
    extract_video_id,
    fetch_transcript,
    is_youtube_url,
)
from yt_page_transcript.metadata import VideoMetadata, extract_metadata
from yt_page_transcript.service import TranscriptService

__all__ = [
    "fetch_transcript",
    "extract",
    "is_youtube_url",
    "extract_video_id",
    "extract_metadata",
    "TranscriptService",
    "ExtractorConfig",
    "CaptionPreference",
    "CaptionTrack",
    "TranscriptResponse",
    "TranscriptLine",
    "VideoMetadata",
    "TranscriptError",
    "InvalidUrlError",
    "NetworkError",
    "EmbeddedDataNotFoundError",
    "NoCaptionsAvailableError",
    "BusyError",
]
