"""
errors.py — Custom exception hierarchy for yt-page-transcript.

Every exception carries an `http_status` attribute so the FastAPI error
handler can translate library-level errors directly into the correct HTTP
response code without a separate mapping table.

Hierarchy:
    TranscriptError (base, 500)
    ├── InvalidUrlError (400)             terminal
    ├── NetworkError (502)                terminal
    ├── EmbeddedDataNotFoundError (404)   recoverable, absorbed by the pipeline
    ├── NoCaptionsAvailableError (404)    recoverable, absorbed by the pipeline
    └── BusyError (409)                   another extraction is in flight
"""


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class TranscriptError(Exception):
    """
    Root exception for all transcript-related errors.

    Attributes:
        message:     Human-readable description of what went wrong.
        http_status: Suggested HTTP status code for the API layer.
    """

    def __init__(self, message: str, http_status: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status


# ---------------------------------------------------------------------------
# Terminal errors: the whole call fails
# ---------------------------------------------------------------------------

class InvalidUrlError(TranscriptError):
    """
    Raised when no 11-character video ID can be derived from the input.

    Maps to HTTP 400: the caller sent something that isn't a YouTube video
    reference.
    """

    def __init__(self, url: str) -> None:
        super().__init__(
            message=f"Not a valid YouTube video URL: {url!r}",
            http_status=400,
        )
        self.url = url


class NetworkError(TranscriptError):
    """
    Raised when the watch page or caption fetch fails.

    Covers both transport failures (DNS, connection reset, timeout) and
    non-2xx HTTP responses.  `status` is None for transport failures.
    Maps to HTTP 502 because the failure is upstream.
    """

    def __init__(self, url: str, status: int | None = None, reason: str = "") -> None:
        if status is not None:
            detail = f"HTTP {status}"
        else:
            detail = reason or "transport failure"
        super().__init__(
            message=f"Request to {url} failed: {detail}",
            http_status=502,
        )
        self.url = url
        self.status = status


# ---------------------------------------------------------------------------
# Recoverable errors: fetch_transcript() absorbs these
# ---------------------------------------------------------------------------

class EmbeddedDataNotFoundError(TranscriptError):
    """
    Raised when none of the ytInitialData patterns matched valid JSON.

    fetch_transcript() catches this and still returns a metadata-only
    response with an empty transcript.
    """

    def __init__(self, tried: list[str]) -> None:
        super().__init__(
            message=f"Embedded ytInitialData not found (tried: {', '.join(tried)})",
            http_status=404,
        )
        self.tried = tried


class NoCaptionsAvailableError(TranscriptError):
    """
    Raised when the embedded data carries no usable caption tracks.

    Like EmbeddedDataNotFoundError this is absorbed by fetch_transcript():
    the response keeps its metadata and gets an empty line sequence.
    """

    def __init__(self, video_id: str | None = None) -> None:
        target = f" for video: {video_id}" if video_id else ""
        super().__init__(
            message=f"No caption tracks available{target}",
            http_status=404,
        )
        self.video_id = video_id


# ---------------------------------------------------------------------------
# Host-level guard
# ---------------------------------------------------------------------------

class BusyError(TranscriptError):
    """
    Raised when an extraction is requested while another one is running.

    The request is rejected immediately, never queued.  Maps to HTTP 409.
    """

    def __init__(self) -> None:
        super().__init__(
            message="Already processing a video, please wait",
            http_status=409,
        )
