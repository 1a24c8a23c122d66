"""
api.py — FastAPI REST API for yt-page-transcript.

Endpoints:
    GET /transcript              — Extract a transcript for ?url=<YouTube URL>.
    GET /transcript/{video_id}   — Same, addressed by bare video ID.
    GET /health                  — Simple health-check for load balancers / monitoring.

Run with:
    uvicorn yt_page_transcript.api:app

All requests share one TranscriptService, so only one extraction runs at a
time; a request arriving while another is in flight gets HTTP 409.  The
global exception handler converts any TranscriptError into the status code
stored on the exception.
"""

from __future__ import annotations

from dataclasses import replace

from fastapi import FastAPI, Path, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from yt_page_transcript.config import ExtractorConfig, parse_languages
from yt_page_transcript.errors import TranscriptError
from yt_page_transcript.extractor import (
    format_doc,
    format_json,
    format_note,
    format_text,
    watch_url,
)
from yt_page_transcript.service import TranscriptService

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(
    title="YouTube Page Transcript API",
    description="Extract metadata and timed transcripts from YouTube watch pages "
                "as plain text, JSON, or markdown.",
    version="0.1.0",
)

_service = TranscriptService(ExtractorConfig.from_env())

_FORMAT_DESCRIPTION = "Output format: 'text', 'json', 'doc' (timestamped markdown) or 'note' (markdown with frontmatter)."
_FORMAT_PATTERN = "^(text|json|doc|note)$"
_VIDEO_ID_PATTERN = "^[A-Za-z0-9_-]{11}$"
_LANG_DESCRIPTION = "Comma-separated caption language codes in priority order (e.g. 'de,en'). Empty uses the server default."


# ---------------------------------------------------------------------------
# Global error handler
# ---------------------------------------------------------------------------

@app.exception_handler(TranscriptError)
async def transcript_error_handler(request: Request, exc: TranscriptError) -> JSONResponse:
    """
    Translate any TranscriptError (or subclass) into an HTTP error response.

    InvalidUrlError → 400, NetworkError → 502, BusyError → 409.
    """
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.message},
    )


# ---------------------------------------------------------------------------
# Endpoints: transcript extraction
# ---------------------------------------------------------------------------

def _render(url: str, fmt: str, lang: str) -> PlainTextResponse | JSONResponse:
    config = _service.config
    languages = parse_languages(lang)
    if languages:
        config = replace(config, languages=languages)

    response = _service.fetch_transcript(url, config=config)

    if fmt == "json":
        return JSONResponse(content=format_json(response))
    if fmt == "doc":
        return PlainTextResponse(content=format_doc(response))
    if fmt == "note":
        return PlainTextResponse(content=format_note(response, video_url=url))
    return PlainTextResponse(content=format_text(response))


# Plain `def` endpoints run in FastAPI's threadpool, so a slow extraction
# doesn't block the event loop and concurrent requests reach the busy guard.
@app.get("/transcript", response_model=None)
def get_transcript(
    url: str = Query(description="YouTube watch, youtu.be or shorts URL."),
    format: str = Query(default="text", description=_FORMAT_DESCRIPTION, pattern=_FORMAT_PATTERN),
    lang: str = Query(default="", description=_LANG_DESCRIPTION),
) -> PlainTextResponse | JSONResponse:
    """
    Extract the transcript for the YouTube video at **url**.

    A video without captions returns 200 with an empty transcript.
    """
    return _render(url, format, lang)


@app.get("/transcript/{video_id}", response_model=None)
def get_transcript_by_id(
    video_id: str = Path(description="11-character YouTube video ID.", pattern=_VIDEO_ID_PATTERN),
    format: str = Query(default="text", description=_FORMAT_DESCRIPTION, pattern=_FORMAT_PATTERN),
    lang: str = Query(default="", description=_LANG_DESCRIPTION),
) -> PlainTextResponse | JSONResponse:
    """
    Extract the transcript for an 11-character **video_id** (e.g. `dQw4w9WgXcQ`).
    """
    return _render(watch_url(video_id), format, lang)


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------

@app.get("/health")
async def health() -> dict:
    """
    Minimal health-check endpoint.

    Returns HTTP 200 with {"status": "ok"} and whether an extraction is
    currently running.
    """
    return {"status": "ok", "busy": _service.is_busy}
