"""
captions.py — Caption track resolution and transcript line assembly.

Pipeline position: after embedded.extract_initial_data().

    1. find_caption_tracks()    → every caption track descriptor in the blob
    2. select_caption_track()   → one track, by a configurable preference
    3. fetch_caption_payload()  → the track's raw caption document
    4. parse_caption_payload()  → ordered TranscriptLine tuple

The caption document comes in one of YouTube's timedtext formats: JSON3
(`events[].segs[].utf8`, times in ms), classic XML (`<text start dur>`,
times in seconds) or srv3 XML (`<p t d>`, times in ms).  All three are
accepted.
"""

from __future__ import annotations

import html as html_lib
import json
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Iterator
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from yt_page_transcript.config import CaptionPreference
from yt_page_transcript.errors import NoCaptionsAvailableError
from yt_page_transcript.fetcher import HttpGet, get_ok

logger = logging.getLogger(__name__)

_YOUTUBE_BASE = "https://www.youtube.com"

# Caption kind YouTube uses for automatic speech recognition tracks.
_ASR_KIND = "asr"

_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TranscriptLine:
    """
    One caption cue.

    Attributes:
        text:     Cue text, unescaped and whitespace-normalised.
        start:    Offset from the start of the video, in seconds.
        duration: How long the cue is shown, in seconds.
    """
    text: str
    start: float
    duration: float

    def to_dict(self) -> dict:
        return {"text": self.text, "start": self.start, "duration": self.duration}


@dataclass(frozen=True)
class CaptionTrack:
    """
    A selectable caption source for a video.

    `kind` is "asr" for auto-generated tracks and empty for tracks the
    creator uploaded.
    """
    base_url: str
    language_code: str
    kind: str = ""
    name: str = ""

    @property
    def is_generated(self) -> bool:
        return self.kind.lower() == _ASR_KIND


# ---------------------------------------------------------------------------
# Track discovery
# ---------------------------------------------------------------------------

def _walk(data: Any) -> Iterator[dict]:
    """Yield every dict nested anywhere in `data`, depth-first."""
    stack = [data]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            yield node
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            stack.extend(reversed(node))


def _track_name(raw: Any) -> str:
    # Names come as {"simpleText": "..."} or {"runs": [{"text": "..."}]}.
    if isinstance(raw, str):
        return raw
    if isinstance(raw, dict):
        if "simpleText" in raw:
            return str(raw["simpleText"])
        runs = raw.get("runs") or []
        return "".join(str(run.get("text", "")) for run in runs if isinstance(run, dict))
    return ""


def find_caption_tracks(data: dict[str, Any]) -> list[CaptionTrack]:
    """
    Collect caption track descriptors from the parsed embedded data.

    Every `captionTracks` list found anywhere in the object is read, in
    document order.  Entries without a `baseUrl` are skipped and duplicate
    URLs are only kept once.

    Returns:
        The tracks found, possibly an empty list.
    """
    tracks: list[CaptionTrack] = []
    seen: set[str] = set()

    for node in _walk(data):
        raw_tracks = node.get("captionTracks")
        if not isinstance(raw_tracks, list):
            continue
        for raw in raw_tracks:
            if not isinstance(raw, dict) or not raw.get("baseUrl"):
                continue
            base_url = urljoin(_YOUTUBE_BASE, str(raw["baseUrl"]))
            if base_url in seen:
                continue
            seen.add(base_url)
            tracks.append(CaptionTrack(
                base_url=base_url,
                language_code=str(raw.get("languageCode", "")),
                kind=str(raw.get("kind", "")),
                name=_track_name(raw.get("name")),
            ))

    return tracks


# ---------------------------------------------------------------------------
# Track selection
# ---------------------------------------------------------------------------

def _language_matches(track_code: str, wanted: str) -> bool:
    track_code = track_code.lower()
    wanted = wanted.lower()
    return track_code == wanted or track_code.split("-")[0] == wanted


def select_caption_track(
    tracks: list[CaptionTrack],
    preference: CaptionPreference | None = None,
) -> CaptionTrack:
    """
    Pick one caption track according to `preference`.

    Order (with the default preference of English, manual first):
        1. For each requested language in order: a manual track, then an
           auto-generated one.  With prefer_manual=False the kinds swap.
           "en" also matches regional codes such as "en-GB"; an exact
           code is preferred over a regional variant.
        2. No requested language available: the first track of the
           preferred kind.
        3. Otherwise the first track.

    Raises:
        NoCaptionsAvailableError: `tracks` is empty.
    """
    if not tracks:
        raise NoCaptionsAvailableError()

    pref = preference or CaptionPreference()

    def kind_rank(track: CaptionTrack) -> int:
        return int(track.is_generated == pref.prefer_manual)

    for wanted in pref.languages:
        candidates = [t for t in tracks if _language_matches(t.language_code, wanted)]
        if candidates:
            # sorted() is stable, so document order breaks ties.
            return sorted(
                candidates,
                key=lambda t: (kind_rank(t), t.language_code.lower() != wanted.lower()),
            )[0]

    return sorted(tracks, key=kind_rank)[0]


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

def caption_url(track: CaptionTrack, fmt: str = "json3") -> str:
    """Return the track URL with its `fmt` query parameter set to `fmt`."""
    parts = urlsplit(track.base_url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "fmt"]
    query.append(("fmt", fmt))
    return urlunsplit(parts._replace(query=urlencode(query)))


def fetch_caption_payload(
    track: CaptionTrack,
    http_get: HttpGet,
    visitor_data: str | None = None,
) -> str:
    """
    Download the caption document for `track`.

    The visitor token, when present, is sent as X-Goog-Visitor-Id.  It is
    never required.

    Raises:
        NetworkError: Non-2xx response or transport failure.
    """
    headers = {"X-Goog-Visitor-Id": visitor_data} if visitor_data else None
    url = caption_url(track)
    logger.debug("Fetching %s captions (%s) from %s",
                 track.language_code, track.kind or "manual", url)
    return get_ok(http_get, url, headers)


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------

def _clean_text(raw: str) -> str:
    return _WHITESPACE.sub(" ", html_lib.unescape(raw)).strip()


def _parse_json3(payload: str) -> list[TranscriptLine]:
    data = json.loads(payload)
    lines: list[TranscriptLine] = []
    for event in data.get("events") or []:
        segs = event.get("segs")
        if not segs:
            continue
        text = _clean_text("".join(str(seg.get("utf8", "")) for seg in segs))
        if not text:
            continue
        lines.append(TranscriptLine(
            text=text,
            start=int(event.get("tStartMs") or 0) / 1000,
            duration=int(event.get("dDurationMs") or 0) / 1000,
        ))
    return lines


def _parse_xml(payload: str) -> list[TranscriptLine]:
    root = ET.fromstring(payload)
    lines: list[TranscriptLine] = []
    for element in root.iter():
        if element.tag == "text":
            # Classic timedtext: seconds, text double-escaped.
            start = float(element.get("start", 0))
            duration = float(element.get("dur", 0))
        elif element.tag == "p":
            # srv3: milliseconds, text may be split across <s> children.
            start = int(element.get("t", 0)) / 1000
            duration = int(element.get("d", 0)) / 1000
        else:
            continue
        text = _clean_text("".join(element.itertext()))
        if text:
            lines.append(TranscriptLine(text=text, start=start, duration=duration))
    return lines


def parse_caption_payload(payload: str) -> list[TranscriptLine]:
    """
    Parse a caption document into TranscriptLines, in source order.

    Source order is already chronological.  Cues whose text is empty
    after unescaping and trimming are dropped.  A blank payload gives an
    empty list, and so does a payload that cannot be parsed at all (a
    warning is logged).
    """
    payload = payload.strip()
    if not payload:
        return []

    try:
        if payload.startswith("{"):
            return _parse_json3(payload)
        return _parse_xml(payload)
    except (ValueError, TypeError, ET.ParseError, AttributeError) as exc:
        logger.warning("Could not parse caption payload: %s", exc)
        return []
