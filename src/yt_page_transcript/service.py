"""
service.py — Host-level entry point with a single-flight guard.

At most one extraction runs at a time per TranscriptService.  A call made
while another is in progress is rejected with BusyError before any
network request is issued; it is never queued.  The guard is released on
every exit path (success, empty transcript, or error).
"""

from __future__ import annotations

import logging
import threading

from yt_page_transcript.config import ExtractorConfig
from yt_page_transcript.errors import BusyError
from yt_page_transcript.extractor import TranscriptResponse, fetch_transcript
from yt_page_transcript.fetcher import HttpGet

logger = logging.getLogger(__name__)


class TranscriptService:
    """Runs fetch_transcript() with a process-wide busy flag."""

    def __init__(
        self,
        config: ExtractorConfig | None = None,
        http_get: HttpGet | None = None,
    ) -> None:
        self.config = config or ExtractorConfig()
        self.http_get = http_get
        self._busy = threading.Lock()

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    def fetch_transcript(
        self,
        url: str,
        config: ExtractorConfig | None = None,
    ) -> TranscriptResponse:
        """
        Run the extraction pipeline for `url` unless one is already running.

        Args:
            url:    A YouTube video URL.
            config: Per-call override of the service's config.

        Raises:
            BusyError:       Another extraction is in progress.
            InvalidUrlError: No video ID in `url`.
            NetworkError:    The page or caption fetch failed.
        """
        # Non-blocking acquire is the atomic check-and-set.
        if not self._busy.acquire(blocking=False):
            logger.info("Rejected %s: extraction already in progress", url)
            raise BusyError()
        try:
            return fetch_transcript(
                url,
                config=config or self.config,
                http_get=self.http_get,
            )
        finally:
            self._busy.release()
