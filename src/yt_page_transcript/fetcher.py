"""
fetcher.py — The HTTP collaborator used by the pipeline.

Everything that touches the network goes through a single callable with
the shape

    http_get(url, headers=None) -> (status, body_text)

The default implementation wraps `requests`.  Tests (and host
applications with their own HTTP stack) pass a different callable into
fetch_page() / fetch_transcript().  There is no retry and no caching: a
failure propagates immediately as NetworkError.
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping

import requests

from yt_page_transcript.config import ExtractorConfig
from yt_page_transcript.errors import NetworkError

logger = logging.getLogger(__name__)

HttpGet = Callable[..., tuple[int, str]]


def requests_get(
    url: str,
    headers: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> tuple[int, str]:
    """
    Issue one anonymous GET and return (status, body_text).

    Transport-level failures (DNS, refused connection, timeout) are raised
    as NetworkError.  HTTP error statuses are returned as-is so that the
    caller decides what counts as failure.
    """
    if timeout is None:
        timeout = ExtractorConfig().timeout
    try:
        resp = requests.get(url, headers=dict(headers or {}), timeout=timeout)
    except requests.RequestException as exc:
        raise NetworkError(url, reason=str(exc)) from exc
    return resp.status_code, resp.text


def make_http_get(config: ExtractorConfig) -> HttpGet:
    """Bind the config's timeout and default headers into a requests-backed http_get."""

    def http_get(url: str, headers: Mapping[str, str] | None = None) -> tuple[int, str]:
        merged = dict(config.request_headers)
        if headers:
            merged.update(headers)
        return requests_get(url, merged, timeout=config.timeout)

    return http_get


def get_ok(
    http_get: HttpGet,
    url: str,
    headers: Mapping[str, str] | None = None,
) -> str:
    """
    GET through `http_get` and return the body, raising on non-2xx.

    Raises:
        NetworkError: Non-2xx status or transport failure.
    """
    try:
        status, body = http_get(url, headers)
    except NetworkError:
        raise
    except (requests.RequestException, OSError) as exc:
        # Custom collaborators may raise their own transport errors.
        raise NetworkError(url, reason=str(exc)) from exc

    if not 200 <= status < 300:
        logger.warning("GET %s returned HTTP %s", url, status)
        raise NetworkError(url, status=status)
    return body


def fetch_page(url: str, http_get: HttpGet | None = None) -> str:
    """
    Fetch the watch page HTML for `url`.

    Args:
        url:      The watch page URL.
        http_get: Optional HTTP collaborator.  Defaults to a requests-backed
                  getter using ExtractorConfig defaults.

    Returns:
        The raw HTML text.  It is not interpreted here.

    Raises:
        NetworkError: Non-2xx response or transport failure.
    """
    getter = http_get or make_http_get(ExtractorConfig())
    logger.debug("Fetching watch page %s", url)
    return get_ok(getter, url)
