"""
test_fetcher.py — Tests for the requests-backed HTTP collaborator and
fetch_page().  requests.get is mocked throughout.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from yt_page_transcript.config import ExtractorConfig
from yt_page_transcript.errors import NetworkError
from yt_page_transcript.fetcher import fetch_page, make_http_get, requests_get

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def _fake_response(status: int, text: str) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    return resp


class TestRequestsGet:
    """Tests for requests_get()."""

    @patch("yt_page_transcript.fetcher.requests.get")
    def test_returns_status_and_body(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _fake_response(404, "gone")

        assert requests_get(URL, {"X-Test": "1"}, timeout=2.0) == (404, "gone")
        mock_get.assert_called_once_with(URL, headers={"X-Test": "1"}, timeout=2.0)

    @patch("yt_page_transcript.fetcher.requests.get")
    def test_transport_error_wrapped(self, mock_get: MagicMock) -> None:
        mock_get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(NetworkError) as exc_info:
            requests_get(URL)

        assert exc_info.value.status is None
        assert "refused" in exc_info.value.message


class TestMakeHttpGet:
    """Tests for make_http_get()."""

    @patch("yt_page_transcript.fetcher.requests.get")
    def test_merges_config_headers(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _fake_response(200, "ok")
        config = ExtractorConfig(timeout=4.0, user_agent="test-agent")

        make_http_get(config)(URL, {"X-Goog-Visitor-Id": "abc"})

        kwargs = mock_get.call_args.kwargs
        assert kwargs["timeout"] == 4.0
        assert kwargs["headers"]["User-Agent"] == "test-agent"
        assert kwargs["headers"]["X-Goog-Visitor-Id"] == "abc"


class TestFetchPage:
    """Tests for fetch_page()."""

    def test_returns_html(self) -> None:
        http_get = MagicMock(return_value=(200, "<html></html>"))

        assert fetch_page(URL, http_get) == "<html></html>"
        http_get.assert_called_once_with(URL, None)

    @pytest.mark.parametrize("status", [301, 403, 404, 500])
    def test_non_2xx_raises(self, status: int) -> None:
        http_get = MagicMock(return_value=(status, "nope"))

        with pytest.raises(NetworkError) as exc_info:
            fetch_page(URL, http_get)

        assert exc_info.value.status == status

    @patch("yt_page_transcript.fetcher.requests.get")
    def test_default_collaborator_uses_requests(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _fake_response(200, "<html>page</html>")

        assert fetch_page(URL) == "<html>page</html>"
        assert "User-Agent" in mock_get.call_args.kwargs["headers"]
