"""
Tests for the shared outbound HTTP helpers.
"""

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import patch

import pytest
import requests

from scanstation.clients.http import (
    UpstreamRequestError,
    UpstreamStatusError,
    UpstreamTimeoutError,
    fetch_with_timeout,
    parse_body,
    parse_body_or_raw,
    raise_for_upstream_status,
)


class TestFetchWithTimeout:
    """Tests for fetch_with_timeout."""

    def test_passes_timeout_and_kwargs(self, make_response):
        with patch("scanstation.clients.http.requests.request") as mock_request:
            mock_request.return_value = make_response(200, json_body={"ok": True})

            response = fetch_with_timeout(
                "POST", "https://pp.test/", timeout=5.0, data={"a": "1"}
            )

        assert response.status_code == 200
        mock_request.assert_called_once_with(
            "POST", "https://pp.test/", timeout=5.0, data={"a": "1"}
        )

    def test_default_timeout_is_twenty_seconds(self, make_response):
        with patch("scanstation.clients.http.requests.request") as mock_request:
            mock_request.return_value = make_response(200)
            fetch_with_timeout("GET", "https://pp.test/")

        assert mock_request.call_args.kwargs["timeout"] == 20.0

    def test_non_2xx_is_returned_not_raised(self, make_response):
        with patch("scanstation.clients.http.requests.request") as mock_request:
            mock_request.return_value = make_response(503, text="down")
            response = fetch_with_timeout("GET", "https://pp.test/")

        assert response.status_code == 503

    def test_timeout_raises_with_message(self):
        with patch("scanstation.clients.http.requests.request") as mock_request:
            mock_request.side_effect = requests.Timeout("read timed out")

            with pytest.raises(UpstreamTimeoutError) as exc_info:
                fetch_with_timeout("GET", "https://pp.test/")

        assert str(exc_info.value) == "Request to https://pp.test/ timed out after 20000ms"
        assert exc_info.value.timeout == 20.0
        assert exc_info.value.url == "https://pp.test/"

    def test_timeout_is_an_upstream_request_error(self):
        with patch("scanstation.clients.http.requests.request") as mock_request:
            mock_request.side_effect = requests.ConnectTimeout("connect timed out")

            with pytest.raises(UpstreamRequestError):
                fetch_with_timeout("GET", "https://pp.test/", timeout=1.5)

    def test_connection_error(self):
        with patch("scanstation.clients.http.requests.request") as mock_request:
            mock_request.side_effect = requests.ConnectionError("refused")

            with pytest.raises(UpstreamRequestError) as exc_info:
                fetch_with_timeout("GET", "https://pp.test/")

        assert not isinstance(exc_info.value, UpstreamTimeoutError)
        assert "refused" in exc_info.value.message


class TestParseBody:
    """Tests for JSON parsing with text fallback."""

    def test_json_body(self, make_response):
        assert parse_body(make_response(200, json_body={"a": 1})) == ({"a": 1}, True)

    def test_text_body(self, make_response):
        assert parse_body(make_response(200, text="<html>")) == ("<html>", False)

    def test_empty_body_is_text(self, make_response):
        assert parse_body(make_response(200, text="")) == ("", False)

    def test_raw_wrapper(self, make_response):
        assert parse_body_or_raw(make_response(200, text="job 1")) == {"raw": "job 1"}

    def test_raw_wrapper_keeps_json(self, make_response):
        assert parse_body_or_raw(make_response(201, text="12345")) == 12345


class TestRaiseForUpstreamStatus:
    """Tests for raise_for_upstream_status."""

    def test_success_does_not_raise(self, make_response):
        raise_for_upstream_status(make_response(201, json_body={}))

    def test_error_carries_response_details(self, make_response):
        response = make_response(422, json_body={"errors": {"base": ["bad"]}})

        with pytest.raises(UpstreamStatusError) as exc_info:
            raise_for_upstream_status(response)

        error = exc_info.value
        assert error.status_code == 422
        assert error.reason == response.reason
        assert error.data == {"errors": {"base": ["bad"]}}
        assert '"errors"' in error.text


class DripHandler(BaseHTTPRequestHandler):
    """Serves /slow one byte every 0.4s and /fast all at once."""

    def do_GET(self):
        body = b"0123456789"
        self.send_response(200)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        try:
            if self.path.startswith("/slow"):
                for i in range(len(body)):
                    self.wfile.write(body[i:i + 1])
                    self.wfile.flush()
                    time.sleep(0.4)
            else:
                self.wfile.write(body)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def local_server(monkeypatch):
    for name in ("no_proxy", "NO_PROXY"):
        monkeypatch.setenv(name, "127.0.0.1,localhost")
    server = ThreadingHTTPServer(("127.0.0.1", 0), DripHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    server.server_close()


class TestDeadlineAgainstRealServer:
    """fetch_with_timeout bounds the whole exchange, not each socket read."""

    def test_slow_body_hits_deadline(self, local_server):
        url = f"{local_server}/slow"
        start = time.monotonic()

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            fetch_with_timeout("GET", url, timeout=1.0)

        elapsed = time.monotonic() - start
        assert elapsed < 2.5
        assert str(exc_info.value) == f"Request to {url} timed out after 1000ms"

    def test_fast_body_is_returned(self, local_server):
        response = fetch_with_timeout("GET", f"{local_server}/fast", timeout=5.0)

        assert response.status_code == 200
        assert response.text == "0123456789"
