import asyncio
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from inline_pack.fetcher import FetchError, ResourceFetcher, build_session


class FakeResponse:
    def __init__(self, status_code, content=b"", headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


def test_fetch_text_and_bytes():
    session = FakeSession(
        {
            "https://example.com/a.js": FakeResponse(
                200, "var x = 'ü';".encode("utf-8"), {"Content-Type": "text/javascript; charset=utf-8"}
            ),
            "https://example.com/a.woff2": FakeResponse(200, b"\x00\x01\x02"),
        }
    )
    fetcher = ResourceFetcher(timeout=5.0, session=session)

    assert asyncio.run(fetcher.fetch_text("https://example.com/a.js")) == "var x = 'ü';"
    assert asyncio.run(fetcher.fetch_bytes("https://example.com/a.woff2")) == b"\x00\x01\x02"
    assert session.calls[0] == ("https://example.com/a.js", 5.0)
    assert fetcher.fetch_count["https://example.com/a.js"] == 1


def test_non_200_status_is_fatal():
    session = FakeSession({"https://example.com/missing": FakeResponse(404)})
    fetcher = ResourceFetcher(session=session)

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(fetcher.fetch_text("https://example.com/missing"))
    assert excinfo.value.status_code == 404
    assert str(excinfo.value) == "GET https://example.com/missing -> 404"


def test_other_success_statuses_are_rejected():
    session = FakeSession({"https://example.com/empty": FakeResponse(204)})
    fetcher = ResourceFetcher(session=session)

    with pytest.raises(FetchError):
        asyncio.run(fetcher.fetch_bytes("https://example.com/empty"))


def test_transport_errors_are_wrapped():
    error = requests.ConnectionError("connection refused")
    session = FakeSession({"https://example.com/down": error})
    fetcher = ResourceFetcher(session=session)

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(fetcher.fetch_text("https://example.com/down"))
    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)
    assert excinfo.value.__cause__ is error


def test_context_manager_closes_session():
    session = FakeSession({})
    with ResourceFetcher(session=session):
        pass
    assert session.closed


def test_build_session_mounts_retry_policy():
    session = build_session(retries=2, backoff_factor=0.1)
    adapter = session.get_adapter("https://fonts.gstatic.com/")
    assert adapter.max_retries.total == 2
    assert 503 in adapter.max_retries.status_forcelist
    session.close()


@pytest.fixture
def status_server():
    """Local HTTP server answering each GET with the next queued status."""
    statuses = []
    hits = []

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            hits.append(self.path)
            status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
            body = b"ok" if status == 200 else b"unavailable"
            self.send_response(status)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    base_url = f"http://127.0.0.1:{server.server_address[1]}"
    yield base_url, statuses, hits
    server.shutdown()
    server.server_close()


def test_retries_exhausted_on_503_reports_final_status(status_server):
    base_url, statuses, hits = status_server
    statuses.append(503)

    with ResourceFetcher(timeout=5.0, retries=2, backoff_factor=0) as fetcher:
        with pytest.raises(FetchError) as excinfo:
            asyncio.run(fetcher.fetch_text(f"{base_url}/x"))

    assert excinfo.value.status_code == 503
    assert str(excinfo.value) == f"GET {base_url}/x -> 503"
    assert hits == ["/x"] * 3


def test_transient_503_is_retried(status_server):
    base_url, statuses, hits = status_server
    statuses.extend([503, 200])

    with ResourceFetcher(timeout=5.0, retries=2, backoff_factor=0) as fetcher:
        body = asyncio.run(fetcher.fetch_bytes(f"{base_url}/x"))

    assert body == b"ok"
    assert len(hits) == 2
