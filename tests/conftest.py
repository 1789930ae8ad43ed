from __future__ import annotations

from collections import Counter
from typing import Dict, Union

import pytest

from inline_pack.fetcher import FetchError

Response = Union[str, bytes, int]


class FakeFetcher:
    """In-memory stand-in for ResourceFetcher; an int response is an HTTP status."""

    def __init__(self, responses: Dict[str, Response]) -> None:
        self.responses = responses
        self.fetch_count: Counter = Counter()
        self.closed = False

    def _lookup(self, url: str) -> Response:
        self.fetch_count[url] += 1
        if url not in self.responses:
            raise FetchError(url, 404)
        body = self.responses[url]
        if isinstance(body, int):
            raise FetchError(url, body)
        return body

    async def fetch_text(self, url: str) -> str:
        body = self._lookup(url)
        return body.decode("utf-8") if isinstance(body, bytes) else body

    async def fetch_bytes(self, url: str) -> bytes:
        body = self._lookup(url)
        return body.encode("utf-8") if isinstance(body, str) else body

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_fetcher():
    return FakeFetcher
