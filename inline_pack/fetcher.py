"""Remote resource fetching over HTTPS."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import DEFAULT_RETRIES, DEFAULT_TIMEOUT
from .models import FetchedResource

logger = logging.getLogger("inline_pack")

RETRY_STATUSES = (429, 500, 502, 503, 504)


class FetchError(RuntimeError):
    """A GET did not complete with status 200."""

    def __init__(
        self,
        url: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        outcome = status_code if status_code is not None else reason or "no response"
        super().__init__(f"GET {url} -> {outcome}")


def build_session(
    retries: int = DEFAULT_RETRIES, backoff_factor: float = 0.5
) -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods={"GET"},
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class ResourceFetcher:
    """Buffered GET of remote resources, as text or as raw bytes.

    Requests are blocking, so each one runs in a worker thread and the caller
    awaits it; the event loop itself never does network I/O.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        backoff_factor: float = 0.5,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or build_session(retries, backoff_factor)
        self.fetch_count: Counter = Counter()

    def __enter__(self) -> "ResourceFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _get(self, url: str) -> FetchedResource:
        logger.debug("GET %s", url)
        self.fetch_count[url] += 1
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(url, reason=str(exc)) from exc
        if resp.status_code != 200:
            raise FetchError(url, resp.status_code)
        resource = FetchedResource(
            url=url,
            content=resp.content,
            content_type=resp.headers.get("Content-Type"),
        )
        logger.info("Fetched %s (%d bytes)", url, len(resource.content))
        return resource

    async def fetch(self, url: str) -> FetchedResource:
        return await asyncio.to_thread(self._get, url)

    async def fetch_text(self, url: str) -> str:
        resource = await self.fetch(url)
        return resource.text

    async def fetch_bytes(self, url: str) -> bytes:
        resource = await self.fetch(url)
        return resource.content
