"""Data models passed between the packing stages."""

from __future__ import annotations

import base64
import binascii
import codecs
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

DATA_URL_PREFIX = "data:"
BASE64_MARKER = ";base64,"


@dataclass
class FetchedResource:
    """Fully buffered response body for a single GET."""

    url: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def encoding(self) -> str:
        if self.content_type:
            for param in self.content_type.split(";")[1:]:
                key, _, value = param.strip().partition("=")
                if key.lower() == "charset" and value:
                    charset = value.strip('"')
                    try:
                        return codecs.lookup(charset).name
                    except LookupError:
                        return "utf-8"
        return "utf-8"

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding)


@dataclass
class EmbeddedData:
    """Inline ``data:`` representation of fetched content."""

    media_type: str
    payload: bytes

    def to_url(self) -> str:
        encoded = base64.b64encode(self.payload).decode("ascii")
        return f"{DATA_URL_PREFIX}{self.media_type}{BASE64_MARKER}{encoded}"

    @classmethod
    def from_url(cls, url: str) -> "EmbeddedData":
        """Parse a base64 data URL produced by :meth:`to_url`."""
        if not url.startswith(DATA_URL_PREFIX) or BASE64_MARKER not in url:
            raise ValueError(f"Not a base64 data URL: {url[:40]}")
        header, _, encoded = url[len(DATA_URL_PREFIX):].partition(BASE64_MARKER)
        try:
            payload = base64.b64decode(encoded, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"Invalid base64 payload in data URL: {exc}") from exc
        return cls(media_type=header, payload=payload)


@dataclass
class Substitution:
    """Outcome of an anchored edit; ``found`` is False when the anchor was absent."""

    html: str
    found: bool
    detail: Optional[str] = None
    embedded: int = 0


@dataclass
class PackResult:
    """Summary of a completed packing run."""

    output_path: Path
    script_inlined: bool
    fonts_inlined: bool
    font_count: int
    payload_ids: List[str]
    total_seconds: float
