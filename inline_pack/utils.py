"""Helpers for building embedded data references."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from filetype import guess

from .models import EmbeddedData

GENERIC_MEDIA_TYPE = "application/octet-stream"
FONT_MEDIA_TYPES = {
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
}


def to_data_url(data: bytes, media_type: str) -> str:
    """Encode raw bytes as a base64 ``data:`` URL."""
    return EmbeddedData(media_type=media_type, payload=data).to_url()


def detect_font_type(data: bytes) -> Optional[str]:
    """Detect a font container using filetype; returns a media type."""
    if not data:
        return None
    kind = guess(data)
    if kind:
        return FONT_MEDIA_TYPES.get(f".{kind.extension.lower()}")
    return None


def font_media_type(url: str, data: bytes = b"") -> str:
    """Pick the media type for a font URL, falling back to the file signature."""
    path = urlparse(url).path.lower()
    for suffix, media_type in FONT_MEDIA_TYPES.items():
        if path.endswith(suffix):
            return media_type
    return detect_font_type(data) or GENERIC_MEDIA_TYPE
