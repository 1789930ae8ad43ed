"""Resolve a hosted web-font stylesheet into an inline style block."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Dict, List, Optional, Tuple

from .config import FONT_FILE_PREFIX, FONT_STYLESHEET_PREFIX, HEAD_MARKER
from .models import Substitution
from .utils import font_media_type, to_data_url

logger = logging.getLogger("inline_pack")

_STYLESHEET_HREF = rf'href="({re.escape(FONT_STYLESHEET_PREFIX)}[^"]+)"'
STYLESHEET_LINK_PATTERN = re.compile(rf"<link[^>]+{_STYLESHEET_HREF}[^>]*>")
STYLESHEET_LINK_LINE_PATTERN = re.compile(
    rf"\n?\s*<link[^>]+{_STYLESHEET_HREF}[^>]*>\n?"
)
FONT_URL_PATTERN = re.compile(
    rf"""url\((['"]?)({re.escape(FONT_FILE_PREFIX)}[\w\-/.@%?=&]+)\1\)"""
)


def find_font_stylesheet(html: str) -> Optional[str]:
    """Return the href of the first hosted font stylesheet link, if any."""
    match = STYLESHEET_LINK_PATTERN.search(html)
    return match.group(1) if match else None


def remove_font_stylesheet(html: str) -> str:
    """Drop the first font stylesheet link along with its surrounding whitespace."""
    return STYLESHEET_LINK_LINE_PATTERN.sub("\n", html, count=1)


def font_urls(css: str) -> List[str]:
    """Distinct font file URLs referenced by ``url(...)``, in first-seen order."""
    seen: Dict[str, None] = {}
    for match in FONT_URL_PATTERN.finditer(css):
        seen.setdefault(match.group(2), None)
    return list(seen)


async def embed_font_urls(css: str, fetcher) -> str:
    """Replace every font URL in ``css`` with a data URL, fetching each once."""
    urls = font_urls(css)
    if not urls:
        return css
    # Let every fetch settle before raising so none outlives the session.
    payloads = await asyncio.gather(
        *(fetcher.fetch_bytes(url) for url in urls), return_exceptions=True
    )
    for outcome in payloads:
        if isinstance(outcome, BaseException):
            raise outcome
    embedded = {
        url: to_data_url(data, font_media_type(url, data))
        for url, data in zip(urls, payloads)
    }
    # Longest first so a URL that prefixes another cannot clobber it.
    for url in sorted(embedded, key=len, reverse=True):
        css = css.replace(url, embedded[url])
    logger.debug("Embedded %d font file(s)", len(embedded))
    return css


async def build_font_style(css_url: str, fetcher) -> Tuple[str, int]:
    """Fetch the stylesheet and return it as a style block plus its font file count."""
    css = await fetcher.fetch_text(css_url)
    count = len(font_urls(css))
    css = await embed_font_urls(css, fetcher)
    return f"<style>\n{css}\n</style>", count


async def inline_font_bundle(html: str, fetcher) -> Substitution:
    """Replace the hosted font stylesheet link with an equivalent inline style block.

    The style block lands directly after ``<head>``. When there is no font link,
    or no ``<head>`` to receive the block, the document is returned untouched.
    """
    css_url = find_font_stylesheet(html)
    if css_url is None:
        logger.info("No hosted font stylesheet found; skipping font inlining")
        return Substitution(html=html, found=False)
    if HEAD_MARKER not in html:
        logger.warning(
            "Found font stylesheet %s but no %s marker; leaving it linked",
            css_url,
            HEAD_MARKER,
        )
        return Substitution(html=html, found=False, detail=css_url)

    style, count = await build_font_style(css_url, fetcher)

    html = remove_font_stylesheet(html)
    html = html.replace(HEAD_MARKER, HEAD_MARKER + style, 1)
    logger.info("Inlined font stylesheet %s (%d font files)", css_url, count)
    return Substitution(html=html, found=True, detail=css_url, embedded=count)
