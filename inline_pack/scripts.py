"""Inline the external visualization script as a data URL."""

from __future__ import annotations

import logging
import re
from typing import Union

from .config import D3_URL
from .models import Substitution
from .utils import to_data_url

logger = logging.getLogger("inline_pack")

SCRIPT_MEDIA_TYPE = "text/javascript"


def script_anchor(src: str = D3_URL) -> re.Pattern:
    return re.compile(rf'<script\s+src="{re.escape(src)}"></script>')


def inline_script(
    html: str, script: Union[str, bytes], src: str = D3_URL
) -> Substitution:
    """Swap the external script tag for one whose source is embedded.

    A data URL is used rather than inline code so the script's own text can
    never close the surrounding ``<script>`` block. Bytes are embedded as-is;
    text is encoded as UTF-8.
    """
    match = script_anchor(src).search(html)
    if match is None:
        return Substitution(html=html, found=False, detail=src)
    if isinstance(script, str):
        script = script.encode("utf-8")
    data_url = to_data_url(script, SCRIPT_MEDIA_TYPE)
    tag = f'<script src="{data_url}"></script>'
    return Substitution(
        html=html[: match.start()] + tag + html[match.end():],
        found=True,
        detail=src,
        embedded=1,
    )


async def inline_remote_script(html: str, fetcher, src: str = D3_URL) -> Substitution:
    """Fetch ``src`` and inline it, only if the document still references it."""
    if not script_anchor(src).search(html):
        logger.info("No <script src=%s> tag found; leaving scripts as-is", src)
        return Substitution(html=html, found=False, detail=src)
    script = await fetcher.fetch_bytes(src)
    result = inline_script(html, script, src)
    logger.info("Inlined script %s", src)
    return result
