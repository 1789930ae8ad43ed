"""High-level orchestration for packing a document into a single HTML file."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import PackConfig
from .fetcher import ResourceFetcher
from .fonts import inline_font_bundle
from .models import PackResult, Substitution
from .payloads import inject_payloads
from .scripts import inline_remote_script

logger = logging.getLogger("inline_pack")


async def read_text(path: Path) -> str:
    data = await asyncio.to_thread(path.read_bytes)
    return data.decode("utf-8")


async def read_payloads(paths: Dict[str, Path]) -> Dict[str, str]:
    """Read every payload file concurrently, keyed by placeholder id."""
    texts = await asyncio.gather(*(read_text(path) for path in paths.values()))
    return dict(zip(paths, texts))


def write_output(path: Path, html: str) -> None:
    """Write through a sibling temp file so a failed write leaves no partial output."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        tmp_path.write_bytes(html.encode("utf-8"))
        tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


async def pack_document(
    html: str, config: PackConfig, fetcher
) -> Tuple[str, Substitution, Substitution, List[str]]:
    """Run the inlining stages over ``html`` and return it with the stage results."""
    script = await inline_remote_script(html, fetcher, config.script_url)
    fonts = await inline_font_bundle(script.html, fetcher)
    payloads = await read_payloads(config.payload_paths())
    html = inject_payloads(fonts.html, payloads)
    return html, script, fonts, list(payloads)


async def run_pipeline(
    config: PackConfig,
    fetcher: Optional[ResourceFetcher] = None,
) -> PackResult:
    """Read the source, inline remote and local assets, and write the merged file."""
    start = time.perf_counter()
    owns_fetcher = fetcher is None
    if fetcher is None:
        fetcher = ResourceFetcher(timeout=config.timeout, retries=config.retries)
    try:
        logger.info("Reading %s", config.source_path)
        html = await read_text(config.source_path)
        html, script, fonts, payload_ids = await pack_document(html, config, fetcher)
    finally:
        if owns_fetcher:
            fetcher.close()

    output_path = config.output_path
    await asyncio.to_thread(write_output, output_path, html)
    elapsed = time.perf_counter() - start
    logger.info("Wrote %s", output_path)
    logger.debug("Packing finished in %.2fs", elapsed)
    return PackResult(
        output_path=output_path,
        script_inlined=script.found,
        fonts_inlined=fonts.found,
        font_count=fonts.embedded,
        payload_ids=payload_ids,
        total_seconds=elapsed,
    )
