"""Command-line entry point for the single-file packer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import (
    DEFAULT_ASSETS_DIR,
    DEFAULT_OUTPUT,
    DEFAULT_RETRIES,
    DEFAULT_SOURCE,
    DEFAULT_TIMEOUT,
    PackConfig,
)
from .fetcher import FetchError
from .payloads import MissingPlaceholderError
from .pipeline import run_pipeline

logger = logging.getLogger("inline_pack.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Inline remote scripts, hosted fonts and local JSON payloads into a "
            "single self-contained HTML file."
        ),
    )
    parser.add_argument(
        "--root",
        default=Path.cwd(),
        type=Path,
        help="Project root that relative paths are resolved against",
    )
    parser.add_argument(
        "--source",
        default=DEFAULT_SOURCE,
        type=Path,
        help="HTML document to pack",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT,
        type=Path,
        help="Where the packed document is written",
    )
    parser.add_argument(
        "--assets",
        default=DEFAULT_ASSETS_DIR,
        type=Path,
        help="Directory holding the JSON payload files",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Per-request network timeout in seconds",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=DEFAULT_RETRIES,
        help="Retries for connection errors and transient HTTP statuses",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = PackConfig(
        root=Path(args.root).resolve(),
        source=args.source,
        output=args.output,
        assets_dir=args.assets,
        timeout=args.timeout,
        retries=args.retries,
    )

    try:
        result = asyncio.run(run_pipeline(config))
    except (FetchError, MissingPlaceholderError, OSError, UnicodeDecodeError) as exc:
        logger.error("Packing failed: %s", exc)
        raise SystemExit(1) from exc

    sys.stdout.write(f"Packed single file: {result.output_path}\n")
    logger.debug(
        "script inlined: %s | fonts inlined: %s (%d files) | payloads: %s",
        result.script_inlined,
        result.fonts_inlined,
        result.font_count,
        ", ".join(result.payload_ids),
    )


if __name__ == "__main__":
    main()
