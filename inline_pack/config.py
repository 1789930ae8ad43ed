"""Configuration objects and constants for the packer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

D3_URL = "https://d3js.org/d3.v7.min.js"
FONT_STYLESHEET_PREFIX = "https://fonts.googleapis.com/"
FONT_FILE_PREFIX = "https://fonts.gstatic.com/"
HEAD_MARKER = "<head>"

DEFAULT_SOURCE = Path("examples/sim-force/index.html")
DEFAULT_OUTPUT = Path("examples/sim-force/index.single.html")
DEFAULT_ASSETS_DIR = Path("assets")
DEFAULT_PAYLOAD_FILES = {
    "sim-data": "similarities.json",
    "ts-data": "ts-2009-2010-3m.json",
}

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 3


@dataclass
class PackConfig:
    """Top-level settings that control where the packer reads and writes."""

    root: Path
    source: Path = DEFAULT_SOURCE
    output: Path = DEFAULT_OUTPUT
    assets_dir: Path = DEFAULT_ASSETS_DIR
    payload_files: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_PAYLOAD_FILES)
    )
    script_url: str = D3_URL
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    @property
    def source_path(self) -> Path:
        return self.resolve(self.source)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output)

    def payload_paths(self) -> Dict[str, Path]:
        """Map each placeholder id to the asset file that fills it."""
        assets_dir = self.resolve(self.assets_dir)
        return {
            element_id: assets_dir / filename
            for element_id, filename in self.payload_files.items()
        }
