"""Configuration objects and constants for snapshot runs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_INDEX_NAME = "index.html"
SCREENSHOT_NAME = "screenshot.png"
SCREENSHOT_MODES = ("viewport", "full", "partial")
MAX_ASSET_BYTES = 50 * 1024 * 1024


@dataclass
class SnapshotConfig:
    """Top-level settings that control rendering, fetching and output.

    ``screenshot`` selects an optional PNG capture of the rendered page:
    ``viewport`` (visible area), ``full`` (whole scrolled page) or
    ``partial`` (the top ``screenshot_percent`` percent of the page).
    """

    output_root: Path
    wait_after_load: float = 1.0
    navigation_timeout: float = 30.0
    fetch_timeout: float = 15.0
    max_asset_bytes: int = MAX_ASSET_BYTES
    user_agent: str = DEFAULT_USER_AGENT
    headless: bool = True
    user_data_dir: Optional[Path] = None
    viewport: Tuple[int, int] = (1366, 900)
    archive: bool = False
    screenshot: Optional[str] = None
    screenshot_percent: int = 50

    def __post_init__(self) -> None:
        if self.screenshot is not None and self.screenshot not in SCREENSHOT_MODES:
            raise ValueError(f"Unknown screenshot mode {self.screenshot!r}")
        if not 1 <= self.screenshot_percent <= 100:
            raise ValueError("screenshot_percent must be between 1 and 100")
