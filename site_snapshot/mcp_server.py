"""MCP server exposing the snapshot tool."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import SnapshotConfig
from .snapshot import snapshot_page_async

logger = logging.getLogger("site_snapshot.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="site-snapshot")


@mcp.tool()
async def snapshot(
    url: str,
    output_dir: str,
    archive: bool = False,
    screenshot: Optional[str] = None,
) -> str:
    """Render a web page and save it with its assets under ``output_dir``.

    ``screenshot`` may be ``viewport``, ``full`` or ``partial`` to also save
    screenshot.png.
    """

    config = SnapshotConfig(
        output_root=Path(output_dir).expanduser().resolve(),
        archive=archive,
        screenshot=screenshot,
    )
    result = await snapshot_page_async(url, config)
    return json.dumps(
        {
            "url": result.origin_url,
            "html_path": str(result.html_path),
            "archive_path": str(result.archive_path) if result.archive_path else None,
            "screenshot_path": (
                str(result.screenshot_path) if result.screenshot_path else None
            ),
            "fetched": result.fetched,
            "failed": result.failed,
        },
        indent=2,
    )


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
