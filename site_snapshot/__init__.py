"""Save rendered web pages as self-contained local directories.

Example usage:

    from pathlib import Path
    from site_snapshot import SnapshotConfig, localize_html, snapshot_page

    config = SnapshotConfig(output_root=Path("out"))

    # Render with Playwright, then localize every stylesheet, script and image
    result = snapshot_page("https://example.com/", config)
    print(result.html_path)

    # Localize HTML that was rendered elsewhere
    result = localize_html(html, "https://example.com/docs/page.html", config)
"""

from __future__ import annotations

from .config import SnapshotConfig
from .errors import (
    DocumentParseError,
    FetchFailure,
    LocalizationError,
    MalformedReference,
    PathCollision,
    SnapshotError,
    WriteFailure,
)
from .fetch import HttpFetcher
from .models import (
    AssetKind,
    AssetReference,
    DownloadRecord,
    DownloadState,
    Failed,
    FetchedResource,
    Localized,
    RenderedPage,
    RewrittenDocument,
    SnapshotJob,
)
from .rewriter import HtmlAssetRewriter, write_document
from .snapshot import (
    SnapshotResult,
    localize_html,
    package_snapshot,
    snapshot_page,
    snapshot_page_async,
)
from .store import ResourceStore
from .urls import map_to_local_path, relative_from, resolve

__all__ = [
    "SnapshotConfig",
    "SnapshotJob",
    "SnapshotResult",
    "AssetKind",
    "AssetReference",
    "DownloadRecord",
    "DownloadState",
    "FetchedResource",
    "Localized",
    "Failed",
    "RewrittenDocument",
    "RenderedPage",
    "HttpFetcher",
    "ResourceStore",
    "HtmlAssetRewriter",
    "write_document",
    "localize_html",
    "package_snapshot",
    "snapshot_page",
    "snapshot_page_async",
    "resolve",
    "map_to_local_path",
    "relative_from",
    "SnapshotError",
    "DocumentParseError",
    "LocalizationError",
    "MalformedReference",
    "FetchFailure",
    "WriteFailure",
    "PathCollision",
]
