"""High-level orchestration: render a page, localize its assets, save it."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from playwright.async_api import (
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import SCREENSHOT_NAME, SnapshotConfig
from .errors import SnapshotError, WriteFailure
from .fetch import HttpFetcher
from .models import DownloadRecord, DownloadState, SnapshotJob
from .renderer import render_page
from .rewriter import HtmlAssetRewriter, write_document
from .store import Fetcher, ResourceStore
from .urls import url_hash
from .utils import url_slug

logger = logging.getLogger("site_snapshot")


@dataclass
class SnapshotResult:
    """Outcome of one snapshot job."""

    origin_url: str
    html_path: Path
    records: Dict[str, DownloadRecord] = field(default_factory=dict)
    archive_path: Optional[Path] = None
    screenshot_path: Optional[Path] = None
    total_seconds: float = 0.0

    def urls_in_state(self, state: DownloadState) -> List[str]:
        return [url for url, record in self.records.items() if record.state is state]

    @property
    def fetched(self) -> List[str]:
        return self.urls_in_state(DownloadState.FETCHED)

    @property
    def failed(self) -> List[str]:
        return self.urls_in_state(DownloadState.FAILED)


def package_snapshot(output_root: Path) -> Path:
    """Zip a snapshot directory into ``<output_root>.zip`` next to it."""
    root = Path(output_root).resolve()
    archive = shutil.make_archive(str(root), "zip", root_dir=root)
    logger.info("Packaged snapshot into %s", archive)
    return Path(archive)


def write_screenshot(data: bytes, output_root: Path) -> Path:
    target = Path(output_root) / SCREENSHOT_NAME
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:
        raise WriteFailure(str(target), f"cannot write screenshot ({exc})") from exc
    logger.info("Saved screenshot to %s", target)
    return target


def build_output_dir(output_root: Path, url: str) -> Path:
    """Per-page directory so several pages never share an output root.

    The slug keeps the name readable; the URL hash separates pages whose
    slugs coincide (query strings, or ``/a/b`` next to ``/a-b``).
    """
    return Path(output_root) / f"{url_slug(url)}-{url_hash(url, 6)}"


def localize_html(
    html: str,
    origin_url: str,
    config: SnapshotConfig,
    fetch: Optional[Fetcher] = None,
    screenshot: Optional[bytes] = None,
) -> SnapshotResult:
    """Localize already-rendered HTML into ``config.output_root``.

    A screenshot captured while rendering is saved next to the HTML, before
    the directory is archived.
    """
    start = time.perf_counter()
    job = SnapshotJob(
        origin_url=origin_url,
        output_root=Path(config.output_root),
        html_content=html,
    )
    store = ResourceStore(job.output_root, fetch or HttpFetcher(config))
    document = HtmlAssetRewriter(store).localize(job)
    html_path = write_document(document, job.output_root)
    screenshot_path = write_screenshot(screenshot, job.output_root) if screenshot else None
    archive_path = package_snapshot(job.output_root) if config.archive else None

    summary = store.summary()
    logger.info(
        "Localized %s: %d fetched, %d failed (%d requests)",
        origin_url,
        summary[DownloadState.FETCHED.value],
        summary[DownloadState.FAILED.value],
        store.fetch_count,
    )
    return SnapshotResult(
        origin_url=origin_url,
        html_path=html_path,
        records=dict(store.records),
        archive_path=archive_path,
        screenshot_path=screenshot_path,
        total_seconds=time.perf_counter() - start,
    )


async def snapshot_page_async(
    url: str,
    config: SnapshotConfig,
    fetch: Optional[Fetcher] = None,
) -> SnapshotResult:
    """Render ``url`` with Playwright and localize the settled document."""
    async with async_playwright() as playwright:
        page = await render_page(playwright, url, config)
    return await asyncio.to_thread(
        localize_html, page.html, page.final_url, config, fetch, page.screenshot
    )


def snapshot_page(
    url: str,
    config: SnapshotConfig,
    fetch: Optional[Fetcher] = None,
) -> SnapshotResult:
    """Synchronous wrapper for snapshot_page_async."""
    return asyncio.run(snapshot_page_async(url, config, fetch))


async def snapshot_pages_async(
    urls: List[str],
    config: SnapshotConfig,
) -> List[SnapshotResult]:
    """Snapshot each URL sequentially into its own directory.

    Pages that fail to render or parse are logged and left out of the result.
    """
    results: List[SnapshotResult] = []
    for url in urls:
        page_config = dataclasses.replace(
            config, output_root=build_output_dir(config.output_root, url)
        )
        try:
            results.append(await snapshot_page_async(url, page_config))
        except PlaywrightTimeoutError as exc:
            logger.error("Timeout while loading %s: %s", url, exc)
        except SnapshotError as exc:
            logger.error("Snapshot of %s failed: %s", url, exc)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error while snapshotting %s", url)
    return results
