"""Command-line entry point for site-snapshot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, List, Sequence

from .config import SCREENSHOT_MODES, SnapshotConfig
from .errors import SnapshotError
from .snapshot import SnapshotResult, localize_html, snapshot_pages_async

logger = logging.getLogger("site_snapshot.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("capture", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        default="output",
        type=Path,
        help="Directory where the HTML and its assets should be written",
    )
    parser.add_argument(
        "--fetch-timeout",
        type=float,
        default=15.0,
        help="Timeout in seconds for each asset download",
    )
    parser.add_argument(
        "--zip",
        action="store_true",
        help="Also package each snapshot directory into a .zip archive",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _percent(value: str) -> int:
    number = int(value)
    if not 1 <= number <= 100:
        raise argparse.ArgumentTypeError(f"{number} is not between 1 and 100")
    return number


def _add_capture_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("urls", nargs="+", help="One or more URLs to snapshot")
    parser.add_argument(
        "--wait",
        type=float,
        default=1.0,
        help="Seconds to wait after network idle before reading HTML",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--user-data-dir",
        type=Path,
        default=None,
        help="Browser profile directory to render with (persistent context)",
    )
    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Show the browser window while rendering",
    )
    parser.add_argument(
        "--screenshot",
        choices=SCREENSHOT_MODES,
        default=None,
        help="Also save screenshot.png: the viewport, the full page, or its top part",
    )
    parser.add_argument(
        "--screenshot-percent",
        type=_percent,
        default=50,
        help="Share of the page height (1-100) kept by --screenshot partial",
    )
    _add_common_arguments(parser)


def _add_localize_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("html_file", type=Path, help="Rendered HTML file to localize")
    parser.add_argument(
        "--url",
        required=True,
        help="URL the HTML was rendered from; relative references resolve against it",
    )
    _add_common_arguments(parser)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Save a web page with its stylesheets, scripts, images and fonts "
            "as a self-contained local directory."
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    capture_parser = subparsers.add_parser(
        "capture", help="Render pages with Playwright and localize their assets"
    )
    _add_capture_arguments(capture_parser)

    localize_parser = subparsers.add_parser(
        "localize", help="Localize the assets of an HTML file already on disk"
    )
    _add_localize_arguments(localize_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _log_result(result: SnapshotResult) -> None:
    logger.info(
        "%s -> %s (%d assets saved, %d skipped, %.2fs)",
        result.origin_url,
        result.html_path,
        len(result.fetched),
        len(result.failed),
        result.total_seconds,
    )
    for url in result.failed:
        logger.debug("Not localized: %s", url)
    if result.screenshot_path:
        logger.info("Screenshot: %s", result.screenshot_path)
    if result.archive_path:
        logger.info("Archive: %s", result.archive_path)


def _run_capture(args: argparse.Namespace) -> int:
    config = SnapshotConfig(
        output_root=Path(args.output).resolve(),
        wait_after_load=args.wait,
        navigation_timeout=args.timeout,
        fetch_timeout=args.fetch_timeout,
        headless=not args.no_headless,
        user_data_dir=args.user_data_dir,
        archive=args.zip,
        screenshot=args.screenshot,
        screenshot_percent=args.screenshot_percent,
    )

    overall_start = time.perf_counter()
    results: List[SnapshotResult] = asyncio.run(snapshot_pages_async(args.urls, config))
    total_elapsed = time.perf_counter() - overall_start

    for result in results:
        _log_result(result)
    successes = len(results)
    total_urls = len(args.urls)
    logger.info(
        "Finished in %.2fs (%d/%d succeeded, %d failed)",
        total_elapsed,
        successes,
        total_urls,
        total_urls - successes,
    )
    return 0 if successes == total_urls else 1


def _run_localize(args: argparse.Namespace) -> int:
    config = SnapshotConfig(
        output_root=Path(args.output).resolve(),
        fetch_timeout=args.fetch_timeout,
        archive=args.zip,
    )
    try:
        html = args.html_file.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.html_file, exc)
        return 1
    try:
        result = localize_html(html, args.url, config)
    except SnapshotError as exc:
        logger.error("Localization failed: %s", exc)
        return 1
    _log_result(result)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "capture":
        return _run_capture(args)
    return _run_localize(args)


if __name__ == "__main__":
    sys.exit(main())
