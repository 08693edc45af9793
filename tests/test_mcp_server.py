"""Tests for site_snapshot.mcp_server module."""

from __future__ import annotations

import json

import pytest

from site_snapshot import mcp_server
from site_snapshot.models import DownloadRecord, DownloadState
from site_snapshot.snapshot import SnapshotResult


@pytest.mark.asyncio
async def test_snapshot_tool_returns_summary(monkeypatch, tmp_path) -> None:
    captured: dict = {}

    async def fake_snapshot_page_async(url, config):
        captured["url"] = url
        captured["config"] = config
        return SnapshotResult(
            origin_url=url,
            html_path=config.output_root / "index.html",
            records={
                "https://ex.com/a.css": DownloadRecord(
                    "https://ex.com/a.css", "ex.com/a.css", DownloadState.FETCHED
                ),
                "https://ex.com/b.png": DownloadRecord(
                    "https://ex.com/b.png", "ex.com/b.png", DownloadState.FAILED
                ),
            },
        )

    monkeypatch.setattr(mcp_server, "snapshot_page_async", fake_snapshot_page_async)

    payload = json.loads(await mcp_server.snapshot(url="https://ex.com/", output_dir=str(tmp_path)))

    assert captured["url"] == "https://ex.com/"
    assert captured["config"].output_root == tmp_path.resolve()
    assert payload["html_path"] == str(tmp_path.resolve() / "index.html")
    assert payload["fetched"] == ["https://ex.com/a.css"]
    assert payload["failed"] == ["https://ex.com/b.png"]
    assert payload["archive_path"] is None
    assert payload["screenshot_path"] is None
    assert captured["config"].screenshot is None


@pytest.mark.asyncio
async def test_snapshot_tool_passes_screenshot_mode(monkeypatch, tmp_path) -> None:
    modes = []

    async def fake_snapshot_page_async(url, config):
        modes.append(config.screenshot)
        return SnapshotResult(
            origin_url=url,
            html_path=config.output_root / "index.html",
            screenshot_path=config.output_root / "screenshot.png",
        )

    monkeypatch.setattr(mcp_server, "snapshot_page_async", fake_snapshot_page_async)

    payload = json.loads(
        await mcp_server.snapshot(
            url="https://ex.com/", output_dir=str(tmp_path), screenshot="full"
        )
    )

    assert modes == ["full"]
    assert payload["screenshot_path"] == str(tmp_path.resolve() / "screenshot.png")
