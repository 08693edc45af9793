"""Tests for site_snapshot.fetch module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from site_snapshot.config import SnapshotConfig
from site_snapshot.errors import FetchFailure
from site_snapshot.fetch import (
    CHUNK_SIZE,
    HttpFetcher,
    charset_of,
    infer_content_type,
    is_script,
    is_stylesheet,
    media_type,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _response(content=b"body", headers=None, raise_error=None):
    resp = MagicMock()
    resp.iter_content.return_value = [content] if isinstance(content, bytes) else content
    resp.headers = headers if headers is not None else {}
    if raise_error is not None:
        resp.raise_for_status.side_effect = raise_error
    return resp


def _fetcher(resp=None, side_effect=None, **config_overrides):
    session = MagicMock()
    session.headers = {}
    if side_effect is not None:
        session.get.side_effect = side_effect
    else:
        session.get.return_value = resp
    config = SnapshotConfig(output_root=Path("unused"), **config_overrides)
    return HttpFetcher(config, session=session), session


class TestContentTypeHelpers:
    def test_media_type_strips_parameters(self):
        assert media_type("Text/CSS; charset=utf-8") == "text/css"
        assert media_type(None) == ""

    def test_charset(self):
        assert charset_of("text/css; charset=ISO-8859-1") == "ISO-8859-1"
        assert charset_of('text/css; charset="utf-8"') == "utf-8"
        assert charset_of("text/css") == "utf-8"

    def test_stylesheet_and_script(self):
        assert is_stylesheet("text/css")
        assert not is_stylesheet("text/plain")
        assert is_script("application/javascript")
        assert is_script("text/javascript; charset=utf-8")
        assert is_script("application/x-ecmascript")
        assert not is_script("image/png")

    def test_infer_from_signature(self):
        assert infer_content_type("https://ex.com/noext", PNG_BYTES) == "image/png"

    def test_infer_from_extension(self):
        assert infer_content_type("https://ex.com/site.css?v=1", b"body{}") == "text/css"

    def test_infer_unknown(self):
        assert infer_content_type("https://ex.com/blob", b"???") == ""


class TestHttpFetcher:
    def test_success(self):
        resp = _response(b"body{}", {"Content-Type": "text/css"})
        fetcher, session = _fetcher(resp, fetch_timeout=7.5)
        result = fetcher("https://ex.com/a.css")
        assert result.content == b"body{}"
        assert result.content_type == "text/css"
        session.get.assert_called_once_with("https://ex.com/a.css", timeout=7.5, stream=True)
        resp.close.assert_called_once()

    def test_user_agent_header(self):
        fetcher, session = _fetcher(_response(), user_agent="snapshot-test/1.0")
        assert session.headers["User-Agent"] == "snapshot-test/1.0"

    def test_timeout_becomes_fetch_failure(self):
        fetcher, _ = _fetcher(side_effect=requests.Timeout("slow"))
        with pytest.raises(FetchFailure) as excinfo:
            fetcher("https://ex.com/slow.js")
        assert excinfo.value.url == "https://ex.com/slow.js"

    def test_http_error_becomes_fetch_failure(self):
        resp = _response(raise_error=requests.HTTPError("404 Client Error"))
        fetcher, _ = _fetcher(resp)
        with pytest.raises(FetchFailure):
            fetcher("https://ex.com/missing.png")

    def test_declared_length_over_limit(self):
        resp = _response(b"x", {"Content-Length": "1000"})
        fetcher, _ = _fetcher(resp, max_asset_bytes=10)
        with pytest.raises(FetchFailure):
            fetcher("https://ex.com/big.bin")

    def test_body_over_limit(self):
        fetcher, _ = _fetcher(_response(b"x" * 11), max_asset_bytes=10)
        with pytest.raises(FetchFailure):
            fetcher("https://ex.com/big.bin")

    def test_streamed_body_stops_at_limit(self):
        served = []

        def chunks():
            for chunk in (b"x" * 6, b"x" * 6, b"never read"):
                served.append(chunk)
                yield chunk

        resp = _response(chunks())
        fetcher, _ = _fetcher(resp, max_asset_bytes=10)

        with pytest.raises(FetchFailure):
            fetcher("https://ex.com/stream.bin")

        resp.iter_content.assert_called_once_with(chunk_size=CHUNK_SIZE)
        assert len(served) == 2
        resp.close.assert_called_once()

    def test_chunks_joined(self):
        resp = _response([b"ab", b"cd"], {"Content-Type": "text/plain"})
        fetcher, _ = _fetcher(resp)
        assert fetcher("https://ex.com/a.txt").content == b"abcd"

    def test_interrupted_body_becomes_fetch_failure(self):
        resp = _response()
        resp.iter_content.side_effect = requests.exceptions.ChunkedEncodingError("reset")
        fetcher, _ = _fetcher(resp)
        with pytest.raises(FetchFailure):
            fetcher("https://ex.com/cut.js")
        resp.close.assert_called_once()

    def test_missing_content_type_is_inferred(self):
        fetcher, _ = _fetcher(_response(PNG_BYTES, {}))
        assert fetcher("https://ex.com/pixel").content_type == "image/png"
