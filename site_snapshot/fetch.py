"""HTTP fetching of snapshot assets."""

from __future__ import annotations

import logging
import mimetypes
from typing import Optional
from urllib.parse import urlsplit

import requests
from filetype import guess

from .config import SnapshotConfig
from .errors import FetchFailure
from .models import FetchedResource

logger = logging.getLogger("site_snapshot")

SCRIPT_TYPE_MARKERS = ("javascript", "ecmascript")
CHUNK_SIZE = 64 * 1024


def media_type(content_type: Optional[str]) -> str:
    """Lowercase ``type/subtype`` without parameters."""
    return (content_type or "").split(";")[0].strip().lower()


def charset_of(content_type: Optional[str], default: str = "utf-8") -> str:
    for param in (content_type or "").split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip("'\"")
    return default


def is_stylesheet(content_type: Optional[str]) -> bool:
    return media_type(content_type) == "text/css"


def is_script(content_type: Optional[str]) -> bool:
    kind = media_type(content_type)
    return any(marker in kind for marker in SCRIPT_TYPE_MARKERS)


def infer_content_type(url: str, data: bytes) -> str:
    """Guess a MIME type from the file signature, then from the URL extension."""
    kind = guess(data)
    if kind:
        return kind.mime
    guessed, _ = mimetypes.guess_type(urlsplit(url).path)
    return guessed or ""


class HttpFetcher:
    """Fetch collaborator backed by a shared ``requests`` session."""

    def __init__(
        self,
        config: SnapshotConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = config.fetch_timeout
        self.max_bytes = config.max_asset_bytes
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = config.user_agent

    def __call__(self, url: str) -> FetchedResource:
        try:
            resp = self.session.get(url, timeout=self.timeout, stream=True)
        except requests.RequestException as exc:
            raise FetchFailure(url, f"request failed ({exc})") from exc
        try:
            try:
                resp.raise_for_status()
            except requests.RequestException as exc:
                raise FetchFailure(url, f"request failed ({exc})") from exc
            data = self._read_body(url, resp)
            content_type = resp.headers.get("Content-Type", "")
        finally:
            resp.close()

        if not media_type(content_type):
            content_type = infer_content_type(url, data)
            logger.debug("No Content-Type for %s; inferred %r", url, content_type)
        return FetchedResource(url=url, content=data, content_type=content_type)

    def _read_body(self, url: str, resp: requests.Response) -> bytes:
        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            raise FetchFailure(url, f"larger than {self.max_bytes} bytes")
        chunks = []
        total = 0
        try:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                total += len(chunk)
                if total > self.max_bytes:
                    raise FetchFailure(url, f"larger than {self.max_bytes} bytes")
                chunks.append(chunk)
        except requests.RequestException as exc:
            raise FetchFailure(url, f"download interrupted ({exc})") from exc
        return b"".join(chunks)
