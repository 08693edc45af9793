"""Data models used throughout the snapshot pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import LocalizationError


class AssetKind(str, Enum):
    """Role of an asset inside the document that references it."""

    STYLESHEET = "stylesheet"
    SCRIPT = "script"
    IMAGE = "image"
    OTHER = "other"


class DownloadState(str, Enum):
    PENDING = "pending"
    FETCHED = "fetched"
    FAILED = "failed"


@dataclass
class SnapshotJob:
    """One page to localize into a single output directory."""

    origin_url: str
    output_root: Path
    html_content: str


@dataclass
class AssetReference:
    """Raw reference discovered in an HTML attribute or in asset text."""

    owner_url: str
    raw_reference: str
    kind: AssetKind = AssetKind.OTHER


@dataclass
class FetchedResource:
    """Body and reported content type of a fetched URL."""

    url: str
    content: bytes
    content_type: str = ""


@dataclass
class DownloadRecord:
    """Per-URL bookkeeping owned by a ResourceStore."""

    absolute_url: str
    local_path: str
    state: DownloadState = DownloadState.PENDING
    content_type: str = ""
    error: Optional[LocalizationError] = None


@dataclass(frozen=True)
class Localized:
    """Successful localize call: the asset lives at ``local_path``."""

    url: str
    local_path: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    """Failed localize call; the original reference stays in place."""

    url: str
    error: LocalizationError

    @property
    def ok(self) -> bool:
        return False


LocalizeResult = Union[Localized, Failed]


@dataclass
class RewrittenDocument:
    """Serialized HTML after its asset attributes were rewritten."""

    html: str
    file_name: str
    assets: Dict[str, str] = field(default_factory=dict)


@dataclass
class RenderedPage:
    """Settled DOM of a rendered page, plus its optional screenshot."""

    html: str
    final_url: str
    screenshot: Optional[bytes] = None
