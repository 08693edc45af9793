"""Error types raised or carried while localizing a snapshot."""

from __future__ import annotations


class SnapshotError(Exception):
    """Base class for every snapshot error."""


class DocumentParseError(SnapshotError):
    """The rendered HTML could not be parsed; fails the whole job."""


class LocalizationError(SnapshotError):
    """A single reference or asset could not be localized."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{reason}: {url}")
        self.url = url
        self.reason = reason


class MalformedReference(LocalizationError):
    """Reference text that does not resolve to a fetchable URL."""


class FetchFailure(LocalizationError):
    """Network error, timeout, non-2xx status or oversized body."""


class WriteFailure(LocalizationError):
    """The fetched asset could not be persisted under the output root."""


class PathCollision(LocalizationError):
    """Two distinct URLs mapped onto the same local path."""

    def __init__(self, url: str, local_path: str, owner_url: str) -> None:
        super().__init__(url, f"{local_path} already belongs to {owner_url}")
        self.local_path = local_path
        self.owner_url = owner_url
