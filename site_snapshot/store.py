"""Per-job download cache that fetches, rewrites and persists assets."""

from __future__ import annotations

import codecs
import logging
from collections import Counter
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Set, Tuple
from urllib.parse import urldefrag

from .errors import LocalizationError, MalformedReference, PathCollision, WriteFailure
from .fetch import charset_of, is_script, is_stylesheet
from .models import (
    AssetKind,
    AssetReference,
    DownloadRecord,
    DownloadState,
    Failed,
    FetchedResource,
    Localized,
    LocalizeResult,
)
from .scanner import TextMatch, apply_substitutions, scan_script, scan_stylesheet
from .urls import disambiguate, is_bare_host, map_to_local_path, relative_from, resolve

logger = logging.getLogger("site_snapshot")

Fetcher = Callable[[str], FetchedResource]
Scanner = Callable[[str], List[TextMatch]]


def _text_codec(content_type: str) -> str:
    """Codec named by the charset parameter, or utf-8 when it is not a text encoding."""
    name = charset_of(content_type)
    try:
        codec = codecs.lookup(name).name
        b"".decode(codec)
        "".encode(codec)
    except LookupError:
        logger.debug("Unusable charset %r; decoding as utf-8", name)
        return "utf-8"
    return codec


def _parent_dirs(local_path: str) -> Iterator[str]:
    """Directories below the host that ``local_path`` needs, outermost first."""
    segments = local_path.split("/")
    for end in range(2, len(segments)):
        yield "/".join(segments[:end])


def with_fragment(path: str, fragment: str) -> str:
    return f"{path}#{fragment}" if fragment else path


class ResourceStore:
    """Memoizes every asset of one snapshot job by absolute URL.

    A URL is fetched at most once per store. The record for a URL is created
    before its fetch starts, so a stylesheet or script that refers back to an
    ancestor receives the ancestor's (still pending) path instead of
    recursing again.
    """

    def __init__(self, output_root: Path, fetch: Fetcher) -> None:
        self.output_root = Path(output_root)
        self._fetch = fetch
        self._records: Dict[str, DownloadRecord] = {}
        self._claimed: Dict[str, str] = {}
        self._directories: Set[str] = set()
        self.fetch_count = 0

    @property
    def records(self) -> Mapping[str, DownloadRecord]:
        return MappingProxyType(self._records)

    def summary(self) -> Dict[str, int]:
        counts = Counter(record.state.value for record in self._records.values())
        return {state.value: counts.get(state.value, 0) for state in DownloadState}

    def localize_reference(self, reference: AssetReference) -> LocalizeResult:
        """Resolve a raw reference against its owner, then localize it."""
        try:
            absolute_url = resolve(reference.owner_url, reference.raw_reference)
        except MalformedReference as exc:
            logger.debug(
                "Dropping %s reference %r in %s: %s",
                reference.kind.value,
                reference.raw_reference,
                reference.owner_url,
                exc.reason,
            )
            return Failed(reference.raw_reference, exc)
        return self.localize(absolute_url)

    def localize(self, absolute_url: str) -> LocalizeResult:
        url, _ = urldefrag(absolute_url)
        record = self._records.get(url)
        if record is not None:
            logger.debug("Already seen %s (%s)", url, record.state.value)
            return self._result_for(record)

        local_path = map_to_local_path(url)
        if is_bare_host(local_path):
            error = MalformedReference(url, "no asset path")
            self._records[url] = DownloadRecord(
                absolute_url=url,
                local_path=local_path,
                state=DownloadState.FAILED,
                error=error,
            )
            logger.debug("Skipping %s: no asset path", url)
            return Failed(url, error)

        record = DownloadRecord(absolute_url=url, local_path=self._claim(url, local_path))
        self._records[url] = record
        try:
            self.fetch_count += 1
            resource = self._fetch(url)
            record.content_type = resource.content_type
            payload = self._localized_payload(record, resource)
            self._write(record, payload)
        except LocalizationError as exc:
            record.state = DownloadState.FAILED
            record.error = exc
            logger.warning("Skipping %s: %s", url, exc.reason)
            return Failed(url, exc)

        record.state = DownloadState.FETCHED
        logger.info("Saved %s -> %s", url, record.local_path)
        return Localized(url, record.local_path)

    def _result_for(self, record: DownloadRecord) -> LocalizeResult:
        if record.state is DownloadState.FAILED and record.error is not None:
            return Failed(record.absolute_url, record.error)
        return Localized(record.absolute_url, record.local_path)

    def _clash(self, url: str, local_path: str) -> Optional[str]:
        """Part of ``local_path`` already taken by another URL, as a file or a directory."""
        owner = self._claimed.get(local_path)
        if (owner is not None and owner != url) or local_path in self._directories:
            return local_path
        for directory in _parent_dirs(local_path):
            if directory in self._claimed:
                return directory
        return None

    def _owner_of(self, path: str) -> str:
        owner = self._claimed.get(path)
        if owner is not None:
            return owner
        prefix = path + "/"
        return next((u for p, u in self._claimed.items() if p.startswith(prefix)), "")

    def _claim(self, url: str, local_path: str) -> str:
        clash = self._clash(url, local_path)
        while clash is not None:
            collision = PathCollision(url, clash, self._owner_of(clash))
            logger.info("%s; using a hashed name", collision)
            local_path = disambiguate(clash, url) + local_path[len(clash):]
            clash = self._clash(url, local_path)
        self._claimed[local_path] = url
        self._directories.update(_parent_dirs(local_path))
        return local_path

    def _localized_payload(self, record: DownloadRecord, resource: FetchedResource) -> bytes:
        if is_stylesheet(resource.content_type):
            scanner: Scanner = scan_stylesheet
        elif is_script(resource.content_type):
            scanner = scan_script
        else:
            return resource.content

        codec = _text_codec(resource.content_type)
        text = resource.content.decode(codec, errors="replace")
        return self._rewrite_text(record, text, scanner).encode(codec, errors="replace")

    def _rewrite_text(self, record: DownloadRecord, text: str, scanner: Scanner) -> str:
        replacements: List[Tuple[TextMatch, str]] = []
        for found in scanner(text):
            reference = AssetReference(
                owner_url=record.absolute_url,
                raw_reference=found.value,
                kind=AssetKind.OTHER,
            )
            result = self.localize_reference(reference)
            if not isinstance(result, Localized):
                continue
            _, fragment = urldefrag(found.value.strip())
            relative = relative_from(record.local_path, result.local_path)
            replacements.append((found, with_fragment(relative, fragment)))
        return apply_substitutions(text, replacements)

    def _write(self, record: DownloadRecord, payload: bytes) -> None:
        target = self.output_root / record.local_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        except (OSError, ValueError) as exc:
            raise WriteFailure(record.absolute_url, f"cannot write {target} ({exc})") from exc
