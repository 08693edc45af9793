"""Rewrites asset attributes of a rendered HTML document to local paths."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import unquote, urldefrag, urlsplit

from bs4 import BeautifulSoup, ParserRejectedMarkup

from .config import DEFAULT_INDEX_NAME
from .errors import DocumentParseError, WriteFailure
from .models import AssetKind, AssetReference, Localized, RewrittenDocument, SnapshotJob
from .store import ResourceStore, with_fragment
from .urls import relative_from

logger = logging.getLogger("site_snapshot")

# Only these (tag, attribute) pairs are localized; anchors, iframes and the
# rest keep their original references.
ASSET_ATTRIBUTES: Dict[Tuple[str, str], AssetKind] = {
    ("link", "href"): AssetKind.STYLESHEET,
    ("script", "src"): AssetKind.SCRIPT,
    ("img", "src"): AssetKind.IMAGE,
}
REFERENCE_ATTRIBUTES = ("href", "src")


def should_localize(value: Optional[str]) -> bool:
    """Skip empty, inline-data and same-document (``#``) references."""
    if not value or not value.strip():
        return False
    candidate = value.strip()
    return not (candidate[:5].lower() == "data:" or candidate.startswith("#"))


def output_file_name(origin_url: str) -> str:
    """Reuse the origin's last path segment when it looks like HTML."""
    path = urlsplit(origin_url).path
    if not path or path.endswith("/"):
        return DEFAULT_INDEX_NAME
    name = unquote(path.rsplit("/", 1)[-1]).replace("/", "_")
    if ".htm" not in name.lower():
        return DEFAULT_INDEX_NAME
    return name


def _has_reference_attribute(tag) -> bool:
    return any(tag.has_attr(attribute) for attribute in REFERENCE_ATTRIBUTES)


def parse_document(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "html.parser")
    except (ParserRejectedMarkup, TypeError) as exc:
        raise DocumentParseError(f"Cannot parse rendered HTML: {exc}") from exc


class HtmlAssetRewriter:
    """Localizes the link/script/img assets of one snapshot job."""

    def __init__(self, store: ResourceStore) -> None:
        self.store = store

    def localize(self, job: SnapshotJob) -> RewrittenDocument:
        soup = parse_document(job.html_content)
        file_name = output_file_name(job.origin_url)
        assets: Dict[str, str] = {}

        for element in soup.find_all(_has_reference_attribute):
            for attribute in REFERENCE_ATTRIBUTES:
                kind = ASSET_ATTRIBUTES.get((element.name, attribute))
                value = element.get(attribute)
                if kind is None or not isinstance(value, str):
                    continue
                if not should_localize(value):
                    logger.debug("Leaving <%s %s=%r> untouched", element.name, attribute, value)
                    continue
                reference = AssetReference(
                    owner_url=job.origin_url, raw_reference=value, kind=kind
                )
                result = self.store.localize_reference(reference)
                if not isinstance(result, Localized):
                    continue
                _, fragment = urldefrag(value.strip())
                relative = relative_from(file_name, result.local_path).lstrip("/")
                element[attribute] = with_fragment(relative, fragment)
                assets[result.url] = result.local_path

        return RewrittenDocument(html=soup.decode(), file_name=file_name, assets=assets)


def write_document(document: RewrittenDocument, output_root: Path) -> Path:
    """Persist the rewritten HTML at the root of the snapshot directory."""
    target = Path(output_root) / document.file_name
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(document.html, encoding="utf-8")
    except (OSError, ValueError) as exc:
        raise WriteFailure(str(target), f"cannot write document ({exc})") from exc
    logger.info("Saved HTML to %s", target)
    return target
