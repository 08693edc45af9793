"""Pattern-based discovery of asset references inside CSS and JS text."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, NamedTuple, Sequence, Tuple

CSS_URL_RE = re.compile(
    r"url\(\s*(?P<q>['\"]?)(?P<u>.*?)(?P=q)\s*\)",
    re.IGNORECASE | re.DOTALL,
)
CSS_IMPORT_RE = re.compile(
    r"@import\s+(?P<q>['\"])(?P<u>[^'\"\n]*)(?P=q)",
    re.IGNORECASE,
)

SCRIPT_ASSET_EXTENSIONS = (
    "png",
    "jpe?g",
    "gif",
    "svg",
    "webp",
    "avif",
    "ico",
    "bmp",
    "woff2?",
    "ttf",
    "otf",
    "eot",
)
JS_ASSET_LITERAL_RE = re.compile(
    r"(?P<q>['\"])(?P<u>[^'\"\n]*?\.(?:"
    + "|".join(SCRIPT_ASSET_EXTENSIONS)
    + r"))(?P=q)",
    re.IGNORECASE,
)


class TextMatch(NamedTuple):
    """Span of a reference value inside the scanned text (quotes excluded)."""

    start: int
    end: int
    value: str


def _is_inline_data(value: str) -> bool:
    return value[:5].lower() == "data:"


def _iter_matches(pattern: re.Pattern, text: str) -> Iterator[TextMatch]:
    for match in pattern.finditer(text):
        start, end = match.span("u")
        yield TextMatch(start, end, match.group("u"))


def scan_stylesheet(text: str) -> List[TextMatch]:
    """Locate ``url(...)`` and ``@import "..."`` references in stylesheet text."""
    matches = []
    for found in _iter_matches(CSS_URL_RE, text):
        if not found.value.strip() or _is_inline_data(found.value.strip()):
            continue
        matches.append(found)
    for found in _iter_matches(CSS_IMPORT_RE, text):
        if not found.value.strip() or _is_inline_data(found.value.strip()):
            continue
        matches.append(found)
    matches.sort(key=lambda item: item.start)
    return matches


def scan_script(text: str) -> List[TextMatch]:
    """Locate quoted string literals naming image or font files."""
    matches = []
    for found in _iter_matches(JS_ASSET_LITERAL_RE, text):
        value = found.value
        if not value or _is_inline_data(value) or value.lower().startswith("http"):
            continue
        matches.append(found)
    return matches


def apply_substitutions(
    text: str,
    replacements: Iterable[Tuple[TextMatch, str]],
) -> str:
    """Rebuild ``text`` with each matched span swapped for its replacement."""
    pieces: List[str] = []
    cursor = 0
    ordered: Sequence[Tuple[TextMatch, str]] = sorted(
        replacements, key=lambda item: item[0].start
    )
    for found, replacement in ordered:
        if found.start < cursor:
            continue
        pieces.append(text[cursor : found.start])
        pieces.append(replacement)
        cursor = found.end
    pieces.append(text[cursor:])
    return "".join(pieces)
