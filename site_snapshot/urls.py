"""URL resolution and URL-to-disk layout helpers."""

from __future__ import annotations

import hashlib
import posixpath
from urllib.parse import quote, unquote, urljoin, urlsplit

from .errors import MalformedReference

FETCHABLE_SCHEMES = {"http", "https"}


def resolve(base: str, reference: str) -> str:
    """Resolve ``reference`` against ``base`` into an absolute http(s) URL."""
    candidate = reference.strip()
    if any(ord(char) < 0x20 for char in candidate):
        raise MalformedReference(reference, "control characters in reference")
    try:
        absolute = urljoin(base, candidate)
        parts = urlsplit(absolute)
        hostname = parts.hostname
    except ValueError as exc:
        raise MalformedReference(reference, f"unparsable reference ({exc})") from exc
    if parts.scheme.lower() not in FETCHABLE_SCHEMES or not hostname:
        raise MalformedReference(reference, "not an absolute http(s) URL")
    return absolute


def map_to_local_path(url: str) -> str:
    """Map an absolute URL to ``host/path`` under the output root.

    Query strings and fragments are ignored; dot segments are collapsed and
    never climb above the host directory.
    """
    parts = urlsplit(url)
    host = (parts.hostname or "").lower()
    segments = []
    for segment in unquote(parts.path).split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment.replace("\\", "_"))
    return "/".join([host, *segments])


def is_bare_host(local_path: str) -> bool:
    """True when a mapped path carries no asset path below the host."""
    return "/" not in local_path


def relative_from(from_path: str, to_path: str) -> str:
    """Relative reference that a file at ``from_path`` uses to reach ``to_path``."""
    start = posixpath.dirname(from_path) or "."
    relative = posixpath.relpath(to_path, start)
    return quote(relative, safe="/-._~!$&'()*+,;=:@")


def url_hash(url: str, length: int = 8) -> str:
    return hashlib.sha1(url.encode("utf-8")).hexdigest()[:length]


def disambiguate(local_path: str, url: str) -> str:
    """Insert a stable URL hash before the extension of the last segment."""
    directory, _, name = local_path.rpartition("/")
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        stem, extension = name, ""
    suffix = f"{stem}.{url_hash(url)}"
    if extension:
        suffix = f"{suffix}.{extension}"
    return f"{directory}/{suffix}" if directory else suffix
