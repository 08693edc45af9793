"""String helpers for naming snapshot directories."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, fallback: str = "page") -> str:
    """Lowercase ASCII slug safe to use as a single directory name."""
    normalized = value.encode("ascii", "ignore").decode("ascii").lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def url_slug(url: str, max_length: int = 80) -> str:
    """Directory name for one page: host followed by its path."""
    parts = urlsplit(url)
    host = slugify(parts.hostname or "", fallback="site")
    path = slugify(parts.path, fallback="")
    return f"{host}-{path}"[:max_length].strip("-") if path else host[:max_length]
