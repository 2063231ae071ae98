"""Helper utilities.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlencode, urlparse

TARGET_STRIP = " \t\n\r\\/"
SCHEMES = {
    "http": "http",
    "https": "https",
    "http://": "http",
    "https://": "https",
}


def parse_url(url: str) -> Dict[str, Any]:
    """Parse URL into components."""
    parsed = urlparse(url)

    return {
        "scheme": parsed.scheme,
        "host": parsed.hostname or "",
        "port": parsed.port,
        "path": parsed.path,
        "query": parse_qs(parsed.query),
        "fragment": parsed.fragment,
    }


def append_query(path: str, query: Optional[Dict[str, Any]] = None) -> str:
    """Append an encoded query string to a path."""
    if not query:
        return path
    return f"{path}?{urlencode(query, doseq=True)}"


def normalize_path(path: str) -> str:
    """Normalize URL path."""
    if not path:
        return "/"

    # Drop query string and fragment
    for mark in ("?", "#"):
        if mark in path:
            path = path.split(mark, 1)[0]

    # Remove double slashes
    while "//" in path:
        path = path.replace("//", "/")

    # Ensure starts with /
    if not path.startswith("/"):
        path = "/" + path

    # Remove trailing slash (except for root)
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    return path


def normalize_target(target: Any) -> Optional[str]:
    """Normalize a collection target to ``/prefix`` form.

    Returns None for non-strings and an empty string for the root.
    """
    if not isinstance(target, str):
        return None
    clean = target.strip(TARGET_STRIP)
    if not clean:
        return ""
    return "/" + clean


def normalize_scheme(scheme: Any) -> Optional[str]:
    """Map ``http``/``https`` (with or without ``://``) to a bare scheme."""
    if not isinstance(scheme, str):
        return None
    return SCHEMES.get(scheme.strip().lower())


def join_paths(prefix: str, path: str) -> str:
    """Join a prefix and a path into ``/a/b`` form."""
    joined = f"{prefix}/{path}"
    while "//" in joined:
        joined = joined.replace("//", "/")
    return "/" + joined.strip("/")


__all__ = [
    "parse_url",
    "append_query",
    "normalize_path",
    "normalize_target",
    "normalize_scheme",
    "join_paths",
]
