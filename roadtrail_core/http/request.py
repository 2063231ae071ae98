"""Request info - The slice of an HTTP request the router needs.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl

from roadtrail_core.utils.helpers import normalize_path, normalize_scheme, parse_url


@dataclass
class RequestInfo:
    """Method, path, scheme and host of an inbound request.

    The router only reads ``method``, ``clean_path``, ``scheme`` and
    ``hostname``; the query is kept for callers.
    """

    method: str
    path: str
    scheme: str = "http"
    hostname: str = ""
    query: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.method = self.method.strip().upper()
        if "?" in self.path:
            self.path, query_string = self.path.split("?", 1)
            for key, value in parse_qsl(query_string, keep_blank_values=True):
                self.query.setdefault(key, value)
        self.scheme = normalize_scheme(self.scheme) or "http"
        self.hostname = _strip_port(self.hostname).lower()

    @property
    def clean_path(self) -> str:
        """Path without query string, duplicate or trailing slashes."""
        return normalize_path(self.path)

    @property
    def is_secure(self) -> bool:
        return self.scheme == "https"

    @classmethod
    def from_url(cls, method: str, url: str) -> "RequestInfo":
        """Build from a method and an absolute or relative URL."""
        parts = parse_url(url)
        query = {key: values[-1] for key, values in parts["query"].items()}
        return cls(
            method=method,
            path=parts["path"] or "/",
            scheme=parts["scheme"] or "http",
            hostname=parts["host"],
            query=query,
        )

    @classmethod
    def from_raw(cls, data: bytes, scheme: str = "http") -> "RequestInfo":
        """Parse the request line and Host header of raw HTTP data."""
        lines = data.split(b"\r\n")

        request_line = lines[0].decode()
        parts = request_line.split(" ")
        method = parts[0]
        path = parts[1] if len(parts) > 1 else "/"

        hostname = ""
        for line in lines[1:]:
            if line == b"":
                break
            if b":" in line:
                key, value = line.decode().split(":", 1)
                if key.strip().lower() == "host":
                    hostname = value.strip()

        return cls(method=method, path=path, scheme=scheme, hostname=hostname)

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> "RequestInfo":
        """Build from a WSGI environ."""
        path = environ.get("PATH_INFO", "") or "/"
        query_string = environ.get("QUERY_STRING", "")
        if query_string:
            path = f"{path}?{query_string}"
        hostname = environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "")
        return cls(
            method=environ.get("REQUEST_METHOD", "GET"),
            path=path,
            scheme=environ.get("wsgi.url_scheme", "http"),
            hostname=hostname,
        )


def _strip_port(host: Optional[str]) -> str:
    if not host:
        return ""
    if host.startswith("["):
        return host.split("]", 1)[0] + "]"
    return host.split(":", 1)[0]


__all__ = [
    "RequestInfo",
]
