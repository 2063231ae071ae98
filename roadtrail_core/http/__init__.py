"""HTTP module - Request descriptors."""

from roadtrail_core.http.request import RequestInfo

__all__ = [
    "RequestInfo",
]
