"""Named route registry - Reverse URL lookups.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

if TYPE_CHECKING:
    from roadtrail_core.routing.route import Route

logger = logging.getLogger(__name__)


class NamedRouteRegistry:
    """Maps route names to routes.

    Names are unique: registering a taken name replaces the previous route.
    Entries are never pruned, so a route held here outlives its collection.
    """

    def __init__(self):
        self._routes: Dict[str, "Route"] = {}

    def register(self, name: str, route: "Route") -> "NamedRouteRegistry":
        """Register a route under a name, replacing any previous holder."""
        existing = self._routes.get(name)
        if existing is not None and existing is not route:
            logger.warning(f"Route name {name!r} reassigned from {existing!r} to {route!r}")
        self._routes[name] = route
        logger.debug(f"Registered route name: {name}")
        return self

    def has(self, name: str) -> bool:
        return name in self._routes

    def get(self, name: str) -> Optional["Route"]:
        return self._routes.get(name)

    def names(self) -> List[str]:
        return list(self._routes)

    def resolve_url(self, name: str, arguments: Any = None, fallback: str = "/") -> str:
        """Build the URL for a named route.

        Returns ``fallback`` unchanged when the name is unknown.
        """
        route = self._routes.get(name)
        if route is None:
            logger.debug(f"No route named {name!r}, using fallback {fallback!r}")
            return fallback
        return route.build_url(arguments, fallback)

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._routes))


__all__ = [
    "NamedRouteRegistry",
]
