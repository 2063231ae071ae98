"""Collection - Named, ordered group of routes.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Mapping, Optional

from roadtrail_core.routing.errors import ConfigurationError
from roadtrail_core.routing.route import Route, RouteMatch
from roadtrail_core.utils.helpers import normalize_scheme, normalize_target

if TYPE_CHECKING:
    from roadtrail_core.routing.router import Router

logger = logging.getLogger(__name__)

ROUTE_TEMPLATE_KEYS = ("template", "path", "uri")
ROUTE_HANDLER_KEYS = ("handler", "callback", "action")


class Collection:
    """Named group of routes sharing a target prefix, scheme, hostname
    and namespace.

    Routes are matched in insertion order, so more specific routes must be
    added before more general ones.

    Config keys:
        name, ns / namespace, scheme, host / hostname, target / path,
        prefix, reserved, routes

    Usage:
        admin = Collection("admin", target="/admin", scheme="https",
                           namespace="AdminController")
        router.add_collection(admin)
        router.get("/settings", "{ns}@settings", collection="admin")
    """

    def __init__(
        self,
        name: str,
        target: Optional[str] = None,
        scheme: Optional[str] = None,
        hostname: Optional[str] = None,
        namespace: Optional[str] = None,
        prefix: bool = False,
        reserved: bool = False,
        router: Optional["Router"] = None,
    ):
        self.name = name
        self.router = router
        self.namespace = namespace
        self.prefix = bool(prefix)
        self.reserved = bool(reserved)
        self._target: Optional[str] = None
        self._scheme: Optional[str] = None
        self._hostname: Optional[str] = None
        self._routes: List[Route] = []

        if target is not None:
            self.target = target
        if scheme is not None:
            self.scheme = scheme
        if hostname is not None:
            self.hostname = hostname

    @classmethod
    def from_config(
        cls,
        name: str,
        config: Mapping[str, Any],
        router: Optional["Router"] = None,
    ) -> "Collection":
        """Create a collection from a config mapping."""
        return cls(name, router=router).configure(config)

    def configure(self, config: Mapping[str, Any]) -> "Collection":
        """Apply a config mapping. Unusable values are skipped."""
        if isinstance(config.get("name"), str):
            self.name = config["name"]

        for key in ("ns", "namespace"):
            if key in config:
                self.namespace = config[key]
                break

        if "scheme" in config:
            self.scheme = config["scheme"]

        for key in ("host", "hostname"):
            if key in config:
                self.hostname = config[key]
                break

        for key in ("target", "path"):
            if key in config:
                self.target = config[key]
                break

        for key in ("prefix", "reserved"):
            if key not in config:
                continue
            if isinstance(config[key], bool):
                setattr(self, key, config[key])
            else:
                logger.warning(f"Collection {self.name!r}: ignoring non-boolean {key} {config[key]!r}")

        routes = config.get("routes")
        if isinstance(routes, (list, tuple)):
            self.add_routes(routes)
        elif routes is not None:
            logger.warning(f"Collection {self.name!r}: ignoring routes of type {type(routes).__name__}")

        return self

    # Properties

    @property
    def target(self) -> Optional[str]:
        return self._target

    @target.setter
    def target(self, value: Any) -> None:
        normalized = normalize_target(value)
        if normalized is None:
            logger.warning(f"Collection {self.name!r}: ignoring target {value!r}")
            return
        self._target = normalized

    @property
    def has_target(self) -> bool:
        return bool(self._target)

    @property
    def scheme(self) -> Optional[str]:
        return self._scheme

    @scheme.setter
    def scheme(self, value: Any) -> None:
        if value is None:
            self._scheme = None
            return
        normalized = normalize_scheme(value)
        if normalized is None:
            logger.warning(f"Collection {self.name!r}: ignoring scheme {value!r}")
            return
        self._scheme = normalized

    @property
    def hostname(self) -> Optional[str]:
        return self._hostname

    @hostname.setter
    def hostname(self, value: Any) -> None:
        if value is not None and not isinstance(value, str):
            logger.warning(f"Collection {self.name!r}: ignoring hostname {value!r}")
            return
        self._hostname = value.strip().lower() if value else None

    @property
    def is_reserved(self) -> bool:
        return self.reserved

    @property
    def routes(self) -> List[Route]:
        """Routes in match order."""
        return list(self._routes)

    # Pre-filters

    def prefix_matches(self, path: str) -> bool:
        """Check if path starts with the target, ignoring case.

        There is no segment boundary check: ``/use`` matches ``/users``.
        """
        if not self.has_target:
            return False
        return path.lower().startswith(self._target.lower())

    def scheme_allows(self, scheme: Optional[str]) -> bool:
        """Check the request scheme against the constraint, if any."""
        if self._scheme is None:
            return True
        return self._scheme == normalize_scheme(scheme)

    def host_allows(self, hostname: Optional[str]) -> bool:
        """Check the request hostname against the constraint, if any.

        A request without a hostname passes.
        """
        if self._hostname is None or not hostname:
            return True
        return self._hostname == hostname.strip().lower()

    # Matching

    def resolve(self, method: Any, path: str) -> Optional[RouteMatch]:
        """Return the first route match in insertion order."""
        for route in list(self._routes):
            match = route.match(method, path)
            if match is not None:
                return match
        return None

    # Route management

    def add(self, route: Route) -> "Collection":
        """Append a route and point it back at this collection."""
        if route.router is None:
            route.router = self.router
        route.attach(self.name)
        self._routes.append(route)
        if route.name and self.router is not None:
            self.router.registry.register(route.name, route)
        return self

    def remove(self, route: Route) -> bool:
        """Remove a route. Returns False if it was not here."""
        for i, existing in enumerate(self._routes):
            if existing is route:
                self._routes.pop(i)
                return True
        return False

    def add_routes(self, entries: Iterable[Any]) -> "Collection":
        """Add routes from Route objects, lists or mappings.

        List entries are ``[methods, template, handler, parameters?]``;
        mappings use ``methods``, ``template``/``path``/``uri``,
        ``handler``/``callback``/``action`` and ``parameters``. Malformed
        entries are logged and skipped.
        """
        for entry in entries:
            try:
                route = entry if isinstance(entry, Route) else self._build_route(entry)
            except (ConfigurationError, TypeError, ValueError, IndexError) as e:
                logger.warning(f"Collection {self.name!r}: skipping route {entry!r}: {e}")
                continue
            self.add(route)
        return self

    def _build_route(self, entry: Any) -> Route:
        if isinstance(entry, Mapping):
            template = _first(entry, ROUTE_TEMPLATE_KEYS)
            handler = _first(entry, ROUTE_HANDLER_KEYS)
            methods = entry.get("methods", entry.get("method"))
            parameters = entry.get("parameters") or {}
            if isinstance(entry.get("name"), str):
                parameters = {**parameters, "name": entry["name"]}
        elif isinstance(entry, (list, tuple)):
            methods, template, handler = entry[0], entry[1], entry[2]
            parameters = entry[3] if len(entry) > 3 and entry[3] else {}
        else:
            raise ConfigurationError(f"Unsupported route entry type {type(entry).__name__}")

        if not isinstance(template, str):
            raise ConfigurationError("Route entry has no template")
        if not isinstance(parameters, Mapping):
            raise ConfigurationError("Route parameters must be a mapping")

        return Route(
            methods,
            template,
            handler,
            parameters=dict(parameters),
            collection=self.name,
            router=self.router,
        )

    def first(self) -> Optional[Route]:
        return self._routes[0] if self._routes else None

    def last(self) -> Optional[Route]:
        return self._routes[-1] if self._routes else None

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(list(self._routes))

    def __contains__(self, route: object) -> bool:
        return any(existing is route for existing in self._routes)

    def __getitem__(self, index: int) -> Route:
        return self._routes[index]

    def __repr__(self) -> str:
        return (
            f"Collection(name={self.name!r}, target={self._target!r}, "
            f"scheme={self._scheme!r}, routes={len(self._routes)}, "
            f"reserved={self.reserved})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Describe the collection configuration."""
        return {
            "name": self.name,
            "namespace": self.namespace,
            "scheme": self._scheme,
            "hostname": self._hostname,
            "target": self._target,
            "prefix": self.prefix,
            "reserved": self.reserved,
            "routes": len(self._routes),
        }


def _first(entry: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


__all__ = [
    "Collection",
]
