"""Route - One routable endpoint.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from roadtrail_core.routing.binding import HandlerBinding, ResolvedAction, parse_binding
from roadtrail_core.routing.errors import ConfigurationError, OrphanedRouteError, RoutingError
from roadtrail_core.routing.pattern import PathPattern
from roadtrail_core.utils.helpers import join_paths

if TYPE_CHECKING:
    from roadtrail_core.routing.collection import Collection
    from roadtrail_core.routing.router import Router

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "default"
NAME_KEYS = ("name", "as")


class HttpMethod(str, Enum):
    """HTTP methods a route can answer."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, value: Union[str, "HttpMethod"]) -> "HttpMethod":
        """Parse a method token, case-insensitively.

        Raises:
            ConfigurationError: for anything outside the closed method set
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ConfigurationError(f"Unknown HTTP method: {value!r}")


ALL_METHODS: Tuple[HttpMethod, ...] = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.PATCH,
    HttpMethod.DELETE,
)


def validate_methods(value: Any) -> List[HttpMethod]:
    """Normalize method tokens into an ordered list of methods.

    Accepts a single token, an iterable of tokens, or ``"all"`` (GET, POST,
    PUT, PATCH and DELETE). Unknown tokens are dropped.
    """
    if isinstance(value, str) and value.strip().lower() == "all":
        return list(ALL_METHODS)

    if isinstance(value, (str, HttpMethod)):
        tokens: Iterable[Any] = [value]
    elif isinstance(value, Iterable):
        tokens = value
    else:
        logger.debug(f"Ignoring methods of type {type(value).__name__}")
        return []

    methods: List[HttpMethod] = []
    for token in tokens:
        try:
            method = HttpMethod.parse(token)
        except ConfigurationError:
            logger.debug(f"Dropping unknown method token: {token!r}")
            continue
        if method not in methods:
            methods.append(method)
    return methods


@dataclass
class RouteMatch:
    """A successful route match."""

    route: "Route"
    method: HttpMethod
    path: str
    collection: str
    values: Tuple[str, ...] = ()
    arguments: Dict[str, str] = field(default_factory=dict)
    binding: Union[Callable[..., Any], ResolvedAction, None] = None


@dataclass(eq=False)
class Route:
    """Route definition.

    The template is relative to the owning collection; the collection's
    target is prepended the first time the route is matched or built, so a
    route can be assigned to a collection that is configured later.

    Usage:
        route = router.get("/users/:id", "{ns}@show", {":id": "numeric"})
        route.named("users.show")
        route.build_url({"id": 42})     # '/users/42'
    """

    methods: Any
    template: str
    handler: Any
    parameters: Dict[str, Any] = field(default_factory=dict)
    collection: Optional[str] = DEFAULT_COLLECTION
    router: Optional["Router"] = field(default=None, repr=False)
    name: Optional[str] = None

    binding: HandlerBinding = field(init=False, repr=False)
    matched: bool = field(default=False, init=False)
    arguments: Dict[str, str] = field(default_factory=dict, init=False, repr=False)

    _prepared: Optional[str] = field(default=None, init=False, repr=False)
    _pattern: Optional[PathPattern] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self.methods = validate_methods(self.methods)
        if not self.methods:
            logger.warning(f"Route {self.template!r} has no valid methods and will never match")
        self.binding = parse_binding(self.handler)
        self.parameters = dict(self.parameters or {})
        if self.name is None:
            for key in NAME_KEYS:
                if isinstance(self.parameters.get(key), str):
                    self.name = self.parameters[key]

    def __repr__(self) -> str:
        methods = ",".join(m.value for m in self.methods) or "-"
        return f"Route({methods} {self.template!r} -> {self.binding}, collection={self.collection!r})"

    # Fluent API

    def named(self, identifier: str) -> "Route":
        """Register this route under ``identifier`` for reverse URLs."""
        self._require_router().name_route(self, identifier)
        self.name = identifier
        return self

    def assign_to_collection(self, name: str) -> "Route":
        """Move this route to the named collection, creating it if needed."""
        self._require_router().move_route(self, name)
        return self

    group = assign_to_collection

    # Collection bookkeeping

    def attach(self, collection: str) -> None:
        """Record the owning collection and drop the composed template."""
        self.collection = collection
        self.invalidate()

    def invalidate(self) -> None:
        self._prepared = None
        self._pattern = None

    def _require_router(self) -> "Router":
        if self.router is None:
            raise RoutingError(f"{self!r} is not registered with a router")
        return self.router

    def owner(self) -> Optional["Collection"]:
        """Look up the owning collection through the router.

        Raises:
            OrphanedRouteError: when the collection name has no backing
                collection
        """
        if self.router is None:
            return None
        collection = self.router.get_collection(self.collection)
        if collection is None:
            raise OrphanedRouteError(repr(self), self.collection)
        return collection

    @property
    def prepared_template(self) -> str:
        """Template with the collection target prepended."""
        if self._prepared is None:
            collection = self.owner()
            target = collection.target if collection is not None else None
            self._prepared = join_paths(target or "", self.template)
        return self._prepared

    @property
    def pattern(self) -> PathPattern:
        """Compiled pattern, built on first use."""
        if self._pattern is None:
            self._pattern = self._compile(self.prepared_template)
        return self._pattern

    def _compile(self, template: str) -> PathPattern:
        if self.router is not None:
            return PathPattern.compile(
                template,
                self.parameters,
                identifier=self.router.identifier,
                classes=self.router.param_classes,
            )
        return PathPattern.compile(template, self.parameters)

    # Matching

    def allows(self, method: Any) -> bool:
        try:
            return HttpMethod.parse(method) in self.methods
        except ConfigurationError:
            return False

    def match(self, method: Any, path: str) -> Optional[RouteMatch]:
        """Match a request against this route.

        The method is checked before the pattern is compiled. A route whose
        collection has gone missing is reported and treated as a non-match.
        """
        if not self.allows(method):
            return None
        method = HttpMethod.parse(method)

        try:
            pattern = self.pattern
            collection = self.owner()
        except OrphanedRouteError as e:
            self._report(
                "Route belongs to a collection that does not exist",
                {"route": repr(self), "collection": self.collection, "error": str(e)},
            )
            return None
        except ConfigurationError as e:
            self._report("Route pattern does not compile", {"route": repr(self), "error": str(e)})
            return None

        values = pattern.match(path)
        if values is None:
            return None

        self.matched = True
        self.arguments = dict(zip(pattern.names, values))

        namespace = collection.namespace if collection is not None else None
        prefixed = collection.prefix if collection is not None else False

        return RouteMatch(
            route=self,
            method=method,
            path=path,
            collection=self.collection or DEFAULT_COLLECTION,
            values=values,
            arguments=dict(self.arguments),
            binding=self.binding.resolve(method.value, namespace, prefixed),
        )

    def build_url(self, arguments: Any = None, fallback: str = "/") -> str:
        """Build a concrete URL for this route.

        Missing arguments produce empty segments. ``fallback`` is returned
        only when the pattern does not compile.
        """
        try:
            try:
                return self.pattern.build(arguments)
            except OrphanedRouteError as e:
                self._report(
                    "Building URL for a route without a collection, prefix dropped",
                    {"route": repr(self), "collection": self.collection, "error": str(e)},
                )
                return self._compile(join_paths("", self.template)).build(arguments)
        except ConfigurationError as e:
            self._report("Route pattern does not compile", {"route": repr(self), "error": str(e)})
            return fallback

    def _report(self, message: str, context: Dict[str, Any]) -> None:
        if self.router is not None:
            self.router.report(message, context)
        else:
            logger.error(f"{message} {context}")


__all__ = [
    "DEFAULT_COLLECTION",
    "HttpMethod",
    "ALL_METHODS",
    "validate_methods",
    "RouteMatch",
    "Route",
]
