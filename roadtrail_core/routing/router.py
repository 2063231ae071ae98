"""Router - Route resolution engine.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from roadtrail_core.http.request import RequestInfo
from roadtrail_core.routing.binding import ResolvedAction
from roadtrail_core.routing.collection import Collection
from roadtrail_core.routing.errors import (
    ConfigurationError,
    ErrorReport,
    ErrorReporter,
    LoggingErrorReporter,
    OrphanedRouteError,
    RouterFrozenError,
)
from roadtrail_core.routing.params import ParamClasses
from roadtrail_core.routing.pattern import DEFAULT_IDENTIFIER
from roadtrail_core.routing.registry import NamedRouteRegistry
from roadtrail_core.routing.route import DEFAULT_COLLECTION, HttpMethod, Route, RouteMatch
from roadtrail_core.utils.helpers import append_query, normalize_path

if TYPE_CHECKING:
    from roadtrail_core.utils.config import RouterConfig

logger = logging.getLogger(__name__)

ERROR_COLLECTION = "error"
RESERVED_COLLECTIONS = (DEFAULT_COLLECTION, ERROR_COLLECTION)


@dataclass
class ResolutionOutcome:
    """Result of resolving one request.

    ``binding`` is the matched route's callable, or a ``ResolvedAction``
    for ``namespace@action`` routes. Invoking it is up to the caller.
    """

    matched: bool = False
    method: str = ""
    path: str = "/"
    collection_name: Optional[str] = None
    route: Optional[Route] = None
    arguments: Dict[str, str] = field(default_factory=dict)
    values: Tuple[str, ...] = ()
    binding: Union[Callable[..., Any], ResolvedAction, None] = None
    errors: List[ErrorReport] = field(default_factory=list)

    @classmethod
    def from_match(
        cls,
        method: str,
        path: str,
        collection_name: Optional[str],
        match: Optional[RouteMatch],
        errors: Optional[List[ErrorReport]] = None,
    ) -> "ResolutionOutcome":
        if match is None:
            return cls(
                method=method,
                path=path,
                collection_name=collection_name,
                errors=list(errors or []),
            )
        return cls(
            matched=True,
            method=match.method.value,
            path=path,
            collection_name=collection_name,
            route=match.route,
            arguments=dict(match.arguments),
            values=match.values,
            binding=match.binding,
            errors=list(errors or []),
        )

    @property
    def action(self) -> Optional[ResolvedAction]:
        """The resolved namespace/action, if the route has one."""
        return self.binding if isinstance(self.binding, ResolvedAction) else None

    @property
    def handler(self) -> Optional[Callable[..., Any]]:
        """The bound callable, if the route has one."""
        if self.binding is not None and not isinstance(self.binding, ResolvedAction):
            return self.binding
        return None


class Router:
    """Request Router.

    Owns the collections and the named route registry of one serving
    context. Registration happens first; ``freeze()`` marks the end of it.

    Resolution:
    1. Pick the last registered non-reserved collection whose scheme,
       hostname and target prefix accept the request.
    2. Otherwise use ``default``; a missing collection falls back to
       ``error``.
    3. Return the first route of that collection that matches.

    Usage:
        router = Router()
        router.register_collection("admin", {
            "target": "/admin",
            "scheme": "https",
            "namespace": "AdminController",
        })
        router.get("/settings", "{ns}@settings", collection="admin")
        router.get("/users/:id", show_user).named("users.show")

        outcome = router.resolve("GET", "/admin/settings", "https")
        if outcome.matched:
            outcome.action.key      # 'AdminController@settings'

        router.url_for("users.show", {"id": 42})   # '/users/42'
    """

    def __init__(
        self,
        reporter: Optional[ErrorReporter] = None,
        identifier: str = DEFAULT_IDENTIFIER,
        param_classes: Optional[ParamClasses] = None,
    ):
        self.reporter = reporter or LoggingErrorReporter()
        self.identifier = identifier
        self.param_classes = param_classes or ParamClasses()
        self.registry = NamedRouteRegistry()
        self._collections: Dict[str, Collection] = {}
        self._lock = threading.RLock()
        self._frozen = False
        self._outcome = ResolutionOutcome()

        for name in RESERVED_COLLECTIONS:
            self._collections[name] = Collection(name, reserved=True, router=self)

    @classmethod
    def from_config(
        cls,
        config: "RouterConfig",
        reporter: Optional[ErrorReporter] = None,
    ) -> "Router":
        """Build a router from a ``RouterConfig``."""
        router = cls(
            reporter=reporter,
            identifier=config.identifier,
            param_classes=ParamClasses(
                config.param_classes,
                default=config.default_param_class,
            ),
        )
        router.register_collections(config.collections)
        if config.freeze:
            router.freeze()
        return router

    # Lifecycle

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Router":
        """End registration and compile every route pattern.

        Registration calls after this raise ``RouterFrozenError``.
        """
        with self._lock:
            for route in self.routes():
                try:
                    route.pattern
                except OrphanedRouteError as e:
                    self.report("Cannot compile orphaned route", {"route": repr(route), "error": str(e)})
                except ConfigurationError as e:
                    self.report("Route pattern does not compile", {"route": repr(route), "error": str(e)})
            self._frozen = True
        logger.info(f"Router frozen with {len(self._collections)} collections")
        return self

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RouterFrozenError("Router is frozen, registration is closed")

    # Collections

    @property
    def collections(self) -> List[Collection]:
        """Collections in registration order."""
        return list(self._collections.values())

    def has_collection(self, name: Optional[str]) -> bool:
        return name in self._collections

    def get_collection(self, name: Optional[str]) -> Optional[Collection]:
        if name is None:
            return None
        return self._collections.get(name)

    def ensure_collection(self, name: str) -> Collection:
        """Return the named collection, creating an empty one if needed."""
        with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                self._ensure_mutable()
                collection = Collection(name, router=self)
                self._collections[name] = collection
                logger.debug(f"Created collection: {name}")
            return collection

    def add_collection(self, collection: Collection) -> "Router":
        """Add a collection, replacing any collection of the same name."""
        self._ensure_mutable()
        with self._lock:
            collection.router = self
            if collection.name in RESERVED_COLLECTIONS:
                collection.reserved = True
            self._collections[collection.name] = collection
            for route in collection:
                if route.router is None:
                    route.router = self
                if route.name:
                    self.registry.register(route.name, route)
        logger.debug(f"Added collection: {collection!r}")
        return self

    def register_collection(
        self,
        name: str,
        config: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> Collection:
        """Create or update a collection from config options.

        Recognized options: ``namespace``/``ns``, ``scheme``,
        ``hostname``/``host``, ``target``/``path``, ``prefix``,
        ``reserved``, ``routes``.
        """
        self._ensure_mutable()
        if config is not None and not isinstance(config, Mapping):
            logger.warning(f"Collection {name!r}: ignoring config of type {type(config).__name__}")
            config = None
        merged = {**(config or {}), **options}
        merged.pop("name", None)

        with self._lock:
            collection = self.ensure_collection(name)
            collection.configure(merged)
            if name in RESERVED_COLLECTIONS:
                collection.reserved = True
        return collection

    def register_collections(self, collections: Mapping[str, Any]) -> "Router":
        """Register several collections.

        Each value is either ``{"config": {...}, "routes": [...]}`` or a
        flat config mapping. A ``name`` entry overrides the key.
        """
        for key, entry in collections.items():
            if not isinstance(entry, Mapping):
                logger.warning(f"Skipping collection {key!r}: expected a mapping")
                continue
            name = entry.get("name") if isinstance(entry.get("name"), str) else key
            if "config" in entry:
                raw = entry.get("config") or {}
                if not isinstance(raw, Mapping):
                    logger.warning(f"Skipping collection {key!r}: config must be a mapping")
                    continue
                config = dict(raw)
                if "routes" in entry:
                    config["routes"] = entry["routes"]
            else:
                config = dict(entry)
            self.register_collection(name, config)
        return self

    def remove_collection(self, name: str) -> Optional[Collection]:
        """Remove a collection. Its routes keep pointing at the name.

        Raises:
            ConfigurationError: for the reserved ``default``/``error``
        """
        if name in RESERVED_COLLECTIONS:
            raise ConfigurationError(f"Collection {name!r} is reserved and cannot be removed")
        self._ensure_mutable()
        with self._lock:
            return self._collections.pop(name, None)

    # Routes

    def routes(self) -> List[Route]:
        """All routes, by collection then insertion order."""
        return [route for collection in self._collections.values() for route in collection]

    def register_route(
        self,
        methods: Any,
        template: str,
        handler: Any,
        parameters: Optional[Any] = None,
        collection: Optional[str] = None,
    ) -> Route:
        """Register a route.

        Args:
            methods: Method token, list of tokens, or ``"all"``; unknown
                tokens are dropped
            template: Path template relative to the collection target
            handler: Callable, or ``namespace@action`` string
            parameters: Regex overrides keyed by raw segment (``":id"``);
                ``name``/``as`` name the route. A string here is taken as
                the collection name.
            collection: Collection name, ``default`` if omitted
        """
        self._ensure_mutable()
        if parameters is not None and not isinstance(parameters, Mapping):
            if isinstance(parameters, str) and collection is None:
                collection = parameters
            parameters = None
        collection = collection or DEFAULT_COLLECTION

        with self._lock:
            owner = self.ensure_collection(collection)
            route = Route(
                methods,
                template,
                handler,
                parameters=dict(parameters or {}),
                collection=collection,
                router=self,
            )
            owner.add(route)

        logger.debug(f"Registered {route!r}")
        return route

    def route(
        self,
        method: Union[HttpMethod, str],
        template: str,
        handler: Any,
        parameters: Optional[Mapping[str, Any]] = None,
        collection: Optional[str] = None,
    ) -> Route:
        """Register a single-method route.

        Raises:
            ConfigurationError: if ``method`` is not a known HTTP method
        """
        return self.register_route(HttpMethod.parse(method), template, handler, parameters, collection)

    def get(self, template: str, handler: Any, parameters=None, collection=None) -> Route:
        """Add GET route."""
        return self.route(HttpMethod.GET, template, handler, parameters, collection)

    def post(self, template: str, handler: Any, parameters=None, collection=None) -> Route:
        """Add POST route."""
        return self.route(HttpMethod.POST, template, handler, parameters, collection)

    def put(self, template: str, handler: Any, parameters=None, collection=None) -> Route:
        """Add PUT route."""
        return self.route(HttpMethod.PUT, template, handler, parameters, collection)

    def patch(self, template: str, handler: Any, parameters=None, collection=None) -> Route:
        """Add PATCH route."""
        return self.route(HttpMethod.PATCH, template, handler, parameters, collection)

    def delete(self, template: str, handler: Any, parameters=None, collection=None) -> Route:
        """Add DELETE route."""
        return self.route(HttpMethod.DELETE, template, handler, parameters, collection)

    def head(self, template: str, handler: Any, parameters=None, collection=None) -> Route:
        """Add HEAD route."""
        return self.route(HttpMethod.HEAD, template, handler, parameters, collection)

    def options(self, template: str, handler: Any, parameters=None, collection=None) -> Route:
        """Add OPTIONS route."""
        return self.route(HttpMethod.OPTIONS, template, handler, parameters, collection)

    def any(self, template: str, handler: Any, parameters=None, collection=None) -> Route:
        """Add route for GET, POST, PUT, PATCH and DELETE."""
        return self.register_route("all", template, handler, parameters, collection)

    def add_route(self, route: Route, collection: Optional[str] = None) -> "Router":
        """Add an existing Route object to a collection."""
        route.router = self
        self.move_route(route, collection or route.collection or DEFAULT_COLLECTION)
        return self

    def move_route(self, route: Route, name: str) -> None:
        """Detach a route from its collection and attach it to ``name``."""
        self._ensure_mutable()
        with self._lock:
            current = self.get_collection(route.collection)
            if current is not None:
                current.remove(route)
            route.router = self
            self.ensure_collection(name).add(route)
        logger.debug(f"Moved {route!r} to collection {name!r}")

    def name_route(self, route: Route, name: str) -> None:
        self._ensure_mutable()
        with self._lock:
            self.registry.register(name, route)

    # Resolution

    def select_collection(
        self,
        path: str,
        scheme: Optional[str] = None,
        hostname: Optional[str] = None,
    ) -> str:
        """Pick the collection name for a request path."""
        selected: Optional[str] = None

        # No break: the last candidate wins.
        for collection in self._collections.values():
            if (
                not collection.is_reserved
                and collection.scheme_allows(scheme)
                and collection.host_allows(hostname)
                and collection.prefix_matches(path)
            ):
                selected = collection.name

        if selected is None:
            selected = DEFAULT_COLLECTION
        if selected not in self._collections:
            selected = ERROR_COLLECTION
        return selected

    def resolve(
        self,
        method: str,
        path: str,
        scheme: Optional[str] = None,
        hostname: Optional[str] = None,
    ) -> ResolutionOutcome:
        """Resolve a request to a route.

        Never raises: failures are reported and give an unmatched outcome.
        """
        reported = len(self.reporter.reports)
        clean_path = path
        selected: Optional[str] = None
        match: Optional[RouteMatch] = None

        try:
            clean_path = normalize_path(path)
            selected = self.select_collection(clean_path, scheme, hostname)
            collection = self._collections.get(selected)
            if collection is not None:
                match = collection.resolve(method, clean_path)
        except Exception as e:
            logger.exception(f"Error resolving {method} {path}")
            self.report(
                "Unexpected error while resolving request",
                {"method": method, "path": path, "error": str(e)},
            )
            match = None

        outcome = ResolutionOutcome.from_match(
            method=method.value if isinstance(method, HttpMethod) else str(method).upper(),
            path=clean_path,
            collection_name=selected,
            match=match,
            errors=self.reporter.reports[reported:],
        )
        self._outcome = outcome

        if outcome.matched:
            logger.debug(f"{outcome.method} {clean_path} -> {outcome.route!r} in {selected!r}")
        else:
            logger.debug(f"{outcome.method} {clean_path} unresolved in {selected!r}")
        return outcome

    def resolve_request(self, request: RequestInfo) -> ResolutionOutcome:
        """Resolve a ``RequestInfo``."""
        return self.resolve(request.method, request.clean_path, request.scheme, request.hostname or None)

    @property
    def outcome(self) -> ResolutionOutcome:
        """Outcome of the most recent resolution."""
        return self._outcome

    @property
    def method(self) -> str:
        return self._outcome.method

    @property
    def path(self) -> str:
        return self._outcome.path

    def has_matched(self) -> bool:
        return self._outcome.matched

    def resolved_route(self) -> Optional[Route]:
        return self._outcome.route

    def resolved_arguments(self) -> Dict[str, str]:
        return dict(self._outcome.arguments)

    # Reverse URLs

    def has_route(self, name: str) -> bool:
        return self.registry.has(name)

    def url_for(
        self,
        name: str,
        arguments: Any = None,
        fallback: str = "/",
        query: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Build the URL of a named route, or return ``fallback``."""
        if not self.registry.has(name):
            return fallback
        return append_query(self.registry.resolve_url(name, arguments, fallback), query)

    # Error reporting

    def report(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self.reporter.report(message, context)

    @property
    def errors(self) -> List[ErrorReport]:
        return self.reporter.reports

    @property
    def has_errors(self) -> bool:
        return bool(self.reporter.reports)


__all__ = [
    "ERROR_COLLECTION",
    "RESERVED_COLLECTIONS",
    "ResolutionOutcome",
    "Router",
]
