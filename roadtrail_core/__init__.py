"""RoadTrail - URL route resolution engine.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

RoadTrail picks the single best route for an inbound method and path,
extracts its path parameters and resolves its handler binding. It also
builds URLs back from route names.

Architecture Overview:
┌─────────────────────────────────────────────────────────────────────────────┐
│                               RoadTrail                                      │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                              │
│  ┌───────────────────────────────────────────────────────────────────────┐  │
│  │                          Resolution                                    │  │
│  │  (method, path, scheme) ──▶ Collection filter ──▶ Route match ──▶ Outcome │
│  └───────────────────────────────────────────────────────────────────────┘  │
│                                                                              │
│  ┌─────────────────┐  ┌─────────────────┐  ┌─────────────────────────────┐ │
│  │   Collections   │  │     Routes      │  │      Path Patterns          │ │
│  │                 │  │                 │  │                             │ │
│  │ - Target prefix │  │ - Method set    │  │ - :param segments           │ │
│  │ - Scheme / host │  │ - Handler bind  │  │ - Parameter classes         │ │
│  │ - Namespace     │  │ - Names         │  │ - Strict segment count      │ │
│  │ - Reserved      │  │ - Arguments     │  │ - URL building              │ │
│  └─────────────────┘  └─────────────────┘  └─────────────────────────────┘ │
│                                                                              │
│  ┌──────────────────────────────────────────────────────────────────────┐  │
│  │                      Named Route Registry                             │  │
│  │            url_for(name, arguments) ──▶ Route.build_url              │  │
│  └──────────────────────────────────────────────────────────────────────┘  │
│                                                                              │
└─────────────────────────────────────────────────────────────────────────────┘

Resolution Flow:
1. Non-reserved collections whose scheme, host and target accept the request
   are candidates; the last one registered wins
2. Without a candidate the ``default`` collection is used
3. Routes of the selected collection are tried in registration order
4. The first match provides arguments and the handler binding

Usage:
    from roadtrail_core import Router

    router = Router()
    router.register_collection("admin", {"target": "/admin", "namespace": "Admin"})
    router.get("/settings", "{ns}@settings", collection="admin")
    router.get("/users/:id", "Users@show", {":id": "numeric"}).named("users.show")

    outcome = router.resolve("GET", "/users/42")
    outcome.arguments                       # {'id': '42'}
    router.url_for("users.show", {"id": 7}) # '/users/7'
"""

__version__ = "0.1.0"
__author__ = "BlackRoad OS, Inc."

# Routing
from roadtrail_core.routing.router import Router, ResolutionOutcome
from roadtrail_core.routing.collection import Collection
from roadtrail_core.routing.route import Route, RouteMatch, HttpMethod
from roadtrail_core.routing.pattern import PathPattern
from roadtrail_core.routing.params import ParamClasses
from roadtrail_core.routing.registry import NamedRouteRegistry
from roadtrail_core.routing.binding import ActionBinding, CallableBinding, ResolvedAction

# Errors
from roadtrail_core.routing.errors import (
    RoutingError,
    ConfigurationError,
    OrphanedRouteError,
    RouterFrozenError,
    ErrorReporter,
    LoggingErrorReporter,
)

# Requests
from roadtrail_core.http.request import RequestInfo

# Utils
from roadtrail_core.utils.config import RouterConfig, load_config

__all__ = [
    # Version
    "__version__",
    # Routing
    "Router",
    "ResolutionOutcome",
    "Collection",
    "Route",
    "RouteMatch",
    "HttpMethod",
    "PathPattern",
    "ParamClasses",
    "NamedRouteRegistry",
    "ActionBinding",
    "CallableBinding",
    "ResolvedAction",
    # Errors
    "RoutingError",
    "ConfigurationError",
    "OrphanedRouteError",
    "RouterFrozenError",
    "ErrorReporter",
    "LoggingErrorReporter",
    # Requests
    "RequestInfo",
    # Utils
    "RouterConfig",
    "load_config",
]
