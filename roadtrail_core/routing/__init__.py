"""Routing module - Route registration, resolution and reverse URLs."""

from roadtrail_core.routing.binding import ActionBinding, CallableBinding, ResolvedAction
from roadtrail_core.routing.collection import Collection
from roadtrail_core.routing.errors import (
    ConfigurationError,
    ErrorReport,
    ErrorReporter,
    LoggingErrorReporter,
    OrphanedRouteError,
    RouterFrozenError,
    RoutingError,
)
from roadtrail_core.routing.params import DEFAULT_PARAM_CLASSES, ParamClasses
from roadtrail_core.routing.pattern import PathPattern, Segment
from roadtrail_core.routing.registry import NamedRouteRegistry
from roadtrail_core.routing.route import HttpMethod, Route, RouteMatch, validate_methods
from roadtrail_core.routing.router import ResolutionOutcome, Router

__all__ = [
    "Router",
    "ResolutionOutcome",
    "Collection",
    "Route",
    "RouteMatch",
    "HttpMethod",
    "validate_methods",
    "PathPattern",
    "Segment",
    "ParamClasses",
    "DEFAULT_PARAM_CLASSES",
    "NamedRouteRegistry",
    "ActionBinding",
    "CallableBinding",
    "ResolvedAction",
    "RoutingError",
    "ConfigurationError",
    "OrphanedRouteError",
    "RouterFrozenError",
    "ErrorReport",
    "ErrorReporter",
    "LoggingErrorReporter",
]
