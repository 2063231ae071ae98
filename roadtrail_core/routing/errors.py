"""Routing errors and error reporting.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class RoutingError(Exception):
    """Base class for routing errors."""


class ConfigurationError(RoutingError, ValueError):
    """Invalid route or collection configuration."""


class OrphanedRouteError(RoutingError, LookupError):
    """A route references a collection that does not exist."""

    def __init__(self, route_repr: str, collection: Optional[str]):
        self.collection = collection
        super().__init__(
            f"{route_repr} belongs to collection {collection!r}, "
            f"which is not registered with the router"
        )


class RouterFrozenError(RoutingError, RuntimeError):
    """Registration attempted after the router was frozen."""


@dataclass
class ErrorReport:
    """A single reported problem."""

    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


class ErrorReporter(ABC):
    """Sink for problems found while registering or resolving routes."""

    @abstractmethod
    def report(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Report a problem."""
        pass

    @property
    def reports(self) -> List[ErrorReport]:
        return []


class LoggingErrorReporter(ErrorReporter):
    """Reporter that logs each problem and keeps it for inspection."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._logger = log or logger
        self._reports: List[ErrorReport] = []

    def report(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        entry = ErrorReport(message=message, context=dict(context or {}))
        self._reports.append(entry)
        self._logger.error(f"{message} {entry.context}" if entry.context else message)

    @property
    def reports(self) -> List[ErrorReport]:
        return list(self._reports)

    @property
    def has_errors(self) -> bool:
        return bool(self._reports)

    def clear(self) -> None:
        self._reports.clear()


__all__ = [
    "RoutingError",
    "ConfigurationError",
    "OrphanedRouteError",
    "RouterFrozenError",
    "ErrorReport",
    "ErrorReporter",
    "LoggingErrorReporter",
]
