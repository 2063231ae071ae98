"""Handler bindings - What a matched route resolves to.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A route is bound either to a callable, which is exposed unchanged, or to a
``namespace@action`` pair. The namespace part may hold the ``{ns}`` or
``{namespace}`` placeholder, filled in from the owning collection when the
route matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from roadtrail_core.routing.errors import ConfigurationError

NAMESPACE_PLACEHOLDERS = ("{ns}", "{namespace}")
ACTION_SEPARATOR = "@"


@dataclass(frozen=True)
class ResolvedAction:
    """A namespace/action pair with placeholders and prefixing applied."""

    namespace: str
    action: str

    @property
    def key(self) -> str:
        """Lookup key, e.g. ``AdminController@get_settings``."""
        if self.namespace:
            return f"{self.namespace}{ACTION_SEPARATOR}{self.action}"
        return self.action

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class CallableBinding:
    """Binding to an opaque callable."""

    target: Callable[..., Any]

    def resolve(
        self,
        method: str,
        namespace: Optional[str] = None,
        prefixed: bool = False,
    ) -> Callable[..., Any]:
        return self.target


@dataclass(frozen=True)
class ActionBinding:
    """Binding to ``namespace@action``."""

    namespace: str
    action: str

    @classmethod
    def parse(cls, raw: str) -> "ActionBinding":
        """Parse ``Controller@action``, ``{ns}@action`` or a bare ``action``.

        A bare action takes the collection namespace.
        """
        raw = raw.strip()
        if not raw:
            raise ConfigurationError("Empty handler binding")

        namespace, separator, action = raw.partition(ACTION_SEPARATOR)
        if not separator:
            namespace, action = NAMESPACE_PLACEHOLDERS[0], raw
        if not action:
            raise ConfigurationError(f"Handler binding has no action: {raw!r}")
        return cls(namespace=namespace, action=action)

    @property
    def has_placeholder(self) -> bool:
        return any(p in self.namespace for p in NAMESPACE_PLACEHOLDERS)

    def resolve(
        self,
        method: str,
        namespace: Optional[str] = None,
        prefixed: bool = False,
    ) -> ResolvedAction:
        """Fill in the collection namespace and apply method prefixing."""
        resolved = self.namespace
        for placeholder in NAMESPACE_PLACEHOLDERS:
            resolved = resolved.replace(placeholder, namespace or "")

        action = self.action
        if prefixed:
            action = f"{method.lower()}_{action}"

        return ResolvedAction(namespace=resolved, action=action)

    def __str__(self) -> str:
        return f"{self.namespace}{ACTION_SEPARATOR}{self.action}"


HandlerBinding = Union[CallableBinding, ActionBinding]


def parse_binding(handler: Any) -> HandlerBinding:
    """Turn a registration-time handler into a binding."""
    if isinstance(handler, (CallableBinding, ActionBinding)):
        return handler
    if isinstance(handler, str):
        return ActionBinding.parse(handler)
    if callable(handler):
        return CallableBinding(handler)
    raise ConfigurationError(
        f"Handler must be a callable or a 'namespace@action' string, "
        f"got {type(handler).__name__}"
    )


__all__ = [
    "NAMESPACE_PLACEHOLDERS",
    "ResolvedAction",
    "CallableBinding",
    "ActionBinding",
    "HandlerBinding",
    "parse_binding",
]
