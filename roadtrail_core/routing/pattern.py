"""Path Pattern - Compiles route templates into positional matchers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from roadtrail_core.routing.errors import ConfigurationError
from roadtrail_core.routing.params import ParamClasses

DEFAULT_IDENTIFIER = ":"


@dataclass(frozen=True)
class Segment:
    """One ``/``-delimited piece of a template."""

    raw: str
    param: Optional[str] = None
    regex: Optional[str] = None

    @property
    def is_param(self) -> bool:
        return self.param is not None


@dataclass
class PathPattern:
    """Compiled route template.

    A segment holding the identifier (``:`` by default) is a parameter;
    the text after the identifier is its name. Every parameter segment is
    matched by a regex class, every literal segment by itself.

    Matching is strict: the candidate must have exactly as many segments as
    the template and no segment is optional.

    Usage:
        pattern = PathPattern.compile("/users/:id", {":id": "numeric"})
        pattern.match("/users/42")        # ('42',)
        pattern.match("/users/42/posts")  # None
        pattern.build({"id": 7})          # '/users/7'
    """

    template: str
    segments: List[Segment]
    regex: re.Pattern
    positions: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def compile(
        cls,
        template: str,
        overrides: Optional[Mapping[str, Any]] = None,
        identifier: str = DEFAULT_IDENTIFIER,
        classes: Optional[ParamClasses] = None,
    ) -> "PathPattern":
        """Compile a template.

        Args:
            template: Route template, e.g. ``/users/:id``
            overrides: Regex (or class name) per raw parameter segment,
                keyed like ``{":id": "[0-9]+"}``
            identifier: Parameter marker
            classes: Parameter class table

        Raises:
            ConfigurationError: when an override is not a valid regex
        """
        if not identifier:
            raise ValueError("Parameter identifier must not be empty")

        classes = classes if classes is not None else ParamClasses()
        overrides = overrides or {}

        segments: List[Segment] = []
        positions: Dict[int, str] = {}
        fragments: List[str] = []

        prepared = template.strip("/")
        parts = prepared.split("/") if prepared else []

        for index, part in enumerate(parts):
            pos = part.find(identifier)
            if pos == -1:
                segments.append(Segment(raw=part))
                fragments.append(re.escape(part))
                continue

            name = part[pos + len(identifier):]
            override = overrides.get(part)
            if isinstance(override, str) and override:
                regex = classes.resolve(override)
            else:
                regex = classes.default

            segments.append(Segment(raw=part, param=name, regex=regex))
            positions[index] = name
            fragments.append(f"(?:{regex})")

        try:
            compiled = re.compile("^/" + "/".join(fragments) + "$", re.ASCII)
        except re.error as e:
            raise ConfigurationError(f"Invalid parameter regex in {template!r}: {e}") from e
        return cls(
            template="/" + prepared,
            segments=segments,
            regex=compiled,
            positions=positions,
        )

    @property
    def names(self) -> List[str]:
        """Parameter names in template order."""
        return [s.param for s in self.segments if s.param is not None]

    @property
    def arity(self) -> int:
        return len(self.positions)

    def match(self, path: str) -> Optional[Tuple[str, ...]]:
        """Match a path and return parameter values in template order."""
        if self.regex.fullmatch(path) is None:
            return None

        stripped = path.strip("/")
        parts = stripped.split("/") if stripped else []
        if len(parts) != len(self.segments):
            return None

        return tuple(parts[index] for index in sorted(self.positions))

    def build(self, arguments: Any = None) -> str:
        """Build a concrete path.

        Each parameter takes the named argument when ``arguments`` is a
        mapping holding its name, else the positional argument at its
        parameter index, else an empty string.
        """
        if arguments is None:
            arguments = ()
        elif isinstance(arguments, (str, bytes, int, float)):
            arguments = (arguments,)

        link: List[str] = []
        count = 0
        for segment in self.segments:
            if segment.is_param:
                link.append(_lookup(arguments, segment.param, count))
                count += 1
            else:
                link.append(segment.raw)

        return "/" + "/".join(link)


def _lookup(arguments: Any, name: Optional[str], position: int) -> str:
    if isinstance(arguments, Mapping):
        if name in arguments:
            value = arguments[name]
        else:
            value = arguments.get(position)
    elif isinstance(arguments, Sequence):
        value = arguments[position] if position < len(arguments) else None
    else:
        value = None

    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode()
    return str(value)


__all__ = [
    "DEFAULT_IDENTIFIER",
    "Segment",
    "PathPattern",
]
