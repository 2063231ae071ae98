"""Parameter classes - Reusable regex fragments for path parameters.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import re
from typing import Dict, Iterator, Mapping, Optional

ALPHA_NUMERIC = "alpha-numeric"
ALPHA = "alpha"
NUMERIC = "numeric"

DEFAULT_PARAM_CLASSES: Dict[str, str] = {
    ALPHA_NUMERIC: r"[\w-]{1,64}",
    ALPHA: r"[a-zA-Z_-]{1,64}",
    NUMERIC: r"[0-9]{1,24}",
}


class ParamClasses(Mapping[str, str]):
    """Table of named parameter classes.

    Starts from the built-in ``alpha-numeric``, ``alpha`` and ``numeric``
    classes. Extra classes can be registered per router.

    Usage:
        classes = ParamClasses({"slug": r"[a-z0-9-]{1,128}"})
        classes["numeric"]          # '[0-9]{1,24}'
        classes.resolve("slug")     # '[a-z0-9-]{1,128}'
        classes.resolve(r"\\d{4}")  # not a class name, returned as-is
    """

    def __init__(
        self,
        extra: Optional[Mapping[str, str]] = None,
        default: str = ALPHA_NUMERIC,
    ):
        self._classes: Dict[str, str] = dict(DEFAULT_PARAM_CLASSES)
        for name, regex in (extra or {}).items():
            self.register(name, regex)
        if default not in self._classes:
            raise KeyError(f"Unknown default parameter class: {default}")
        self._default = default

    def __getitem__(self, name: str) -> str:
        return self._classes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    @property
    def default(self) -> str:
        """Regex of the default class."""
        return self._classes[self._default]

    @property
    def default_name(self) -> str:
        return self._default

    def register(self, name: str, regex: str) -> "ParamClasses":
        """Add or replace a class. The regex must compile."""
        re.compile(regex)
        self._classes[name] = regex
        return self

    def resolve(self, value: str) -> str:
        """Expand a class name to its regex; other values are raw regexes."""
        return self._classes.get(value, value)


__all__ = [
    "ALPHA_NUMERIC",
    "ALPHA",
    "NUMERIC",
    "DEFAULT_PARAM_CLASSES",
    "ParamClasses",
]
