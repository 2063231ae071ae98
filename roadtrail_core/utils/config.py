"""Configuration utilities.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

import yaml

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="RouterConfig")

ENV_PREFIX = "ROADTRAIL_"
ENV_FIELDS = ("identifier", "default_param_class", "log_level", "freeze")


class ConfigSource(Enum):
    """Configuration sources."""

    FILE = auto()
    ENV = auto()
    DICT = auto()
    DEFAULT = auto()


@dataclass
class RouterConfig:
    """Router configuration.

    ``collections`` uses the multi-collection format::

        collections:
          admin:
            config: {target: /admin, scheme: https, namespace: Admin}
            routes:
              - [get, /settings, "{ns}@settings"]
              - methods: [get, post]
                path: /users/:id
                handler: "{ns}@user"
                parameters: {":id": numeric}
                name: admin.user
    """

    # Patterns
    identifier: str = ":"
    default_param_class: str = "alpha-numeric"
    param_classes: Dict[str, str] = field(default_factory=dict)

    # Route table
    collections: Dict[str, Any] = field(default_factory=dict)
    freeze: bool = False

    # Logging
    log_level: str = "INFO"

    source: ConfigSource = field(default=ConfigSource.DEFAULT, compare=False)

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any], source: ConfigSource = ConfigSource.DICT) -> T:
        """Create config from dictionary."""
        # Filter to only valid fields
        valid_fields = {f.name for f in fields(cls)} - {"source"}
        filtered = {k: v for k, v in (data or {}).items() if k in valid_fields}
        unknown = set(data or {}) - valid_fields
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return cls(source=source, **filtered)

    @classmethod
    def from_json(cls: Type[T], path: str) -> T:
        """Load config from JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data, ConfigSource.FILE)

    @classmethod
    def from_yaml(cls: Type[T], path: str) -> T:
        """Load config from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data, ConfigSource.FILE)

    @classmethod
    def from_env(cls: Type[T], prefix: str = ENV_PREFIX) -> T:
        """Load scalar settings from environment variables."""
        data = {}

        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue
            config_key = key[len(prefix):].lower()
            if config_key not in ENV_FIELDS:
                continue

            # Type conversion
            if value.lower() in ("true", "false"):
                data[config_key] = value.lower() == "true"
            else:
                data[config_key] = value

        return cls.from_dict(data, ConfigSource.ENV)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "source"
        }

    def merge(self, other: "RouterConfig") -> "RouterConfig":
        """Merge with another config.

        Values ``other`` sets away from the defaults take precedence.
        """
        defaults = RouterConfig().to_dict()
        data = self.to_dict()
        for key, value in other.to_dict().items():
            if value != defaults[key]:
                data[key] = value
        return RouterConfig.from_dict(data, self.source)

    def apply_logging(self, logger_name: str = "roadtrail_core") -> None:
        """Set the package log level."""
        level = logging.getLevelName(self.log_level.upper())
        if not isinstance(level, int):
            logger.warning(f"Unknown log level: {self.log_level}")
            return
        logging.getLogger(logger_name).setLevel(level)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = ENV_PREFIX,
) -> RouterConfig:
    """Load configuration from multiple sources.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (if provided)
    3. Defaults
    """
    config = RouterConfig()

    # Load from file if provided
    if path:
        path_obj = Path(path)
        if path_obj.exists():
            if path_obj.suffix == ".json":
                config = RouterConfig.from_json(path)
            elif path_obj.suffix in (".yaml", ".yml"):
                config = RouterConfig.from_yaml(path)
            else:
                logger.warning(f"Unknown config format: {path}")
        else:
            logger.warning(f"Config file not found: {path}")

    # Override with environment variables
    env_config = RouterConfig.from_env(env_prefix)
    config = config.merge(env_config)

    return config


__all__ = [
    "RouterConfig",
    "ConfigSource",
    "load_config",
]
