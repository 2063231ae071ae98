"""Utils module - Utility functions."""

from roadtrail_core.utils.config import (
    RouterConfig,
    load_config,
    ConfigSource,
)
from roadtrail_core.utils.helpers import (
    parse_url,
    normalize_path,
    normalize_target,
)

__all__ = [
    "RouterConfig",
    "load_config",
    "ConfigSource",
    "parse_url",
    "normalize_path",
    "normalize_target",
]
