"""Configuration resolution, schema, and defaults."""

from diff_gitignore_filter.config.resolver import parse_bool, parse_patterns, resolve_config
from diff_gitignore_filter.config.schema import (
    CliOverrides,
    ConfigDefaults,
    EffectiveConfig,
    VcsFilterConfig,
)

__all__ = [
    "CliOverrides",
    "ConfigDefaults",
    "EffectiveConfig",
    "VcsFilterConfig",
    "parse_bool",
    "parse_patterns",
    "resolve_config",
]
