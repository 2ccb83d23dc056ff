"""Resolve the effective configuration from CLI flags, git config and defaults.

Every field is resolved on its own from an ordered list of sources. Sources
are callables so that git is only asked for a key when no earlier layer
supplied a value.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Tuple, TypeVar

from diff_gitignore_filter.config.defaults import (
    DOWNSTREAM_KEY,
    FALSE_VALUES,
    TRUE_VALUES,
    VCS_ENABLED_KEY,
    VCS_PATTERNS_KEY,
)
from diff_gitignore_filter.config.schema import (
    CliOverrides,
    ConfigDefaults,
    EffectiveConfig,
    VcsFilterConfig,
)
from diff_gitignore_filter.errors import ConfigError, GitError
from diff_gitignore_filter.git.adapter import GitConfigReader

logger = logging.getLogger(__name__)

T = TypeVar("T")
Source = Callable[[], Optional[T]]


def first_present(sources: Iterable[Source[T]]) -> Optional[T]:
    """Return the value of the first source that yields something other than None."""
    for source in sources:
        value = source()
        if value is not None:
            return value
    return None


def parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(
        f"Invalid boolean for {key}: {raw!r} "
        f"(expected one of: {', '.join(sorted(TRUE_VALUES | FALSE_VALUES))})"
    )


def parse_patterns(origin: str, raw: str) -> Tuple[str, ...]:
    """Split a comma-separated pattern string, dropping empty items."""
    patterns = tuple(p.strip() for p in raw.split(",") if p.strip())
    if not patterns:
        raise ConfigError(f"Malformed pattern string for {origin}: {raw!r} contains no patterns")
    return patterns


def _git_value(reader: GitConfigReader, key: str) -> Optional[str]:
    try:
        return reader.get(key)
    except GitError as exc:
        logger.debug("Treating %s as unset: %s", key, exc)
        return None


def resolve_downstream(
    cli: CliOverrides, reader: GitConfigReader, defaults: ConfigDefaults
) -> Optional[str]:
    def from_git() -> Optional[str]:
        value = _git_value(reader, DOWNSTREAM_KEY)
        return value.strip() or None if value is not None else None

    command = first_present([
        lambda: cli.downstream,
        from_git,
        lambda: defaults.downstream_command,
    ])
    # An empty command line value is present but disables the downstream.
    return command.strip() or None if command is not None else None


def resolve_vcs_enabled(
    cli: CliOverrides, reader: GitConfigReader, defaults: ConfigDefaults
) -> bool:
    if cli.vcs and cli.no_vcs:
        raise ConfigError("--vcs and --no-vcs are mutually exclusive")

    def from_cli() -> Optional[bool]:
        if cli.vcs:
            return True
        if cli.no_vcs:
            return False
        return None

    def from_git() -> Optional[bool]:
        value = _git_value(reader, VCS_ENABLED_KEY)
        return parse_bool(VCS_ENABLED_KEY, value) if value is not None else None

    enabled = first_present([from_cli, from_git, lambda: defaults.vcs_enabled])
    return bool(enabled)


def resolve_vcs_patterns(
    cli: CliOverrides, reader: GitConfigReader, defaults: ConfigDefaults
) -> Tuple[str, ...]:
    def from_cli() -> Optional[Tuple[str, ...]]:
        if cli.vcs_pattern is None:
            return None
        return parse_patterns("--vcs-pattern", cli.vcs_pattern)

    def from_git() -> Optional[Tuple[str, ...]]:
        value = _git_value(reader, VCS_PATTERNS_KEY)
        return parse_patterns(VCS_PATTERNS_KEY, value) if value is not None else None

    patterns = first_present([from_cli, from_git, lambda: defaults.vcs_patterns])
    return tuple(patterns or ())


def resolve_config(
    cli: CliOverrides,
    reader: GitConfigReader,
    defaults: ConfigDefaults = ConfigDefaults(),
) -> EffectiveConfig:
    """Resolve every field independently: CLI, then git config, then *defaults*."""
    config = EffectiveConfig(
        downstream_command=resolve_downstream(cli, reader, defaults),
        vcs=VcsFilterConfig(
            enabled=resolve_vcs_enabled(cli, reader, defaults),
            patterns=resolve_vcs_patterns(cli, reader, defaults),
        ),
    )
    logger.debug("Effective configuration: %s", config)
    return config
