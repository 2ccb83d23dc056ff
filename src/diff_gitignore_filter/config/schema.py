"""Configuration schema — frozen dataclasses for each resolution layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from diff_gitignore_filter.config.defaults import DEFAULT_VCS_PATTERNS


@dataclass(frozen=True)
class CliOverrides:
    """Values given on the command line; None/False means not supplied."""

    downstream: Optional[str] = None  # "" disables a configured downstream
    vcs: bool = False
    no_vcs: bool = False
    vcs_pattern: Optional[str] = None  # raw comma-separated string


@dataclass(frozen=True)
class ConfigDefaults:
    downstream_command: Optional[str] = None
    vcs_enabled: bool = True
    vcs_patterns: Tuple[str, ...] = DEFAULT_VCS_PATTERNS


@dataclass(frozen=True)
class VcsFilterConfig:
    enabled: bool = True
    patterns: Tuple[str, ...] = DEFAULT_VCS_PATTERNS


@dataclass(frozen=True)
class EffectiveConfig:
    downstream_command: Optional[str] = None
    vcs: VcsFilterConfig = VcsFilterConfig()
