"""Error taxonomy shared by every stage of the filter.

Each fatal error carries the process exit code the CLI reports for it:

  - ``ConfigError``        → 1  (conflicting overrides, malformed values)
  - ``StreamError``        → 2  (read/write failure on the diff streams)
  - ``RootNotFoundError``  → 3  (no ``.git`` entry above the start directory)

Parse ambiguities and a downstream process closing its input early are
recovered where they happen and never reach this module.
"""

from __future__ import annotations

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_IO = 2
EXIT_ROOT = 3


class DiffFilterError(Exception):
    """Base class for errors that abort a run."""

    exit_code: int = EXIT_CONFIG


class ConfigError(DiffFilterError):
    """Raised when overrides conflict or a configured value is malformed."""

    exit_code = EXIT_CONFIG


class StreamError(DiffFilterError):
    """Raised on I/O failure other than a consumer closing its pipe."""

    exit_code = EXIT_IO


class RootNotFoundError(DiffFilterError):
    """Raised when no repository root can be located."""

    exit_code = EXIT_ROOT


class GitError(DiffFilterError):
    """Raised when git is unavailable or returns an unexpected error."""

    exit_code = EXIT_CONFIG
