"""VCS metadata patterns — path-prefix matching without globbing or negation.

A pattern is a slash-separated prefix such as ``.git/`` or ``CVS``. It matches
when its components appear as a contiguous run of the path's components,
either at the start or nested (``vendor/lib/.git/config`` matches ``.git/``).
A trailing ``/`` (or ``/*``) restricts the pattern to directories, so the
last path component, the file itself, never satisfies it.
"""

from __future__ import annotations

from typing import Iterable, Optional


def vcs_pattern_matches(path: str, pattern: str) -> bool:
    directory_only = pattern.endswith(("/", "/*"))
    needle = pattern.rstrip("*").strip("/")
    if not needle:
        return False
    wanted = needle.split("/")
    parts = path.split("/")
    limit = len(parts) - len(wanted) + (0 if directory_only else 1)
    return any(parts[i:i + len(wanted)] == wanted for i in range(max(limit, 0)))


def first_vcs_match(path: str, patterns: Iterable[str]) -> Optional[str]:
    """Return the first pattern matching *path*, in configured order."""
    for pattern in patterns:
        if vcs_pattern_matches(path, pattern):
            return pattern
    return None
