"""Git subprocess wrapper — reading configuration values."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional, Protocol

from diff_gitignore_filter.errors import GitError


class GitConfigReader(Protocol):
    """Anything that can look up a single git configuration value."""

    def get(self, key: str) -> Optional[str]:
        """Return the value for *key*, or None when it is not set."""
        ...


def _run_git(args: list[str], cwd: Path, timeout: int = 30) -> subprocess.CompletedProcess:
    """Run a git command and return the completed process. Raises GitError if git cannot run."""
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")
    except OSError as exc:
        raise GitError(f"Failed to run git {' '.join(args)}: {exc}") from exc


class SystemGitConfigReader:
    """Read configuration with ``git config --get`` from a working directory."""

    def __init__(self, cwd: Optional[Path] = None) -> None:
        self.cwd = cwd or Path.cwd()

    def get(self, key: str) -> Optional[str]:
        result = _run_git(["config", "--get", key], cwd=self.cwd)
        if result.returncode == 0:
            value = result.stdout.strip()
            return value or None
        if result.returncode == 1:
            return None  # key is not set
        stderr = result.stderr.strip()
        raise GitError(
            f"git config --get {key} failed with exit code {result.returncode}: {stderr}"
        )
