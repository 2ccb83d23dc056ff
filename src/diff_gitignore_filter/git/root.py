"""Repository root resolution — worktree- and submodule-aware.

Walks upward from a start directory looking for a ``.git`` entry:

  - a directory: a regular checkout, ``.git`` is the git directory;
  - a file: a linked worktree or submodule checkout. Its ``gitdir: <path>``
    line redirects to the real git directory, while the directory holding
    the file stays the working tree used for ``.gitignore`` lookup.

A ``commondir`` file inside the git directory (linked worktrees) points at
the shared repository directory, where ``info/exclude`` lives.
Resolution is read-only.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from diff_gitignore_filter.errors import RootNotFoundError

logger = logging.getLogger(__name__)

_GITDIR_PREFIX = "gitdir:"


@dataclass(frozen=True)
class RepoRoot:
    """Where to look for ignore files for one run."""

    work_tree: Path
    git_dir: Path
    common_dir: Path


def _absolute(base: Path, value: str) -> Path:
    return Path(os.path.normpath(base / value))


def _first_line(path: Path) -> str:
    with open(path, "r", encoding="utf-8", errors="surrogateescape") as fh:
        return fh.readline().strip()


def _read_gitfile(dot_git: Path) -> Path:
    """Return the git directory a ``.git`` file redirects to."""
    try:
        line = _first_line(dot_git)
    except OSError as exc:
        raise RootNotFoundError(f"Cannot read {dot_git}: {exc}") from exc
    if not line.startswith(_GITDIR_PREFIX):
        raise RootNotFoundError(f"Invalid gitfile format: {dot_git}")
    target = line[len(_GITDIR_PREFIX):].strip()
    if not target:
        raise RootNotFoundError(f"Invalid gitfile format: {dot_git}")
    return _absolute(dot_git.parent, target)


def _read_commondir(git_dir: Path) -> Path:
    """Return the shared git directory, or *git_dir* itself."""
    commondir = git_dir / "commondir"
    if not commondir.is_file():
        return git_dir
    try:
        target = _first_line(commondir)
    except OSError as exc:
        logger.warning("Cannot read %s: %s", commondir, exc)
        return git_dir
    if not target:
        return git_dir
    return _absolute(git_dir, target)


def resolve_repo_root(start_dir: Path) -> RepoRoot:
    """Locate the working-tree root containing *start_dir*.

    Raises RootNotFoundError if no ``.git`` entry exists between
    *start_dir* and the filesystem root.
    """
    current = Path(os.path.abspath(start_dir))
    for candidate in (current, *current.parents):
        dot_git = candidate / ".git"
        if dot_git.is_dir():
            git_dir = dot_git
        elif dot_git.is_file():
            git_dir = _read_gitfile(dot_git)
        else:
            continue

        root = RepoRoot(
            work_tree=candidate,
            git_dir=git_dir,
            common_dir=_read_commondir(git_dir),
        )
        logger.debug(
            "Repository root: work_tree=%s git_dir=%s common_dir=%s",
            root.work_tree, root.git_dir, root.common_dir,
        )
        return root

    raise RootNotFoundError(f"Not in a git repository: {current}")
