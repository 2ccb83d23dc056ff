"""Git interface layer — diff parsing, models, root resolution, config access."""

from diff_gitignore_filter.git.adapter import GitConfigReader, SystemGitConfigReader
from diff_gitignore_filter.git.diff_parser import DiffStreamParser, ParserState
from diff_gitignore_filter.git.models import (
    DiffEntry,
    Hunk,
    HunkLine,
    LineType,
    Passthrough,
)
from diff_gitignore_filter.git.root import RepoRoot, resolve_repo_root

__all__ = [
    "DiffEntry",
    "DiffStreamParser",
    "GitConfigReader",
    "Hunk",
    "HunkLine",
    "LineType",
    "ParserState",
    "Passthrough",
    "RepoRoot",
    "SystemGitConfigReader",
    "resolve_repo_root",
]
