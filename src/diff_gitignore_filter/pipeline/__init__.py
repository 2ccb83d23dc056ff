"""Filtering pipeline — entry classification and the downstream relay."""

from diff_gitignore_filter.pipeline.filter import DiffStreamFilter, FilterStats
from diff_gitignore_filter.pipeline.relay import DownstreamRelay, exit_status, spawn

__all__ = ["DiffStreamFilter", "DownstreamRelay", "FilterStats", "exit_status", "spawn"]
