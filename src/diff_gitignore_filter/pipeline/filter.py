"""Core filter — classify parsed diff entries and re-emit the retained ones.

The filter consumes ``DiffStreamParser`` items one at a time, so at most one
entry is held in memory. Retained entries and passthrough lines are written
byte-exact and the sink is flushed after each, keeping a pager responsive.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Tuple

from diff_gitignore_filter.config.schema import VcsFilterConfig
from diff_gitignore_filter.errors import StreamError
from diff_gitignore_filter.git.diff_parser import DiffStreamParser
from diff_gitignore_filter.git.models import DiffEntry, Passthrough
from diff_gitignore_filter.ignore.matcher import IgnoreMatcher
from diff_gitignore_filter.ignore.vcs import first_vcs_match

logger = logging.getLogger(__name__)

REASON_GITIGNORE = "gitignore"
REASON_VCS = "vcs"


@dataclass
class FilterStats:
    entries: int = 0
    kept: int = 0
    dropped_gitignore: int = 0
    dropped_vcs: int = 0
    ambiguous: int = 0
    passthrough_lines: int = 0
    bytes_written: int = 0
    duration_ms: float = 0.0
    dropped: List[Tuple[str, str]] = field(default_factory=list)  # (path, reason), only when recorded

    @property
    def dropped_total(self) -> int:
        return self.dropped_gitignore + self.dropped_vcs


class DiffStreamFilter:
    """Drop diff entries for ignored files and VCS metadata.

    Dropped paths are listed in ``FilterStats.dropped`` only when
    *record_dropped* is set; the counters are always kept.
    """

    def __init__(self, matcher: IgnoreMatcher, vcs: VcsFilterConfig, record_dropped: bool = False) -> None:
        self.matcher = matcher
        self.vcs = vcs
        self.record_dropped = record_dropped

    def classify(self, entry: DiffEntry) -> Optional[str]:
        """Return the reason *entry* is dropped, or None when it is kept."""
        effective = entry.effective_path
        if effective is None:
            return None

        is_dir = entry.is_submodule
        if self.matcher.is_ignored(effective, is_dir=is_dir):
            return REASON_GITIGNORE
        if entry.is_rename and entry.old_path is not None:
            if self.matcher.is_ignored(entry.old_path, is_dir=is_dir):
                return REASON_GITIGNORE

        if self.vcs.enabled:
            for path in (effective, entry.old_path):
                if path is not None and first_vcs_match(path, self.vcs.patterns) is not None:
                    return REASON_VCS
        return None

    def run(self, source: BinaryIO, sink: BinaryIO) -> FilterStats:
        """Filter the diff read from *source* into *sink*.

        Raises StreamError on read or write failure. BrokenPipeError from
        *sink* propagates unchanged.
        """
        stats = FilterStats()
        start = time.perf_counter()

        for item in DiffStreamParser(source).parse():
            if isinstance(item, Passthrough):
                stats.passthrough_lines += 1
                self._write(sink, item.raw, stats)
                continue

            stats.entries += 1
            if item.ambiguous:
                stats.ambiguous += 1
                stats.kept += 1
                logger.debug("Keeping ambiguous entry for %s", item.effective_path)
                self._write(sink, item.raw_bytes(), stats)
                continue

            reason = self.classify(item)
            if reason is None:
                stats.kept += 1
                self._write(sink, item.raw_bytes(), stats)
                continue

            if reason == REASON_GITIGNORE:
                stats.dropped_gitignore += 1
            else:
                stats.dropped_vcs += 1
            if self.record_dropped:
                stats.dropped.append((item.effective_path or "", reason))
            logger.debug("Dropping %s (%s)", item.effective_path, reason)

        self._flush(sink)
        stats.duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Filtered %d entries: %d kept, %d dropped",
            stats.entries, stats.kept, stats.dropped_total,
        )
        return stats

    @staticmethod
    def _write(sink: BinaryIO, data: bytes, stats: FilterStats) -> None:
        try:
            sink.write(data)
            sink.flush()
        except BrokenPipeError:
            raise
        except OSError as exc:
            raise StreamError(f"Failed to write filtered diff: {exc}") from exc
        stats.bytes_written += len(data)

    @staticmethod
    def _flush(sink: BinaryIO) -> None:
        try:
            sink.flush()
        except BrokenPipeError:
            raise
        except OSError as exc:
            raise StreamError(f"Failed to flush filtered diff: {exc}") from exc
