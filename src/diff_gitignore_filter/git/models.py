"""Data models for diff parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class LineType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"
    MARKER = "marker"  # "\ No newline at end of file"


@dataclass(frozen=True, slots=True)
class HunkLine:
    """A single content line of a hunk, kept as raw bytes."""

    line_type: LineType
    raw: bytes


@dataclass
class Hunk:
    """A ``@@ … @@`` header plus its content lines."""

    header: bytes
    lines: List[HunkLine] = field(default_factory=list)

    def raw_bytes(self) -> bytes:
        return self.header + b"".join(line.raw for line in self.lines)


@dataclass
class DiffEntry:
    """One file change inside a diff stream.

    Paths are unescaped, root-relative and ``None`` when the side does not
    exist (additions have no old path, deletions no new path). Every raw line
    is stored verbatim so a retained entry is re-emitted byte for byte.
    """

    old_path: Optional[str] = None
    new_path: Optional[str] = None
    is_binary: bool = False
    is_rename: bool = False
    is_copy: bool = False
    is_submodule: bool = False
    ambiguous: bool = False
    header_lines: List[bytes] = field(default_factory=list)
    binary_patch: List[bytes] = field(default_factory=list)
    hunks: List[Hunk] = field(default_factory=list)

    @property
    def effective_path(self) -> Optional[str]:
        return self.new_path if self.new_path is not None else self.old_path

    def raw_bytes(self) -> bytes:
        parts = [*self.header_lines, *self.binary_patch]
        parts.extend(hunk.raw_bytes() for hunk in self.hunks)
        return b"".join(parts)


@dataclass(frozen=True, slots=True)
class Passthrough:
    """A raw line outside any diff entry (commit preamble, trailing noise)."""

    raw: bytes
