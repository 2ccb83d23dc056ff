"""Streaming unified diff parser.

Reads a binary stream line by line and yields, in input order, completed
``DiffEntry`` objects and ``Passthrough`` lines that belong to no entry.
Only the entry currently being read is held in memory.

States::

    AWAITING_ENTRY --diff --git--> IN_ENTRY_HEADER --@@--> IN_HUNK
                                        |                    |
                                        +--GIT binary patch--+--> IN_BINARY_PATCH

Hunk line counts from the ``@@`` header decide where an entry ends, so lines
that follow the last hunk (``git log -p`` commit headers, for example) are
passed through instead of being swallowed by the preceding entry. Line
sequences that do not fit mark the entry ``ambiguous``; the filter always
emits such entries.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import BinaryIO, Iterator, Optional, Union

from diff_gitignore_filter.errors import StreamError
from diff_gitignore_filter.git.models import (
    DiffEntry,
    Hunk,
    HunkLine,
    LineType,
    Passthrough,
)
from diff_gitignore_filter.git.paths import (
    decode_path,
    parse_plain_path,
    parse_side_path,
    split_git_header,
    unquote_path,
)

logger = logging.getLogger(__name__)

# --- Regex patterns for diff parsing ---

_GIT_HEADER_RE = re.compile(rb"^diff --git (.*)$")
_COMBINED_HEADER_RE = re.compile(rb"^diff --(?:cc|combined) (.+)$")
_HUNK_HEADER_RE = re.compile(rb"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_COMBINED_HUNK_RE = re.compile(rb"^@@@+ ")
_BINARY_RE = re.compile(rb"^Binary files .* and .* differ$")
_BINARY_PATCH_RE = re.compile(rb"^GIT binary patch$")
_BINARY_CHUNK_RE = re.compile(rb"^(?:literal|delta) \d+$")
_BASE85_RE = re.compile(rb"^[A-Za-z][0-9A-Za-z!#$%&()*+\-;<=>?@^_`{|}~]+$")
_RENAME_FROM_RE = re.compile(rb"^rename from (.+)$")
_RENAME_TO_RE = re.compile(rb"^rename to (.+)$")
_COPY_FROM_RE = re.compile(rb"^copy from (.+)$")
_COPY_TO_RE = re.compile(rb"^copy to (.+)$")
_NEW_FILE_RE = re.compile(rb"^new file mode (\S+)$")
_DELETED_FILE_RE = re.compile(rb"^deleted file mode (\S+)$")
_INDEX_RE = re.compile(rb"^index [0-9a-f]+(?:,[0-9a-f]+)*\.\.[0-9a-f]+(?: (\d+))?$")
_OTHER_HEADER_RE = re.compile(
    rb"^(?:old mode \d+"
    rb"|new mode \d+"
    rb"|mode [0-7,]+\.\.[0-7]+"
    rb"|similarity index \d+%"
    rb"|dissimilarity index \d+%"
    rb"|rename old .+"
    rb"|rename new .+)$"
)

_SUBMODULE_MODE = b"160000"

_LINE_TYPES = {
    b" ": LineType.CONTEXT,
    b"+": LineType.ADDED,
    b"-": LineType.REMOVED,
    b"\\": LineType.MARKER,
}

DiffItem = Union[DiffEntry, Passthrough]


class ParserState(str, Enum):
    AWAITING_ENTRY = "awaiting_entry"
    IN_ENTRY_HEADER = "in_entry_header"
    IN_HUNK = "in_hunk"
    IN_BINARY_PATCH = "in_binary_patch"


class DiffStreamParser:
    """Parse a unified diff stream into entries and pass-through lines.

    Usage::

        parser = DiffStreamParser(sys.stdin.buffer)
        for item in parser.parse():
            if isinstance(item, Passthrough):
                ...
            else:
                ...  # a complete DiffEntry
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._state = ParserState.AWAITING_ENTRY
        self._entry: Optional[DiffEntry] = None
        self._hunk: Optional[Hunk] = None
        self._old_left: Optional[int] = None
        self._new_left: Optional[int] = None
        self._saw_minus = False
        self._saw_plus = False

    @property
    def state(self) -> ParserState:
        return self._state

    def parse(self) -> Iterator[DiffItem]:
        """Yield DiffEntry and Passthrough items until end of input."""
        for line in self._read_lines():
            yield from self._feed(line)
        if self._entry is not None:
            yield self._close_entry()

    def _read_lines(self) -> Iterator[bytes]:
        while True:
            try:
                line = self._stream.readline()
            except OSError as exc:
                raise StreamError(f"Failed to read diff input: {exc}") from exc
            if not line:
                return
            yield line

    def _feed(self, line: bytes) -> Iterator[DiffItem]:
        text = line.rstrip(b"\r\n")
        if self._state is not ParserState.AWAITING_ENTRY:
            if self._consume(line, text):
                return
            # The line does not belong to the open entry: close it and
            # re-process the line from AWAITING_ENTRY.
            yield self._close_entry()
        if self._open_entry(line, text):
            return
        yield Passthrough(line)

    def _consume(self, line: bytes, text: bytes) -> bool:
        if self._state is ParserState.IN_ENTRY_HEADER:
            return self._consume_header(line, text)
        if self._state is ParserState.IN_HUNK:
            return self._consume_hunk_line(line, text)
        return self._consume_binary_patch(line, text)

    # ---- entry boundaries ----

    def _open_entry(self, line: bytes, text: bytes) -> bool:
        git_header = _GIT_HEADER_RE.match(text)
        combined = None if git_header else _COMBINED_HEADER_RE.match(text)
        if git_header is None and combined is None:
            return False

        entry = DiffEntry(header_lines=[line])
        self._entry = entry
        self._hunk = None
        self._old_left = self._new_left = None
        self._saw_minus = self._saw_plus = False
        self._state = ParserState.IN_ENTRY_HEADER

        if git_header is not None:
            paths = split_git_header(git_header.group(1))
            if paths is None:
                self._mark_ambiguous("unparseable diff --git header")
            else:
                entry.old_path = decode_path(paths[0])
                entry.new_path = decode_path(paths[1])
        else:
            raw = unquote_path(combined.group(1))
            if not raw:
                self._mark_ambiguous("unparseable combined diff header")
            else:
                entry.old_path = entry.new_path = decode_path(raw)
        return True

    def _close_entry(self) -> DiffEntry:
        entry = self._entry
        assert entry is not None
        if self._saw_minus and not self._saw_plus:
            self._mark_ambiguous("'---' line without '+++'")
        elif self._saw_plus and not entry.hunks:
            self._mark_ambiguous("file headers without a hunk")
        if entry.old_path is None and entry.new_path is None:
            self._mark_ambiguous("no path could be derived")

        self._entry = None
        self._hunk = None
        self._old_left = self._new_left = None
        self._saw_minus = self._saw_plus = False
        self._state = ParserState.AWAITING_ENTRY
        return entry

    def _mark_ambiguous(self, reason: str) -> None:
        assert self._entry is not None
        if not self._entry.ambiguous:
            logger.debug(
                "Ambiguous diff entry %r: %s; passing it through",
                self._entry.effective_path,
                reason,
            )
        self._entry.ambiguous = True

    # ---- IN_ENTRY_HEADER ----

    def _consume_header(self, line: bytes, text: bytes) -> bool:
        entry = self._entry
        assert entry is not None

        if text.startswith(b"--- ") and not self._saw_minus:
            self._saw_minus = True
            ok, path = parse_side_path(text[4:], b"a/")
            if ok:
                entry.old_path = decode_path(path) if path is not None else None
            entry.header_lines.append(line)
            return True
        if text.startswith(b"+++ ") and self._saw_minus and not self._saw_plus:
            self._saw_plus = True
            ok, path = parse_side_path(text[4:], b"b/")
            if ok:
                entry.new_path = decode_path(path) if path is not None else None
            entry.header_lines.append(line)
            return True
        if text.startswith(b"@@"):
            if not self._saw_plus:
                self._mark_ambiguous("hunk without '---'/'+++' lines")
            self._start_hunk(line, text)
            return True
        if self._saw_minus:
            return False

        if _BINARY_RE.match(text):
            entry.is_binary = True
        elif _BINARY_PATCH_RE.match(text):
            entry.is_binary = True
            self._state = ParserState.IN_BINARY_PATCH
        elif m := _RENAME_FROM_RE.match(text):
            entry.is_rename = True
            self._set_path("old_path", m.group(1))
        elif m := _RENAME_TO_RE.match(text):
            entry.is_rename = True
            self._set_path("new_path", m.group(1))
        elif m := _COPY_FROM_RE.match(text):
            entry.is_copy = True
            self._set_path("old_path", m.group(1))
        elif m := _COPY_TO_RE.match(text):
            entry.is_copy = True
            self._set_path("new_path", m.group(1))
        elif m := _NEW_FILE_RE.match(text):
            entry.old_path = None
            entry.is_submodule = entry.is_submodule or m.group(1) == _SUBMODULE_MODE
        elif _DELETED_FILE_RE.match(text):
            entry.new_path = None
        elif m := _INDEX_RE.match(text):
            entry.is_submodule = entry.is_submodule or m.group(1) == _SUBMODULE_MODE
        elif not _OTHER_HEADER_RE.match(text):
            return False

        entry.header_lines.append(line)
        return True

    def _set_path(self, attr: str, raw: bytes) -> None:
        path = parse_plain_path(raw)
        if path is None:
            self._mark_ambiguous(f"malformed path in header: {raw!r}")
            return
        setattr(self._entry, attr, decode_path(path))

    # ---- IN_HUNK ----

    def _start_hunk(self, line: bytes, text: bytes) -> None:
        assert self._entry is not None
        self._hunk = Hunk(header=line)
        self._entry.hunks.append(self._hunk)
        self._state = ParserState.IN_HUNK

        m = _HUNK_HEADER_RE.match(text)
        if m is None:
            if not _COMBINED_HUNK_RE.match(text):
                self._mark_ambiguous("unparseable hunk header")
            # Combined or malformed header: no counts, accept by prefix only.
            self._old_left = self._new_left = None
            return
        self._old_left = int(m.group(2)) if m.group(2) is not None else 1
        self._new_left = int(m.group(4)) if m.group(4) is not None else 1

    def _append(self, line_type: LineType, line: bytes) -> None:
        assert self._hunk is not None
        self._hunk.lines.append(HunkLine(line_type=line_type, raw=line))

    def _consume_hunk_line(self, line: bytes, text: bytes) -> bool:
        first = text[:1]

        if self._old_left is None or self._new_left is None:
            if text.startswith(b"@@"):
                self._start_hunk(line, text)
                return True
            line_type = _LINE_TYPES.get(first)
            if line_type is None:
                return False
            self._append(line_type, line)
            return True

        if self._old_left == 0 and self._new_left == 0:
            if first == b"\\":
                self._append(LineType.MARKER, line)
                return True
            if text.startswith(b"@@"):
                self._start_hunk(line, text)
                return True
            # 'format-patch' signature separator
            if text == b"-- ":
                return False
            if first in (b" ", b"+", b"-"):
                self._mark_ambiguous("hunk longer than its header announced")
                self._append(_LINE_TYPES[first], line)
                return True
            return False

        if first == b"\\":
            self._append(LineType.MARKER, line)
            return True
        # An empty line inside a hunk is a context line whose leading space
        # was stripped by an editor or mail client.
        if first in (b" ", b"") and self._old_left > 0 and self._new_left > 0:
            self._old_left -= 1
            self._new_left -= 1
            self._append(LineType.CONTEXT, line)
            return True
        if first == b"-" and self._old_left > 0:
            self._old_left -= 1
            self._append(LineType.REMOVED, line)
            return True
        if first == b"+" and self._new_left > 0:
            self._new_left -= 1
            self._append(LineType.ADDED, line)
            return True

        self._mark_ambiguous("hunk shorter than its header announced")
        return False

    # ---- IN_BINARY_PATCH ----

    def _consume_binary_patch(self, line: bytes, text: bytes) -> bool:
        assert self._entry is not None
        if not text or _BINARY_CHUNK_RE.match(text) or _BASE85_RE.match(text):
            self._entry.binary_patch.append(line)
            return True
        return False
