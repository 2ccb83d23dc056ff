"""Path extraction from ``diff --git`` headers.

Git wraps a path in double quotes and backslash-escapes it when it contains
control characters, quotes, backslashes or (with the default
``core.quotePath``) non-ASCII bytes. Unquoted header paths are separated by a
plain space, so a path containing ``" b/"`` makes the header ambiguous.
The splitter resolves that in two steps:

  1. If both halves are identical after their ``a/`` and ``b/`` prefixes,
     that split wins (the common, non-rename case).
  2. Otherwise the *last* ``" b/"`` boundary is used.

Rename and ``---``/``+++`` lines refine the paths later, so the tie-break
only decides entries that carry nothing but the header line.
"""

from __future__ import annotations

from typing import Optional, Tuple

_ESCAPES = {
    ord("a"): 0x07,
    ord("b"): 0x08,
    ord("t"): 0x09,
    ord("n"): 0x0A,
    ord("v"): 0x0B,
    ord("f"): 0x0C,
    ord("r"): 0x0D,
    ord('"'): 0x22,
    ord("\\"): 0x5C,
}

_OCTAL = frozenset(b"01234567")


def decode_path(raw: bytes) -> str:
    """Decode raw path bytes to a str, keeping undecodable bytes reversible."""
    return raw.decode("utf-8", "surrogateescape")


def parse_quoted(data: bytes, start: int = 0) -> Optional[Tuple[bytes, int]]:
    """Parse a C-quoted string beginning at ``data[start]``.

    Returns ``(unescaped, end)`` where *end* is the index just past the
    closing quote, or None when the quoting is malformed.
    """
    if start >= len(data) or data[start] != ord('"'):
        return None
    out = bytearray()
    i = start + 1
    while i < len(data):
        ch = data[i]
        if ch == ord('"'):
            return bytes(out), i + 1
        if ch != ord("\\"):
            out.append(ch)
            i += 1
            continue
        i += 1
        if i >= len(data):
            return None
        esc = data[i]
        if esc in _ESCAPES:
            out.append(_ESCAPES[esc])
            i += 1
        elif esc in _OCTAL:
            digits = data[i:i + 3]
            if len(digits) != 3 or not all(d in _OCTAL for d in digits):
                return None
            out.append(int(digits, 8) & 0xFF)
            i += 3
        else:
            return None
    return None


def unquote_path(token: bytes) -> Optional[bytes]:
    """Unquote a path token if it is quoted; return it unchanged otherwise."""
    if not token.startswith(b'"'):
        return token
    parsed = parse_quoted(token)
    if parsed is None or parsed[1] != len(token):
        return None
    return parsed[0]


def _strip_prefix(path: bytes, prefix: bytes) -> Optional[bytes]:
    if not path.startswith(prefix) or len(path) == len(prefix):
        return None
    return path[len(prefix):]


def split_git_header(rest: bytes) -> Optional[Tuple[bytes, bytes]]:
    """Split the text after ``diff --git `` into ``(old, new)`` raw paths.

    The ``a/`` and ``b/`` prefixes are removed and quoted tokens unescaped.
    Returns None if the header cannot be split.
    """
    rest = rest.rstrip(b"\r\n")

    if rest.startswith(b'"'):
        parsed = parse_quoted(rest)
        if parsed is None:
            return None
        old_raw, end = parsed
        if rest[end:end + 1] != b" ":
            return None
        new_raw = unquote_path(rest[end + 1:])
        if new_raw is None:
            return None
        old = _strip_prefix(old_raw, b"a/")
        new = _strip_prefix(new_raw, b"b/")
        return (old, new) if old is not None and new is not None else None

    if rest.endswith(b'"'):
        idx = rest.rfind(b' "b/')
        while idx != -1:
            new_raw = unquote_path(rest[idx + 1:])
            if new_raw is not None:
                old = _strip_prefix(rest[:idx], b"a/")
                new = _strip_prefix(new_raw, b"b/")
                if old is not None and new is not None:
                    return old, new
            idx = rest.rfind(b' "b/', 0, idx)

    # Both unquoted: symmetric split first, then the last " b/" boundary.
    if len(rest) % 2 == 1:
        mid = len(rest) // 2
        left, right = rest[:mid], rest[mid + 1:]
        if rest[mid:mid + 1] == b" " and left.startswith(b"a/") and right.startswith(b"b/"):
            if left[2:] == right[2:] and left[2:]:
                return left[2:], right[2:]

    idx = rest.rfind(b" b/")
    if idx == -1:
        return None
    old = _strip_prefix(rest[:idx], b"a/")
    new = _strip_prefix(rest[idx + 1:], b"b/")
    if old is None or new is None:
        return None
    return old, new


def parse_side_path(value: bytes, prefix: bytes) -> Tuple[bool, Optional[bytes]]:
    """Parse the path of a ``---``/``+++`` line (without the marker).

    Returns ``(ok, path)``: *path* is None for ``/dev/null``; *ok* is False
    when the value is not a recognisable path.
    """
    value = value.rstrip(b"\r\n")
    if value.endswith(b"\t"):
        value = value[:-1]
    if value == b"/dev/null":
        return True, None
    raw = unquote_path(value)
    if raw is None:
        return False, None
    stripped = _strip_prefix(raw, prefix)
    if stripped is None:
        return False, None
    return True, stripped


def parse_plain_path(value: bytes) -> Optional[bytes]:
    """Parse an unprefixed path from a ``rename from``/``copy to`` style line."""
    value = value.rstrip(b"\r\n")
    if not value:
        return None
    return unquote_path(value)
