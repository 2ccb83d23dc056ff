"""Tests for diff header path extraction and C-style unquoting."""

import pytest

from diff_gitignore_filter.git.paths import (
    decode_path,
    parse_quoted,
    parse_side_path,
    split_git_header,
    unquote_path,
)


class TestSplitGitHeader:
    def test_plain_paths(self):
        assert split_git_header(b"a/src/app.py b/src/app.py") == (b"src/app.py", b"src/app.py")

    def test_trailing_newline_ignored(self):
        assert split_git_header(b"a/f.txt b/f.txt\r\n") == (b"f.txt", b"f.txt")

    def test_rename_uses_b_boundary(self):
        assert split_git_header(b"a/old.txt b/new.txt") == (b"old.txt", b"new.txt")

    def test_symmetric_split_wins_for_space_b_slash(self):
        # Path "dir b/x" on both sides: the identical halves decide the split.
        assert split_git_header(b"a/dir b/x b/dir b/x") == (b"dir b/x", b"dir b/x")

    def test_last_boundary_tie_break(self):
        assert split_git_header(b"a/x b/y b/z") == (b"x b/y", b"z")

    def test_both_quoted_octal(self):
        rest = rb'"a/t\303\244st.txt" "b/t\303\244st.txt"'
        assert split_git_header(rest) == (b"t\xc3\xa4st.txt", b"t\xc3\xa4st.txt")

    def test_quoted_escapes(self):
        rest = rb'"a/tab\there" "b/quote\"d"'
        assert split_git_header(rest) == (b"tab\there", b'quote"d')

    def test_only_second_quoted(self):
        assert split_git_header(rb'a/plain "b/quo\"te"') == (b"plain", b'quo"te')

    def test_only_first_quoted(self):
        assert split_git_header(rb'"a/new\nline" b/plain') == (b"new\nline", b"plain")

    @pytest.mark.parametrize("rest", [b"nonsense", b"a/foo", b"x/foo y/foo", b'"a/unterminated b/x'])
    def test_unsplittable(self, rest):
        assert split_git_header(rest) is None


class TestQuoting:
    def test_parse_quoted_returns_end(self):
        assert parse_quoted(b'"abc" rest') == (b"abc", 5)

    @pytest.mark.parametrize("data", [b'"abc', b'"bad\\q"', b'"\\12"', b"noquote"])
    def test_parse_quoted_malformed(self, data):
        assert parse_quoted(data) is None

    def test_unquote_plain_token_unchanged(self):
        assert unquote_path(b"plain/path") == b"plain/path"

    def test_unquote_rejects_trailing_garbage(self):
        assert unquote_path(b'"a" b') is None

    def test_all_c_escapes(self):
        assert unquote_path(rb'"\a\b\t\n\v\f\r\\\""') == b'\x07\x08\t\n\x0b\x0c\r\\"'

    def test_decode_path_keeps_invalid_bytes(self):
        decoded = decode_path(b"caf\xe9.txt")
        assert decoded.encode("utf-8", "surrogateescape") == b"caf\xe9.txt"


class TestSidePaths:
    def test_prefix_stripped(self):
        assert parse_side_path(b"a/src/app.py", b"a/") == (True, b"src/app.py")

    def test_dev_null(self):
        assert parse_side_path(b"/dev/null\n", b"b/") == (True, None)

    def test_trailing_tab_stripped(self):
        assert parse_side_path(b"b/name with space.txt\t\n", b"b/") == (True, b"name with space.txt")

    def test_quoted(self):
        assert parse_side_path(rb'"b/\303\244.txt"', b"b/") == (True, b"\xc3\xa4.txt")

    def test_wrong_prefix(self):
        assert parse_side_path(b"c/foo", b"a/") == (False, None)
