"""Shared test fixtures — sample diffs, fake config readers, temp repos."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from diff_gitignore_filter.errors import GitError


def diff_bytes(text: str) -> bytes:
    """Dedent *text* and encode it the way git writes diffs."""
    return textwrap.dedent(text).encode("utf-8")


class DictConfigReader:
    """GitConfigReader backed by a dict; records which keys were queried."""

    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self.values = values or {}
        self.queried: List[str] = []

    def get(self, key: str) -> Optional[str]:
        self.queried.append(key)
        return self.values.get(key)


class FailingConfigReader:
    """GitConfigReader whose git invocation always fails."""

    def get(self, key: str) -> Optional[str]:
        raise GitError("git is not installed or not on PATH")


@pytest.fixture(autouse=True)
def isolated_git_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's global and system git config out of every test."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A working tree with a bare-bones ``.git`` directory (no git needed)."""
    root = tmp_path / "repo"
    (root / ".git" / "info").mkdir(parents=True)
    return root


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a real git repository for tests that call git."""
    root = tmp_path / "gitrepo"
    subprocess.run(["git", "init", str(root)], capture_output=True, check=True)
    return root


@pytest.fixture
def sample_diff_modified() -> bytes:
    """A plain in-place modification."""
    return diff_bytes("""\
        diff --git a/src/app.py b/src/app.py
        index 1234567..abcdef0 100644
        --- a/src/app.py
        +++ b/src/app.py
        @@ -1,3 +1,3 @@
         import os
        -DEBUG = True
        +DEBUG = False
         print(os.getcwd())
    """)


@pytest.fixture
def sample_diff_new_file() -> bytes:
    return diff_bytes("""\
        diff --git a/hello.py b/hello.py
        new file mode 100644
        index 0000000..e69de29
        --- /dev/null
        +++ b/hello.py
        @@ -0,0 +1,2 @@
        +def greet(name):
        +    return f"Hello, {name}!"
    """)


@pytest.fixture
def sample_diff_deleted() -> bytes:
    return diff_bytes("""\
        diff --git a/debug.log b/debug.log
        deleted file mode 100644
        index e69de29..0000000
        --- a/debug.log
        +++ /dev/null
        @@ -1 +0,0 @@
        -started
    """)


@pytest.fixture
def sample_diff_rename() -> bytes:
    """A rename with a content change."""
    return diff_bytes("""\
        diff --git a/old_name.py b/new_name.py
        similarity index 97%
        rename from old_name.py
        rename to new_name.py
        index abc1234..def5678 100644
        --- a/old_name.py
        +++ b/new_name.py
        @@ -1 +1,2 @@
         x = 1
        +# New line added after rename
    """)


@pytest.fixture
def sample_diff_pure_rename() -> bytes:
    return diff_bytes("""\
        diff --git a/build/out.txt b/docs/out.txt
        similarity index 100%
        rename from build/out.txt
        rename to docs/out.txt
    """)


@pytest.fixture
def sample_diff_binary() -> bytes:
    """A binary file without payload."""
    return diff_bytes("""\
        diff --git a/image.png b/image.png
        new file mode 100644
        index 0000000..abc1234
        Binary files /dev/null and b/image.png differ
    """)


@pytest.fixture
def sample_diff_binary_patch() -> bytes:
    """A ``git diff --binary`` payload."""
    return diff_bytes("""\
        diff --git a/assets/logo.png b/assets/logo.png
        new file mode 100644
        index 0000000000000000000000000000000000000000..3c4b8b1b0b5e2b0f3d2a1c4f2b0a1e7d6c5b4a39
        GIT binary patch
        literal 12
        TcmZ?wbhEHbRA6vmaB~0v1Ofp#

        literal 0
        HcmV?d00001

    """)


@pytest.fixture
def sample_diff_mode_only() -> bytes:
    """A diff with only a file mode change."""
    return diff_bytes("""\
        diff --git a/script.sh b/script.sh
        old mode 100644
        new mode 100755
    """)


@pytest.fixture
def sample_diff_submodule() -> bytes:
    """A submodule pointer change."""
    return diff_bytes("""\
        diff --git a/vendor/lib b/vendor/lib
        index abc1234..def5678 160000
        --- a/vendor/lib
        +++ b/vendor/lib
        @@ -1 +1 @@
        -Subproject commit abc1234567890abcdef1234567890abcdef123456
        +Subproject commit def4567890abcdef1234567890abcdef123456ab
    """)


@pytest.fixture
def sample_diff_no_newline() -> bytes:
    """A diff with 'No newline at end of file' marker."""
    return diff_bytes("""\
        diff --git a/data.txt b/data.txt
        index 1111111..2222222 100644
        --- a/data.txt
        +++ b/data.txt
        @@ -1 +1 @@
        -old line
        \\ No newline at end of file
        +final line without newline
        \\ No newline at end of file
    """)


@pytest.fixture
def sample_log_patch() -> bytes:
    """``git log -p`` output: commit preambles around an entry."""
    return diff_bytes("""\
        commit 0123456789abcdef0123456789abcdef01234567
        Author: Test <test@example.com>
        Date:   Mon Jan 1 00:00:00 2024 +0000

            Update notes

        diff --git a/notes.txt b/notes.txt
        index 1111111..2222222 100644
        --- a/notes.txt
        +++ b/notes.txt
        @@ -1 +1 @@
        -draft
        +final
        commit 89abcdef0123456789abcdef0123456789abcdef
    """)
