"""Tests for repository root resolution."""

import pytest

from diff_gitignore_filter.errors import RootNotFoundError
from diff_gitignore_filter.git.root import resolve_repo_root


class TestResolveRepoRoot:
    def test_git_directory(self, repo):
        root = resolve_repo_root(repo)
        assert root.work_tree == repo
        assert root.git_dir == repo / ".git"
        assert root.common_dir == repo / ".git"

    def test_walks_up_from_subdirectory(self, repo):
        nested = repo / "src" / "pkg"
        nested.mkdir(parents=True)
        assert resolve_repo_root(nested).work_tree == repo

    def test_relative_gitfile_with_commondir(self, tmp_path):
        main_git = tmp_path / "main" / ".git"
        wt_git = main_git / "worktrees" / "feature"
        wt_git.mkdir(parents=True)
        (wt_git / "commondir").write_text("../..\n")
        worktree = tmp_path / "feature"
        worktree.mkdir()
        (worktree / ".git").write_text("gitdir: ../main/.git/worktrees/feature\n")

        root = resolve_repo_root(worktree / ".")
        assert root.work_tree == worktree
        assert root.git_dir == wt_git
        assert root.common_dir == main_git

    def test_absolute_gitfile(self, tmp_path):
        modules = tmp_path / "super" / ".git" / "modules" / "lib"
        modules.mkdir(parents=True)
        checkout = tmp_path / "super" / "lib"
        checkout.mkdir()
        (checkout / ".git").write_text(f"gitdir: {modules}\n")

        root = resolve_repo_root(checkout)
        assert root.work_tree == checkout
        assert root.git_dir == modules
        assert root.common_dir == modules

    @pytest.mark.parametrize("content", ["nonsense\n", "gitdir:   \n", ""])
    def test_malformed_gitfile(self, tmp_path, content):
        (tmp_path / ".git").write_text(content)
        with pytest.raises(RootNotFoundError, match="Invalid gitfile"):
            resolve_repo_root(tmp_path)

    def test_no_repository(self, tmp_path):
        if any((p / ".git").exists() for p in (tmp_path, *tmp_path.parents)):
            pytest.skip("temporary directory lives inside a git checkout")
        with pytest.raises(RootNotFoundError, match="Not in a git repository"):
            resolve_repo_root(tmp_path)
