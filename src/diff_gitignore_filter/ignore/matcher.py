"""Hierarchical ``.gitignore`` evaluation.

Rules are compiled with pathspec's ``GitWildMatchPattern`` and grouped into
``IgnoreRuleSet``s, one per ignore file, each bound to the directory it
applies to. Precedence follows git:

  - within one rule set the last matching pattern wins;
  - rule sets are evaluated from lowest to highest precedence
    (``info/exclude``, then ``.gitignore`` files from the root down), so a
    deeper file overrides a shallower one;
  - a negated pattern (``!pattern``) re-includes a path;
  - a file cannot be re-included when one of its parent directories is
    excluded.

``evaluate_rule_sets`` is a pure function over a list of rule sets and is
independent of the filesystem; ``IgnoreMatcher`` only decides which files
to load and caches them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pathspec.patterns import GitWildMatchPattern
from pathspec.patterns.gitwildmatch import GitWildMatchPatternError

from diff_gitignore_filter.git.root import RepoRoot

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".gitignore"

# Named group pathspec puts around the slash that ends a matched directory.
_DIR_MARK = "ps_d"


def normalize_path(path: str) -> Optional[str]:
    """Return *path* as a clean root-relative path, or None if it leaves the root."""
    if not path or path.startswith("/"):
        return None
    parts = [p for p in path.split("/") if p not in ("", ".")]
    if not parts or ".." in parts:
        return None
    return "/".join(parts)


@dataclass(frozen=True)
class IgnoreRule:
    """One compiled ignore pattern and where it came from."""

    pattern: GitWildMatchPattern
    source: str  # e.g. 'build/.gitignore:3'

    @property
    def negated(self) -> bool:
        return not self.pattern.include

    def matches(self, path: str, is_dir: bool = False) -> bool:
        """True when the pattern matches *path* itself, not one of its parent directories.

        A directory is tried with a trailing slash only for directory-only
        patterns, so ``build/**`` matches the contents of ``build`` but not
        ``build`` itself.
        """
        if self._matches_exactly(path):
            return True
        return is_dir and _DIR_MARK in self.pattern.regex.groupindex and self._matches_exactly(path + "/")

    def _matches_exactly(self, candidate: str) -> bool:
        match = self.pattern.regex.match(candidate)
        if match is None:
            return False
        if match.groupdict().get(_DIR_MARK) is None:
            return True
        return match.start(_DIR_MARK) == len(candidate) - 1


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Ordered rules of one ignore file, bound to a root-relative directory."""

    base: str  # '' for the repository root
    rules: Tuple[IgnoreRule, ...]

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        base: str = "",
        source: str = "<memory>",
    ) -> "IgnoreRuleSet":
        rules: List[IgnoreRule] = []
        for lineno, line in enumerate(lines, start=1):
            try:
                pattern = GitWildMatchPattern(line)
            except GitWildMatchPatternError as exc:
                logger.warning("Skipping invalid ignore pattern at %s:%d: %s", source, lineno, exc)
                continue
            if pattern.include is None:
                continue  # blank line or comment
            rules.append(IgnoreRule(pattern=pattern, source=f"{source}:{lineno}"))
        return cls(base=base, rules=tuple(rules))

    @classmethod
    def from_file(cls, path: Path, base: str = "") -> Optional["IgnoreRuleSet"]:
        """Load an ignore file; None if it does not exist or cannot be read."""
        if not path.is_file():
            return None
        try:
            content = path.read_bytes()
        except OSError as exc:
            logger.warning("Cannot read ignore file %s: %s", path, exc)
            return None
        lines = content.decode("utf-8", "surrogateescape").splitlines()
        rule_set = cls.from_lines(lines, base=base, source=str(path))
        logger.debug("Loaded %d ignore rules from %s", len(rule_set.rules), path)
        return rule_set

    def applies_to(self, path: str) -> bool:
        return not self.base or path.startswith(self.base + "/")

    def match(self, path: str, is_dir: bool = False) -> Optional[bool]:
        """Verdict of the last matching rule: True ignored, False re-included, None no match."""
        rel = path[len(self.base) + 1:] if self.base else path
        for rule in reversed(self.rules):
            if rule.matches(rel, is_dir):
                return not rule.negated
        return None


def evaluate_rule_sets(
    rule_sets: Sequence[IgnoreRuleSet],
    path: str,
    is_dir: bool = False,
) -> Optional[bool]:
    """Evaluate *path* against rule sets ordered lowest to highest precedence.

    Only *path* itself is tested; exclusion through a parent directory is
    left to the caller (see ``IgnoreMatcher.is_ignored``).
    """
    for rule_set in reversed(rule_sets):
        if not rule_set.applies_to(path):
            continue
        verdict = rule_set.match(path, is_dir)
        if verdict is not None:
            return verdict
    return None


class IgnoreMatcher:
    """Answer "is this root-relative path ignored?" for one working tree.

    ``.gitignore`` files are loaded on first use per directory and cached.
    """

    def __init__(self, root: Path, base_rule_sets: Sequence[IgnoreRuleSet] = ()) -> None:
        self.root = root
        self._base_rule_sets = tuple(base_rule_sets)
        self._cache: Dict[str, Optional[IgnoreRuleSet]] = {}

    @classmethod
    def for_repo(cls, repo: RepoRoot) -> "IgnoreMatcher":
        """Build a matcher for *repo*, including the repository's ``info/exclude``."""
        base: List[IgnoreRuleSet] = []
        exclude = IgnoreRuleSet.from_file(repo.common_dir / "info" / "exclude")
        if exclude is not None:
            base.append(exclude)
        return cls(repo.work_tree, base)

    def _rule_set_for(self, directory: str) -> Optional[IgnoreRuleSet]:
        if directory not in self._cache:
            path = self.root / directory / IGNORE_FILENAME if directory else self.root / IGNORE_FILENAME
            self._cache[directory] = IgnoreRuleSet.from_file(path, base=directory)
        return self._cache[directory]

    def _extend(self, rule_sets: List[IgnoreRuleSet], directory: str) -> None:
        rule_set = self._rule_set_for(directory)
        if rule_set is not None:
            rule_sets.append(rule_set)

    def is_ignored(self, path: str, is_dir: bool = False) -> bool:
        normalized = normalize_path(path)
        if normalized is None:
            return False

        parts = normalized.split("/")
        rule_sets = list(self._base_rule_sets)
        self._extend(rule_sets, "")
        for depth in range(1, len(parts)):
            ancestor = "/".join(parts[:depth])
            if evaluate_rule_sets(rule_sets, ancestor, is_dir=True):
                return True
            self._extend(rule_sets, ancestor)
        return bool(evaluate_rule_sets(rule_sets, normalized, is_dir=is_dir))
