"""Ignore rules — .gitignore hierarchy and VCS metadata patterns."""

from diff_gitignore_filter.ignore.matcher import (
    IgnoreMatcher,
    IgnoreRule,
    IgnoreRuleSet,
    evaluate_rule_sets,
    normalize_path,
)
from diff_gitignore_filter.ignore.vcs import first_vcs_match, vcs_pattern_matches

__all__ = [
    "IgnoreMatcher",
    "IgnoreRule",
    "IgnoreRuleSet",
    "evaluate_rule_sets",
    "first_vcs_match",
    "normalize_path",
    "vcs_pattern_matches",
]
