"""diff-gitignore-filter — stream-filter for Git diffs that respects .gitignore."""

__version__ = "1.0.1"
