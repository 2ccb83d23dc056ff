"""Git configuration keys and built-in defaults."""

DOWNSTREAM_KEY = "gitignore-diff.downstream-filter"
VCS_ENABLED_KEY = "diff-gitignore-filter.vcs-ignore.enabled"
VCS_PATTERNS_KEY = "diff-gitignore-filter.vcs-ignore.patterns"

DEFAULT_VCS_PATTERNS = (".git/", ".svn/", "_svn/", ".hg/", "CVS/", "CVSROOT/", ".bzr/")

TRUE_VALUES = frozenset({"true", "yes", "on", "1"})
FALSE_VALUES = frozenset({"false", "no", "off", "0"})
