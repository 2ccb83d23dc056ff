from diff_gitignore_filter.cli import app

app(prog_name="diff-gitignore-filter")
