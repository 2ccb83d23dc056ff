"""diff-gitignore-filter CLI — filter a Git diff stream by .gitignore rules."""

from __future__ import annotations

import io
import logging
import os
import sys
from contextlib import ExitStack, nullcontext
from pathlib import Path
from typing import BinaryIO, ContextManager, List, Optional

import typer
from rich.console import Console

from diff_gitignore_filter import __version__
from diff_gitignore_filter.errors import EXIT_OK, EXIT_ROOT, ConfigError, RootNotFoundError, StreamError

app = typer.Typer(
    name="diff-gitignore-filter",
    help="Drop diff entries for files ignored by .gitignore or VCS metadata.",
    add_completion=False,
    no_args_is_help=False,
)

console = Console(stderr=True)
logger = logging.getLogger("diff_gitignore_filter.cli")


def _open_input(path: Optional[Path]) -> ContextManager[BinaryIO]:
    if path is None:
        return nullcontext(sys.stdin.buffer)
    try:
        return open(path, "rb")
    except OSError as exc:
        raise StreamError(f"Cannot open input {path}: {exc}") from exc


def _open_output(path: Optional[Path]) -> ContextManager[BinaryIO]:
    if path is None:
        return nullcontext(sys.stdout.buffer)
    try:
        return open(path, "wb")
    except OSError as exc:
        raise StreamError(f"Cannot open output {path}: {exc}") from exc


def _silence_stdout() -> None:
    """Point fd 1 at /dev/null so the interpreter's final flush cannot fail."""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
    except OSError:
        return
    try:
        os.dup2(devnull, sys.stdout.fileno())
    except (io.UnsupportedOperation, ValueError, OSError):
        pass  # no real file descriptor (e.g. captured output)
    finally:
        os.close(devnull)


def _filter_streams(stream_filter, downstream: Optional[str], source: BinaryIO, sink: BinaryIO):
    """Run the filter, directly or through *downstream*. Returns (stats, exit status)."""
    from diff_gitignore_filter.pipeline.filter import FilterStats
    from diff_gitignore_filter.pipeline.relay import exit_status, spawn

    if downstream is None:
        return stream_filter.run(source, sink), EXIT_OK

    relay = spawn(downstream)
    results: List[FilterStats] = []
    returncode = relay.run(lambda stdin: results.append(stream_filter.run(source, stdin)), sink)
    stats = results[0] if results else FilterStats()
    return stats, exit_status(returncode)


# ── filter ────────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"diff-gitignore-filter {__version__}")
        raise typer.Exit()


@app.command()
def main(
    input_file: Optional[Path] = typer.Argument(
        None, metavar="INPUT", help="Diff file to read (default: stdin)",
    ),
    downstream: Optional[str] = typer.Option(
        None, "--downstream", "-d",
        help="Shell command that receives the filtered diff (\"\" disables a configured one)",
    ),
    vcs: bool = typer.Option(False, "--vcs", help="Drop VCS metadata entries"),
    no_vcs: bool = typer.Option(False, "--no-vcs", help="Keep VCS metadata entries"),
    vcs_pattern: Optional[str] = typer.Option(
        None, "--vcs-pattern", help="Comma-separated VCS path prefixes, e.g. '.git/,.hg/'",
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file (default: stdout)"),
    directory: Optional[Path] = typer.Option(
        None, "--directory", "-C", help="Resolve the repository and config from this directory",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output with a run summary"),
    debug: bool = typer.Option(False, "--debug", help="Debug output with per-entry decisions"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """Filter a unified Git diff, dropping entries for ignored files."""
    from diff_gitignore_filter.config import CliOverrides, resolve_config
    from diff_gitignore_filter.git.adapter import SystemGitConfigReader
    from diff_gitignore_filter.git.root import resolve_repo_root
    from diff_gitignore_filter.ignore.matcher import IgnoreMatcher
    from diff_gitignore_filter.logs import configure_logging
    from diff_gitignore_filter.output import terminal
    from diff_gitignore_filter.pipeline.filter import DiffStreamFilter

    configure_logging(verbose=verbose, debug=debug, console=console)

    start_dir = Path(os.path.abspath(directory)) if directory else Path.cwd()
    if not start_dir.is_dir():
        console.print(f"[bold red]Repository error:[/bold red] Not a directory: {start_dir}")
        raise typer.Exit(code=EXIT_ROOT)

    # --- Resolve config ---
    overrides = CliOverrides(
        downstream=downstream,
        vcs=vcs,
        no_vcs=no_vcs,
        vcs_pattern=vcs_pattern,
    )
    try:
        cfg = resolve_config(overrides, SystemGitConfigReader(start_dir))
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=exc.exit_code) from exc

    # --- Resolve repository ---
    try:
        repo = resolve_repo_root(start_dir)
    except RootNotFoundError as exc:
        console.print(f"[bold red]Repository error:[/bold red] {exc}")
        raise typer.Exit(code=exc.exit_code) from exc

    if verbose or debug:
        console.print(f"[dim]Repo root: {repo.work_tree}[/dim]")
        console.print(f"[dim]Downstream: {cfg.downstream_command or '-'}[/dim]")
        vcs_state = ", ".join(cfg.vcs.patterns) if cfg.vcs.enabled else "disabled"
        console.print(f"[dim]VCS patterns: {vcs_state}[/dim]")

    stream_filter = DiffStreamFilter(IgnoreMatcher.for_repo(repo), cfg.vcs, record_dropped=verbose)

    # --- Filter ---
    try:
        with ExitStack() as stack:
            source = stack.enter_context(_open_input(input_file))
            sink = stack.enter_context(_open_output(output))
            stats, status = _filter_streams(stream_filter, cfg.downstream_command, source, sink)
    except StreamError as exc:
        console.print(f"[bold red]I/O error:[/bold red] {exc}")
        raise typer.Exit(code=exc.exit_code) from exc
    except BrokenPipeError:
        logger.debug("Output closed by the reader; stopping")
        if output is None:
            _silence_stdout()
        raise typer.Exit(code=EXIT_OK)

    if verbose:
        terminal.render(stats, console)

    if status != EXIT_OK:
        logger.warning("Downstream command %r exited with status %d", cfg.downstream_command, status)
        raise typer.Exit(code=status)
