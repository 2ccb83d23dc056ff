"""Rich run summary — printed on stderr so the filtered diff stays clean."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table

from diff_gitignore_filter.pipeline.filter import FilterStats

_REASON_STYLE = {
    "gitignore": "yellow",
    "vcs": "magenta",
}


def render(stats: FilterStats, console: Optional[Console] = None) -> None:
    """Print the recorded dropped entries, if any, and a summary of the run."""
    console = console or Console(stderr=True)

    if stats.dropped:
        console.print()
        table = Table(
            title="Dropped entries",
            title_style="bold",
            border_style="dim",
        )
        table.add_column("Path", style="cyan")
        table.add_column("Reason", justify="center")
        for path, reason in stats.dropped:
            style = _REASON_STYLE.get(reason, "")
            table.add_row(path, f"[{style}]{reason}[/{style}]" if style else reason)
        console.print(table)

    _print_summary(console, stats)


def _print_summary(console: Console, stats: FilterStats) -> None:
    console.print()
    console.print(f"[dim]Entries:[/dim]       {stats.entries}")
    console.print(f"[dim]Kept:[/dim]          {stats.kept}")
    console.print(f"[dim]Gitignored:[/dim]    {stats.dropped_gitignore}")
    console.print(f"[dim]VCS metadata:[/dim]  {stats.dropped_vcs}")
    console.print(f"[dim]Ambiguous:[/dim]     {stats.ambiguous}")
    console.print(f"[dim]Passthrough:[/dim]   {stats.passthrough_lines}")
    console.print(f"[dim]Bytes written:[/dim] {stats.bytes_written}")
    console.print(f"[dim]Duration:[/dim]      {stats.duration_ms:.0f}ms")
