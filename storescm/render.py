"""
Rendering functions for storescm output.

This module handles all pretty-printing and table formatting.
Core functions return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Optional

from .domain import BuildHistory, DISPLAY_NAME
from .services import PollingResult

console = Console()


def render_table(headers: List[str], rows: List[List[str]], title: Optional[str] = None) -> None:
    """
    Render a generic table with the given headers and rows.

    Args:
        headers: List of column headers
        rows: List of rows, where each row is a list of values
        title: Optional table title
    """
    if not rows:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    for header in headers:
        table.add_column(header)

    for row in rows:
        table.add_row(*[str(val) for val in row])

    console.print(table)


def render_polling_results(job: str, results: List[PollingResult], repositories: List[str]) -> None:
    """Render one row per monitored repository with its polling decision."""
    rows = []
    for repository, result in zip(repositories, results):
        changed = []
        if result.remote is not None and result.baseline is not None:
            changed = result.remote.changed_pundles(result.baseline)
        rows.append([
            repository,
            "[green]build now[/green]" if result.has_changes() else "no changes",
            result.change.value,
            ", ".join(changed) or "-",
        ])
    render_table(["Repository", "Decision", "Change", "Changed pundles"], rows, title=f"{DISPLAY_NAME} poll: {job}")


def render_history(job: str, history: BuildHistory) -> None:
    """Render a job's builds, newest first, with their recorded states."""
    rows = []
    for build in history:
        states = ", ".join(
            f"{s.repository_name} ({len(s.pundles)} pundles)" for s in build.revision_states
        )
        rows.append([
            f"#{build.number}",
            build.timestamp.strftime('%Y-%m-%d %H:%M:%S UTC'),
            f"#{build.previous_number}" if build.previous_number is not None else "-",
            states or "[dim]none[/dim]",
        ])
    render_table(["Build", "Started", "Previous", "Revision states"], rows, title=f"History: {job}")
