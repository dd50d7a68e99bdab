"""Rich-powered console rendering of result tables."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import ResultTable


def build_table(result: ResultTable) -> Table:
    """Convert a result table into a Rich table.

    Columns whose header mentions a count or rate are right-aligned.
    """
    table = Table(title=escape(result.title), box=box.SIMPLE_HEAVY)
    for header in result.headers:
        numeric = any(word in header.lower() for word in ("count", "total", "errors", "rate"))
        table.add_column(
            header,
            justify="right" if numeric else "left",
            style="cyan" if numeric else None,
            overflow="fold",
        )
    for row in result.rows:
        table.add_row(*(escape(cell) for cell in row))
    return table


class ConsoleReporter:
    """Print each result table to the terminal. Ignores the output directory."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def set_output_directory(self, path: str) -> None:
        pass

    def report(self, table: ResultTable) -> None:
        if not table.rows:
            self.console.print(f"\n[bold]{escape(table.title)}[/bold]")
            self.console.print("[dim](No data)[/dim]")
            return
        self.console.print(build_table(table))
