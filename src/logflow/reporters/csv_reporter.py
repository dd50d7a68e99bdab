"""Write result tables as CSV files."""
from __future__ import annotations

import csv
import io
from pathlib import Path

from ..models import ResultTable
from .base import FileReporter


def render_csv(table: ResultTable) -> str:
    """Render a table as CSV text: header row followed by data rows."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(table.headers)
    writer.writerows(table.rows)
    return buf.getvalue()


class CsvReporter(FileReporter):
    """Write ``<output_dir>/<Title>.csv`` for each result table."""

    suffix = ".csv"

    def write(self, table: ResultTable, path: Path) -> None:
        path.write_text(render_csv(table), encoding="utf-8", newline="")
