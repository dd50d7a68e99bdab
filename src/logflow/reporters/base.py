"""Shared helpers for file-based reporters."""
from __future__ import annotations

import logging
import re
from pathlib import Path

from ..models import ResultTable

logger = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_\-]")


def report_filename(title: str, suffix: str) -> str:
    """``"Top 10 Endpoints"`` -> ``"Top_10_Endpoints.csv"``."""
    return _UNSAFE_RE.sub("_", title) + suffix


class FileReporter:
    """Writes one file per result table into the output directory."""

    suffix = ""

    def __init__(self, output_dir: str | Path = "reports") -> None:
        self.output_dir = Path(output_dir)

    def set_output_directory(self, path: str) -> None:
        self.output_dir = Path(path)

    def path_for(self, table: ResultTable) -> Path:
        return self.output_dir / report_filename(table.title, self.suffix)

    def report(self, table: ResultTable) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(table)
        self.write(table, path)
        logger.info("%s report written: %s", type(self).__name__, path)

    def write(self, table: ResultTable, path: Path) -> None:
        raise NotImplementedError
