"""Write result tables as pretty-printed JSON documents.

Document shape::

    {
      "title": "Log Level Counts",
      "generated_at": "2025-09-18T16:20:00.123456",
      "record_count": 2,
      "headers": ["Log Level", "Count"],
      "data": [{"Log Level": "ERROR", "Count": "3"}, ...]
    }
"""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from ..models import ResultTable
from .base import FileReporter


def to_document(table: ResultTable) -> dict[str, Any]:
    return {
        "title": table.title,
        "generated_at": datetime.now().isoformat(),
        "record_count": len(table.rows),
        "headers": list(table.headers),
        "data": table.as_dicts(),
    }


class JsonReporter(FileReporter):
    """Write ``<output_dir>/<Title>.json`` for each result table."""

    suffix = ".json"

    def write(self, table: ResultTable, path: Path) -> None:
        with path.open("w", encoding="utf-8") as fh:
            json.dump(to_document(table), fh, indent=2, ensure_ascii=False)
            fh.write("\n")
