"""Count log entries per level."""
from __future__ import annotations

from collections import Counter

from ..models import LogEntry, ResultTable


class LevelCountAggregator:
    """Count occurrences of each log level. Entries without a level are ignored."""

    title = "Log Level Counts"
    headers = ("Log Level", "Count")

    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()

    def process(self, entry: LogEntry) -> None:
        if entry.level is not None:
            self._counts[entry.level] += 1

    def get_result(self) -> ResultTable:
        # Counter preserves first-seen order
        rows = [(level, str(count)) for level, count in self._counts.items()]
        return ResultTable(self.title, self.headers, rows)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def __repr__(self) -> str:
        return f"LevelCountAggregator(levels={len(self._counts)})"
