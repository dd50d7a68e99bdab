"""Top-N most frequent values of an entry attribute (e.g. request paths)."""
from __future__ import annotations

import logging
from collections import Counter

from ..models import LogEntry, ResultTable


class TopAttributeAggregator:
    """Count values of ``attribute`` and report the ``top_n`` most common.

    Rows are sorted by count, highest first; equal counts keep the order in
    which the values were first seen.  Fewer than ``top_n`` rows are returned
    when fewer distinct values exist.

    Usage::

        agg = TopAttributeAggregator(attribute="path", top_n=5)
        for entry in entries:
            agg.process(entry)
        table = agg.get_result()   # "Top 5 Endpoints"
    """

    def __init__(
        self,
        attribute: str = "path",
        top_n: int = 10,
        header: str = "Endpoint",
        label: str = "Endpoints",
        logger: logging.Logger | None = None,
    ) -> None:
        if top_n < 0:
            raise ValueError(f"top_n must be >= 0, got {top_n}")
        self.attribute = attribute
        self.top_n = top_n
        self.header = header
        self.label = label
        self._log = logger or logging.getLogger(__name__)
        self._counts: Counter[str] = Counter()

    def process(self, entry: LogEntry) -> None:
        value = entry.attributes.get(self.attribute)
        if value is None:
            return
        self._counts[str(value)] += 1

    def top(self) -> list[tuple[str, int]]:
        # most_common() is a stable sort over insertion order
        return self._counts.most_common(self.top_n)

    def get_result(self) -> ResultTable:
        top = self.top()
        self._log.debug("Top %d %r values: %s", self.top_n, self.attribute, top)
        return ResultTable(
            f"Top {self.top_n} {self.label}",
            (self.header, "Count"),
            [(value, str(count)) for value, count in top],
        )

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def __repr__(self) -> str:
        return f"TopAttributeAggregator(attribute={self.attribute!r}, top_n={self.top_n})"
