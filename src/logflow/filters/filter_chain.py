"""Composable filter chain for log entries.

Chains short-circuit on the first failing filter (AND semantics).  An empty
chain accepts everything.
"""
from __future__ import annotations

from typing import Iterable

from ..models import LogEntry
from ..plugins.base import LogFilter


class FilterChain:
    """Apply multiple filters in sequence (logical AND).

    Usage::

        chain = FilterChain()
        chain.add(RegexFilter(field="level", regex="ERROR"))
        chain.add(TimeRangeFilter(start=t0, end=t1))

        if chain.matches(entry):
            ...
    """

    def __init__(self, filters: Iterable[LogFilter] = ()) -> None:
        self._filters: list[LogFilter] = list(filters)

    def add(self, log_filter: LogFilter) -> "FilterChain":
        """Append a filter and return self for chaining."""
        self._filters.append(log_filter)
        return self

    def matches(self, entry: LogEntry) -> bool:
        """Return True if all filters accept the entry."""
        return all(f.matches(entry) for f in self._filters)

    @property
    def filters(self) -> tuple[LogFilter, ...]:
        return tuple(self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def __repr__(self) -> str:
        return f"FilterChain({len(self._filters)} filters)"
