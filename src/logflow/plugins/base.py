"""Plugin capability Protocols.

Every pipeline component is duck-typed against one of these Protocols; no
inheritance is required.  Third-party packages can expose factories for them via
the entry-points mechanism:

    [project.entry-points."logflow.plugins"]
    nginx = "my_package.parsers:register"

See :mod:`logflow.plugins.registry` for how factories are discovered.
"""
from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from ..models import LogEntry, ResultTable


@runtime_checkable
class LogParser(Protocol):
    """Recognizes one log dialect and converts text units into entries."""

    @property
    def name(self) -> str:
        """Diagnostic label, e.g. 'JSON Parser'."""
        ...

    @property
    def is_multi_line(self) -> bool:
        """True when one record may span several physical lines."""
        ...

    @property
    def start_pattern(self) -> re.Pattern[str] | None:
        """Regex matching the first line of a record; None for single-line dialects."""
        ...

    def can_parse(self, line: str) -> bool:
        """Cheap dialect probe. Never raises on malformed input."""
        ...

    def parse(self, unit: str) -> LogEntry | None:
        """Convert one line (or reassembled block) into an entry, or None on mismatch."""
        ...


@runtime_checkable
class LogFilter(Protocol):
    """Read-only predicate over a log entry."""

    def matches(self, entry: LogEntry) -> bool: ...


@runtime_checkable
class LogAggregator(Protocol):
    """Streaming accumulator: one entry in, a result table snapshot out."""

    def process(self, entry: LogEntry) -> None: ...

    def get_result(self) -> ResultTable: ...


@runtime_checkable
class LogReporter(Protocol):
    """Renders or persists a result table."""

    def set_output_directory(self, path: str) -> None: ...

    def report(self, table: ResultTable) -> None: ...
