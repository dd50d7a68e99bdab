"""Reassemble multi-line records (stack traces etc.) from a line stream.

Usage::

    assembler = MultiLineAssembler(parser.start_pattern)
    for line in lines:
        unit = assembler.feed(line)
        if unit is not None:
            handle(unit)
    unit = assembler.flush()
    if unit is not None:
        handle(unit)

Only the lines of the record currently being assembled are held in memory.
"""
from __future__ import annotations

import re


class MultiLineAssembler:
    """Buffer lines until the next record's head line arrives."""

    def __init__(self, start_pattern: re.Pattern[str] | str) -> None:
        self._start = re.compile(start_pattern) if isinstance(start_pattern, str) else start_pattern
        self._buffer: list[str] = []

    def feed(self, line: str) -> str | None:
        """Add one physical line (without terminator).

        Returns the previous record when ``line`` starts a new one, else None.
        """
        unit = None
        if self._buffer and self._start.search(line):
            unit = self._take()
        self._buffer.append(line)
        return unit

    def flush(self) -> str | None:
        """Return whatever is buffered (end of stream), or None if empty."""
        if not self._buffer:
            return None
        return self._take()

    def _take(self) -> str:
        unit = "\n".join(self._buffer).strip()
        self._buffer.clear()
        return unit

    @property
    def pending(self) -> int:
        """Number of physical lines currently buffered."""
        return len(self._buffer)

    def __repr__(self) -> str:
        return f"MultiLineAssembler(pattern={self._start.pattern!r}, pending={self.pending})"
