"""Time-range filtering for log entries."""
from __future__ import annotations

import logging
from datetime import datetime

from ..models import LogEntry, ensure_aware

# Fallback formats tried after ISO-8601 when parsing a bound given as text
_TIMESTAMP_FORMATS: list[str] = [
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S",
    "%d/%b/%Y:%H:%M:%S %z",  # Apache Combined
    "%Y-%m-%d",
]


def parse_timestamp(raw: str) -> datetime:
    """Parse a bound such as ``2025-09-18T16:00:00Z``; naive values are taken as UTC.

    Raises ValueError when no known format fits.
    """
    text = raw.strip()
    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return ensure_aware(datetime.fromisoformat(iso))
    except ValueError:
        pass
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return ensure_aware(datetime.strptime(text, fmt))
        except ValueError:
            continue
    raise ValueError(f"Cannot parse timestamp: {raw!r}")


def _as_bound(value: datetime | str | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    return parse_timestamp(value)


class TimeRangeFilter:
    """Keep entries whose timestamp falls within [start, end].

    Either bound may be ``None`` (open interval); both are inclusive.  Entries
    without a timestamp never match.
    """

    def __init__(
        self,
        start: datetime | str | None = None,
        end: datetime | str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._log = logger or logging.getLogger(__name__)
        self.start = _as_bound(start)
        self.end = _as_bound(end)
        if self.start and self.end and self.start > self.end:
            self._log.warning("TimeRangeFilter start %s is after end %s; nothing will match",
                              self.start, self.end)

    def matches(self, entry: LogEntry) -> bool:
        if entry.timestamp is None:
            return False
        ts = ensure_aware(entry.timestamp)
        if self.start is not None and ts < self.start:
            return False
        if self.end is not None and ts > self.end:
            return False
        return True

    def __repr__(self) -> str:
        return f"TimeRangeFilter(start={self.start!r}, end={self.end!r})"
