"""Core data model: normalized log entries and aggregation result tables."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence, Union

# Attribute values are scalars only; nested structures are flattened to text by parsers.
AttributeValue = Union[str, int, float, bool]


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(ts: datetime) -> datetime:
    """Interpret naive datetimes as UTC so every timestamp is comparable."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class LogEntry:
    """One normalized log record.

    Attributes:
        timestamp:  When the record was emitted, or ``None`` if the dialect has none.
        level:      Severity as written in the log (case preserved).
        message:    Free-text message.
        source:     Path of the file the record came from. Parsers leave this unset;
                    the processing manager attaches it with :meth:`with_source`.
        attributes: Dialect-specific extra fields (``ip``, ``path``, ``logger`` ...).
    """

    timestamp: datetime | None = None
    level: str | None = None
    message: str | None = None
    source: str | None = None
    attributes: dict[str, AttributeValue] = field(default_factory=dict)

    def with_source(self, source: str) -> "LogEntry":
        return dataclasses.replace(self, source=source)

    def get(self, name: str) -> AttributeValue | None:
        """Resolve a field by name: reserved names first, then attributes."""
        if name == "level":
            return self.level
        if name == "message":
            return self.message
        if name == "source":
            return self.source
        return self.attributes.get(name)

    def __str__(self) -> str:
        ts = self.timestamp.isoformat() if self.timestamp else "-"
        return f"[{ts}] {self.level}: {self.message}"


@dataclass(frozen=True, init=False)
class ResultTable:
    """Titled table of string cells produced by an aggregator.

    Every row has exactly ``len(headers)`` cells; construction fails otherwise.
    """

    title: str
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...] = ()

    def __init__(
        self,
        title: str,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]] = (),
    ) -> None:
        headers_t = tuple(headers)
        rows_t = tuple(tuple(r) for r in rows)
        for i, row in enumerate(rows_t):
            if len(row) != len(headers_t):
                raise ValueError(
                    f"row {i} of {title!r} has {len(row)} cells, expected {len(headers_t)}"
                )
        object.__setattr__(self, "title", title)
        object.__setattr__(self, "headers", headers_t)
        object.__setattr__(self, "rows", rows_t)

    def as_dicts(self) -> list[dict[str, str]]:
        """Rows keyed by header name."""
        return [dict(zip(self.headers, row)) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)
