"""Error rate per time bucket."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from ..models import LogEntry, ResultTable

DEFAULT_BUCKET_FORMAT = "%Y-%m-%dT%H"

_CENT = Decimal("0.01")


@dataclass
class _Bucket:
    total: int = 0
    errors: int = 0

    @property
    def rate(self) -> Decimal:
        """Error percentage to two places; ties round away from zero (3.125 -> 3.13)."""
        if self.total == 0:
            return Decimal("0.00")
        return (Decimal(self.errors * 100) / Decimal(self.total)).quantize(_CENT, ROUND_HALF_UP)


class ErrorRateAggregator:
    """Percentage of ERROR entries per time bucket.

    The bucket key is the entry timestamp rendered with ``bucket_format``
    (a ``strftime`` pattern), so the format controls the bucket width:

        ``%Y-%m-%dT%H:%M``  per minute
        ``%Y-%m-%dT%H``     per hour (default)
        ``%Y-%m-%d``        per day

    Entries without a timestamp are skipped.  Buckets are reported in
    lexicographic key order, which is chronological for the formats above.
    """

    title = "Error Rate Over Time"
    headers = ("Time Bucket", "Total", "Errors", "Error Rate (%)")

    def __init__(
        self,
        bucket_format: str = DEFAULT_BUCKET_FORMAT,
        logger: logging.Logger | None = None,
    ) -> None:
        self.bucket_format = bucket_format
        self._log = logger or logging.getLogger(__name__)
        self._buckets: dict[str, _Bucket] = {}

    def process(self, entry: LogEntry) -> None:
        if entry.timestamp is None:
            self._log.debug("Entry has no timestamp, skipping")
            return
        key = entry.timestamp.strftime(self.bucket_format)
        bucket = self._buckets.setdefault(key, _Bucket())
        bucket.total += 1
        if entry.level is not None and entry.level.upper() == "ERROR":
            bucket.errors += 1

    def get_result(self) -> ResultTable:
        rows = [
            (key, str(b.total), str(b.errors), f"{b.rate:.2f}")
            for key, b in sorted(self._buckets.items())
        ]
        return ResultTable(self.title, self.headers, rows)

    def __repr__(self) -> str:
        return f"ErrorRateAggregator(bucket_format={self.bucket_format!r}, buckets={len(self._buckets)})"
