"""Application log parser with multi-line stack trace support.

Head line format (Spring Boot / logback style)::

    2025-09-18 16:15:00 [main] ERROR com.example.Service - Request failed
    java.lang.IllegalStateException: boom
        at com.example.Service.run(Service.java:42)

Lines that do not match the head grammar are continuation text of the
record above them.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone

from ..models import LogEntry, utc_now
from .base import BaseParser

_HEAD_RE = re.compile(
    r"^(?P<time>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}) "
    r"\[(?P<thread>[^\]]+)\] "
    r"(?P<level>\w+)\s+"
    r"(?P<logger>[\w.]+) - "
    r"(?P<message>.*)$"
)

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ApplicationLogParser(BaseParser):
    """Parse ``<date> <time> [<thread>] <LEVEL> <logger> - <text>`` records."""

    name = "Application Log Parser"

    @property
    def start_pattern(self) -> re.Pattern[str]:
        return _HEAD_RE

    def can_parse(self, line: str) -> bool:
        if not line or not line.strip():
            return False
        return _HEAD_RE.match(line.split("\n", 1)[0]) is not None

    def parse(self, unit: str) -> LogEntry | None:
        if not unit or not unit.strip():
            return None
        lines = unit.split("\n")
        m = _HEAD_RE.match(lines[0])
        if not m:
            self._log.debug("Head line did not match the application log format")
            return None

        try:
            timestamp = datetime.strptime(m["time"], _TIME_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError as exc:
            self._log.warning("Unparseable timestamp %r, using current time: %s", m["time"], exc)
            timestamp = utc_now()

        multiline = len(lines) > 1
        return LogEntry(
            timestamp=timestamp,
            level=m["level"],
            message=unit.strip() if multiline else m["message"],
            attributes={
                "thread": m["thread"],
                "logger": m["logger"],
                "multiline": multiline,
            },
        )
