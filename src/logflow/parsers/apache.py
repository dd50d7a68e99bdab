"""Apache Combined log format parser.

Combined: %h %l %u %t "%r" %>s %b "%{Referer}i" "%{User-agent}i"
"""
from __future__ import annotations

import re
from datetime import datetime

from ..models import LogEntry, utc_now
from .base import BaseParser

# Apache Combined Log Format regex
_COMBINED_RE = re.compile(
    r'(?P<ip>\S+) '                                   # client IP
    r'(?P<ident>\S+) '                                # ident
    r'(?P<user>\S+) '                                 # user
    r'\[(?P<time>[\w:/]+\s[+\-]\d{4})\] '             # [timestamp]
    r'"(?P<method>[A-Z]+) (?P<path>.+?) (?P<protocol>HTTP/\d\.\d)" '
    r'(?P<status>\d{3}) '                             # status code
    r'(?P<size>\d+|-)? '                              # bytes sent
    r'"(?P<referrer>[^"]*)" '                         # referer
    r'"(?P<agent>[^"]*)"'                             # user-agent
)

_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S %z"


def level_for_status(status: int) -> str:
    if status >= 500:
        return "ERROR"
    if status >= 400:
        return "WARN"
    return "INFO"


class ApacheParser(BaseParser):
    """Parse Apache/nginx access logs in the combined format."""

    name = "Apache Access Log Parser (Combined Format)"

    def can_parse(self, line: str) -> bool:
        if not line or not line.strip():
            return False
        return _COMBINED_RE.fullmatch(line) is not None

    def parse(self, unit: str) -> LogEntry | None:
        if not unit:
            return None
        m = _COMBINED_RE.fullmatch(unit)
        if not m:
            self._log.debug("Line did not match the combined access-log format")
            return None

        try:
            timestamp = datetime.strptime(m["time"], _TIME_FORMAT)
        except ValueError as exc:
            self._log.warning("Unparseable timestamp %r, using current time: %s", m["time"], exc)
            timestamp = utc_now()

        status = int(m["status"])
        size = m["size"]
        method, path = m["method"], m["path"]
        return LogEntry(
            timestamp=timestamp,
            level=level_for_status(status),
            message=f"{method} {path} - Status {status}",
            attributes={
                "ip": m["ip"],
                "method": method,
                "path": path,
                "protocol": m["protocol"],
                "status": status,
                "size": int(size) if size and size != "-" else 0,
                "referrer": m["referrer"],
                "user_agent": m["agent"],
            },
        )
