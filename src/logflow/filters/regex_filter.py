"""Regex filter targeting a single entry field."""
from __future__ import annotations

import logging
import re

from ..models import LogEntry


class RegexFilter:
    """Keep entries whose ``field`` contains a match for ``regex``.

    ``field`` is ``level``, ``message``, ``source`` or any attribute name.
    Matching is case-insensitive and unanchored (``re.search``).  Entries
    lacking the field are rejected.

    A filter missing either ``field`` or ``regex`` is unconfigured and lets
    every entry through.
    """

    def __init__(
        self,
        field: str | None = None,
        regex: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._log = logger or logging.getLogger(__name__)
        self.field = field or None
        self.regex = regex
        self._pattern = re.compile(regex, re.IGNORECASE) if regex is not None else None
        if not self.configured:
            self._log.warning("RegexFilter has no field or regex; it will match every entry")

    @property
    def configured(self) -> bool:
        return self.field is not None and self._pattern is not None

    def matches(self, entry: LogEntry) -> bool:
        """Return True if the configured field matches the pattern."""
        if self.field is None or self._pattern is None:
            return True
        value = entry.get(self.field)
        if value is None:
            return False
        return self._pattern.search(str(value)) is not None

    def __repr__(self) -> str:
        return f"RegexFilter(field={self.field!r}, regex={self.regex!r})"
