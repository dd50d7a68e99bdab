"""Shared parser behaviour. Parsers are single-line by default."""
from __future__ import annotations

import logging
import re

from ..models import LogEntry


class BaseParser:
    """Convenience base for parsers.

    Subclasses implement :meth:`can_parse` and :meth:`parse`.  A multi-line
    dialect overrides :attr:`start_pattern`; :attr:`is_multi_line` follows from it,
    so a parser is multi-line exactly when it has a start pattern.
    """

    name = "base"

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger(type(self).__module__)

    @property
    def start_pattern(self) -> re.Pattern[str] | None:
        return None

    @property
    def is_multi_line(self) -> bool:
        return self.start_pattern is not None

    def can_parse(self, line: str) -> bool:
        raise NotImplementedError

    def parse(self, unit: str) -> LogEntry | None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
