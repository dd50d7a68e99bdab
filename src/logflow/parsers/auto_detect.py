"""Pick the parser for a file from its first non-blank line."""
from __future__ import annotations

import logging
from typing import Iterable

from ..plugins.base import LogParser
from .apache import ApacheParser
from .json_parser import JsonParser

logger = logging.getLogger(__name__)


def default_parsers() -> list[LogParser]:
    """Parsers registered when none are configured, in priority order.

    Detection order (first match wins):
      1. JSON: the line is a JSON object
      2. Apache: combined access-log grammar
    """
    return [JsonParser(), ApacheParser()]


def select_parser(parsers: Iterable[LogParser], line: str) -> LogParser | None:
    """Return the first parser whose ``can_parse`` accepts ``line``.

    Registration order is priority order.  Returns None when nothing matches.
    """
    for parser in parsers:
        if parser.can_parse(line):
            logger.debug("Parser %s accepts the line", parser.name)
            return parser
    logger.debug("No parser accepts line: %.200s", line)
    return None
