"""Newline-delimited JSON (NDJSON) parser.

Reserved keys map onto the entry itself; every other key becomes a string
attribute.  Memory usage is O(1) per line.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from ..models import AttributeValue, LogEntry, ensure_aware, utc_now
from .base import BaseParser

_RESERVED = ("timestamp", "level", "message")


def _as_text(value: Any) -> str:
    """Render a JSON value as text: strings verbatim, everything else as compact JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def _load_object(line: str) -> dict[str, Any] | None:
    try:
        obj = json.loads(line)
    except (json.JSONDecodeError, RecursionError):
        return None
    return obj if isinstance(obj, dict) else None


class JsonParser(BaseParser):
    """Parse one JSON object per line."""

    name = "JSON Parser"

    def can_parse(self, line: str) -> bool:
        if not line or not line.strip():
            return False
        return _load_object(line) is not None

    def parse(self, unit: str) -> LogEntry | None:
        if not unit or not unit.strip():
            return None
        obj = _load_object(unit)
        if obj is None:
            self._log.debug("Not a JSON object: %.200s", unit)
            return None

        timestamp = None
        if "timestamp" in obj:
            timestamp = self._parse_timestamp(obj["timestamp"])

        level = obj.get("level")
        message = obj.get("message")
        attributes: dict[str, AttributeValue] = {
            k: _as_text(v) for k, v in obj.items() if k not in _RESERVED
        }
        return LogEntry(
            timestamp=timestamp,
            level=_as_text(level) if level is not None else None,
            message=_as_text(message) if message is not None else None,
            attributes=attributes,
        )

    def _parse_timestamp(self, raw: Any) -> datetime:
        try:
            if isinstance(raw, bool):
                raise TypeError("boolean timestamp")
            if isinstance(raw, (int, float)):
                return datetime.fromtimestamp(raw, tz=timezone.utc)
            text = str(raw).strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            return ensure_aware(datetime.fromisoformat(text))
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            self._log.warning("Unparseable timestamp %r, using current time: %s", raw, exc)
            return utc_now()
