"""Plugin registry: build parsers, filters, aggregators and reporters by id.

Each registration pairs a factory with an optional pydantic options model.
:meth:`PluginRegistry.create` validates the raw options against that model and
calls the factory with the validated values as keyword arguments.

Discovery order:
  1. Built-in plugins registered by :func:`builtin_registry`.
  2. Entry-points under the "logflow.plugins" group (third-party packages).
     Each entry point is a callable taking the registry, e.g.::

         def register(registry):
             registry.register("parser", "nginx", NginxParser, description="nginx error log")

  3. Plugins explicitly registered at runtime via PluginRegistry.register().
"""
from __future__ import annotations

import importlib.metadata
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ValidationError

from ..aggregators.error_rate import ErrorRateAggregator
from ..aggregators.level_count import LevelCountAggregator
from ..aggregators.top_attribute import TopAttributeAggregator
from ..errors import PluginConfigError, UnknownPluginError
from ..filters.regex_filter import RegexFilter
from ..filters.time_filter import TimeRangeFilter
from ..parsers.apache import ApacheParser
from ..parsers.application import ApplicationLogParser
from ..parsers.json_parser import JsonParser
from ..reporters.console import ConsoleReporter
from ..reporters.csv_reporter import CsvReporter
from ..reporters.json_reporter import JsonReporter
from .base import LogAggregator, LogFilter, LogParser, LogReporter
from .options import (
    ErrorRateOptions,
    RegexFilterOptions,
    TimeRangeFilterOptions,
    TopAttributeOptions,
)

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "logflow.plugins"

KINDS: dict[str, type] = {
    "parser": LogParser,
    "filter": LogFilter,
    "aggregator": LogAggregator,
    "reporter": LogReporter,
}

# "id" or "id:key=value,key=value"; a comma only splits before another key=
_OPTION_SPLIT_RE = re.compile(r",(?=\s*[A-Za-z_][\w-]*\s*=)")


@dataclass(frozen=True)
class PluginInfo:
    kind: str
    id: str
    factory: Callable[..., Any]
    options_model: type[BaseModel] | None = None
    description: str = ""


def parse_plugin_spec(spec: str) -> tuple[str, dict[str, str]]:
    """Split ``"top-endpoints:top_n=5,attribute=ip"`` into id and raw options."""
    plugin_id, _, rest = spec.partition(":")
    plugin_id = plugin_id.strip()
    if not plugin_id:
        raise PluginConfigError(f"Missing plugin id in {spec!r}")
    options: dict[str, str] = {}
    if rest.strip():
        for part in _OPTION_SPLIT_RE.split(rest):
            key, sep, value = part.partition("=")
            if not sep or not key.strip():
                raise PluginConfigError(f"Expected key=value in {spec!r}, got {part!r}")
            options[key.strip()] = value
    return plugin_id, options


class PluginRegistry:
    """Central registry for all logflow plugin types.

    Usage::

        registry = builtin_registry()
        registry.discover()  # loads entry-point plugins

        agg = registry.create("aggregator", "top-endpoints", {"top_n": 5})
    """

    def __init__(self) -> None:
        self._plugins: dict[str, dict[str, PluginInfo]] = {kind: {} for kind in KINDS}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        kind: str,
        plugin_id: str,
        factory: Callable[..., Any],
        options: type[BaseModel] | None = None,
        description: str = "",
    ) -> None:
        if kind not in KINDS:
            raise ValueError(f"Unknown plugin kind {kind!r}; expected one of {sorted(KINDS)}")
        if not callable(factory):
            raise TypeError(f"{factory!r} is not callable")
        self._plugins[kind][plugin_id] = PluginInfo(kind, plugin_id, factory, options, description)
        logger.debug("Registered %s plugin: %s", kind, plugin_id)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def info(self, kind: str, plugin_id: str) -> PluginInfo:
        try:
            return self._plugins[kind][plugin_id]
        except KeyError:
            known = ", ".join(self.ids(kind)) if kind in self._plugins else ""
            raise UnknownPluginError(
                f"No {kind} plugin named {plugin_id!r} (available: {known or 'none'})"
            ) from None

    def create(self, kind: str, plugin_id: str, options: Mapping[str, Any] | None = None) -> Any:
        """Build a new plugin instance from raw options."""
        info = self.info(kind, plugin_id)
        raw = dict(options or {})
        if info.options_model is not None:
            try:
                kwargs = dict(info.options_model.model_validate(raw))
            except ValidationError as exc:
                raise PluginConfigError(f"Invalid options for {kind} {plugin_id!r}: {exc}") from exc
        elif raw:
            raise PluginConfigError(f"{kind} {plugin_id!r} takes no options, got {sorted(raw)}")
        else:
            kwargs = {}

        try:
            instance = info.factory(**kwargs)
        except (ValueError, re.error) as exc:
            raise PluginConfigError(f"Cannot build {kind} {plugin_id!r}: {exc}") from exc

        if not isinstance(instance, KINDS[kind]):
            raise TypeError(f"{instance!r} does not implement {KINDS[kind].__name__}")
        return instance

    def create_parser(self, plugin_id: str, options: Mapping[str, Any] | None = None) -> LogParser:
        return self.create("parser", plugin_id, options)

    def create_filter(self, plugin_id: str, options: Mapping[str, Any] | None = None) -> LogFilter:
        return self.create("filter", plugin_id, options)

    def create_aggregator(
        self, plugin_id: str, options: Mapping[str, Any] | None = None
    ) -> LogAggregator:
        return self.create("aggregator", plugin_id, options)

    def create_reporter(
        self, plugin_id: str, options: Mapping[str, Any] | None = None
    ) -> LogReporter:
        return self.create("reporter", plugin_id, options)

    # ------------------------------------------------------------------
    # Discovery via entry-points
    # ------------------------------------------------------------------

    def discover(self) -> int:
        """Run every registration hook in the 'logflow.plugins' entry-point group.

        Returns the number of hooks successfully run.
        """
        loaded = 0
        try:
            eps = importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)
        except Exception as exc:
            logger.warning("Entry-point discovery failed: %s", exc)
            return 0

        for ep in eps:
            try:
                hook = ep.load()
                hook(self)
                loaded += 1
            except Exception as exc:
                logger.warning("Failed to load plugin %r: %s", ep.name, exc)

        return loaded

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def ids(self, kind: str) -> list[str]:
        return sorted(self._plugins[kind])

    def describe(self, kind: str) -> list[tuple[str, str]]:
        return [(pid, self._plugins[kind][pid].description) for pid in self.ids(kind)]

    def __contains__(self, key: tuple[str, str]) -> bool:
        kind, plugin_id = key
        return plugin_id in self._plugins.get(kind, {})


def builtin_registry() -> PluginRegistry:
    """A registry holding every plugin shipped with logflow."""
    r = PluginRegistry()
    r.register("parser", "json", JsonParser, description="One JSON object per line")
    r.register("parser", "apache", ApacheParser, description="Apache/nginx combined access log")
    r.register(
        "parser", "application", ApplicationLogParser,
        description="'<date> <time> [thread] LEVEL logger - msg' with stack traces",
    )
    r.register(
        "filter", "regex", RegexFilter, RegexFilterOptions,
        description="Case-insensitive regex search on one field",
    )
    r.register(
        "filter", "time-range", TimeRangeFilter, TimeRangeFilterOptions,
        description="Timestamp within [start, end]",
    )
    r.register("aggregator", "level-count", LevelCountAggregator, description="Entries per level")
    r.register(
        "aggregator", "top-endpoints", TopAttributeAggregator, TopAttributeOptions,
        description="Most frequent values of an attribute",
    )
    r.register(
        "aggregator", "error-rate", ErrorRateAggregator, ErrorRateOptions,
        description="ERROR percentage per time bucket",
    )
    r.register("reporter", "console", ConsoleReporter, description="Table on the terminal")
    r.register("reporter", "csv", CsvReporter, description="One CSV file per table")
    r.register("reporter", "json", JsonReporter, description="One JSON file per table")
    return r


# Shared by ProcessingManager when no registry is passed in
default_registry = builtin_registry()
