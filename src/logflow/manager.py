"""Processing manager: drives parse → filter → aggregate → report.

Each file is streamed line by line through a small state machine:

    awaiting parser  ──first non-blank line──▶  single-line streaming
                                           └──▶  multi-line streaming
                                                       │
                                                 end of file ──▶ done

The first non-blank line picks the parser (first registered parser whose
``can_parse`` accepts it).  If none does, the rest of the file is skipped.
Single-line dialects parse every line on its own; multi-line dialects buffer
lines in a :class:`MultiLineAssembler` until the next record head arrives.
Only one file is open at a time.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

from .config import Settings
from .filters.filter_chain import FilterChain
from .parsers.auto_detect import default_parsers, select_parser
from .parsers.multiline import MultiLineAssembler
from .plugins.base import LogAggregator, LogFilter, LogParser, LogReporter
from .plugins.registry import PluginRegistry, default_registry

RUN_DIR_FORMAT = "run-%Y%m%d-%H%M%S"


@dataclass
class RunSummary:
    """Counters collected while processing files."""

    files_processed: int = 0
    files_skipped: int = 0
    units_parsed: int = 0
    entries_rejected: int = 0
    entries_filtered: int = 0
    entries_aggregated: int = 0

    def __str__(self) -> str:
        return (
            f"{self.files_processed} file(s) processed, {self.files_skipped} skipped, "
            f"{self.entries_aggregated} of {self.units_parsed} record(s) aggregated "
            f"({self.entries_rejected} unparseable, {self.entries_filtered} filtered out)"
        )


class ProcessingManager:
    """Owns the registered plugins and runs the per-file streaming loop.

    Usage::

        manager = ProcessingManager()
        manager.add_filter(RegexFilter(field="level", regex="ERROR|WARN"))
        manager.add_aggregator(LevelCountAggregator())
        manager.add_reporter(ConsoleReporter())
        manager.process_files(["app.log", "access.log"])
        run_dir = manager.generate_report()

    Args:
        parsers:  Parsers in priority order.  When empty, ``settings.parsers``
                  (registry ids) is used, falling back to JSON + Apache.
        settings: Runtime settings; loaded from the environment when omitted.
        logger:   Logger receiving pipeline events (defaults to this module's).
        registry: Plugin registry used to resolve ``settings.parsers``.
    """

    def __init__(
        self,
        parsers: Iterable[LogParser] | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
        registry: PluginRegistry | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self._log = logger or logging.getLogger(__name__)
        self._parsers: list[LogParser] = []
        self._filters = FilterChain()
        self._aggregators: list[LogAggregator] = []
        self._reporters: list[LogReporter] = []

        initial = list(parsers or ())
        if not initial and self.settings.parsers:
            reg = registry or default_registry
            initial = [reg.create_parser(pid) for pid in self.settings.parsers]
        if not initial:
            initial = default_parsers()
            self._log.debug("Using default parsers")
        for parser in initial:
            self.register_parser(parser)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_parser(self, parser: LogParser) -> None:
        self._parsers.append(parser)
        self._log.debug("Registered parser: %s", parser.name)

    def add_filter(self, log_filter: LogFilter) -> None:
        self._filters.add(log_filter)
        self._log.debug("Added filter: %r", log_filter)

    def add_aggregator(self, aggregator: LogAggregator) -> None:
        self._aggregators.append(aggregator)
        self._log.debug("Added aggregator: %r", aggregator)

    def add_reporter(self, reporter: LogReporter) -> None:
        self._reporters.append(reporter)
        self._log.debug("Added reporter: %s", type(reporter).__name__)

    @property
    def parsers(self) -> tuple[LogParser, ...]:
        return tuple(self._parsers)

    @property
    def filters(self) -> tuple[LogFilter, ...]:
        return self._filters.filters

    @property
    def aggregators(self) -> tuple[LogAggregator, ...]:
        return tuple(self._aggregators)

    @property
    def reporters(self) -> tuple[LogReporter, ...]:
        return tuple(self._reporters)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_files(self, paths: Iterable[str | os.PathLike[str]]) -> RunSummary:
        """Stream every file, in order, through parse → filter → aggregate."""
        summary = RunSummary()
        count = 0
        for path in paths:
            count += 1
            if self._process_file(os.fspath(path), summary):
                summary.files_processed += 1
            else:
                summary.files_skipped += 1
        self._log.info("Aggregation complete for %d file(s): %s", count, summary)
        return summary

    def _process_file(self, path: str, summary: RunSummary) -> bool:
        """Process one file. Returns False when the file was skipped."""
        parser: LogParser | None = None
        assembler: MultiLineAssembler | None = None
        try:
            with open(path, encoding=self.settings.encoding, errors="replace") as fh:
                for raw in fh:
                    line = raw.rstrip("\r\n")

                    if parser is None:
                        if not line.strip():
                            continue
                        parser = select_parser(self._parsers, line)
                        if parser is None:
                            self._log.warning("No suitable parser found for %s", path)
                            return False
                        self._log.info("Processing %s with %s", path, parser.name)
                        if parser.is_multi_line:
                            assembler = MultiLineAssembler(parser.start_pattern)

                    if assembler is None:
                        self._handle_unit(parser, line, path, summary)
                        continue
                    unit = assembler.feed(line)
                    if unit is not None:
                        self._handle_unit(parser, unit, path, summary)

                if assembler is not None:
                    unit = assembler.flush()
                    if unit is not None:
                        self._handle_unit(parser, unit, path, summary)
        except OSError as exc:
            self._log.warning("Failed to read file %s: %s", path, exc)
            return False

        if parser is None:
            self._log.warning("No content to parse in %s", path)
            return False
        return True

    def _handle_unit(self, parser: LogParser, unit: str, path: str, summary: RunSummary) -> None:
        summary.units_parsed += 1
        entry = parser.parse(unit)
        if entry is None:
            summary.entries_rejected += 1
            self._log.debug("%s rejected a record in %s: %.200s", parser.name, path, unit)
            return
        entry = entry.with_source(path)
        if not self._filters.matches(entry):
            summary.entries_filtered += 1
            return
        for aggregator in self._aggregators:
            aggregator.process(entry)
        summary.entries_aggregated += 1

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def generate_report(self) -> Path:
        """Hand every aggregator's result to every reporter.

        Returns the freshly created run directory the file reporters wrote into.
        """
        run_dir = self._create_run_directory()
        for aggregator in self._aggregators:
            try:
                table = aggregator.get_result()
            except Exception:
                self._log.exception("Aggregator %r failed to produce a result", aggregator)
                continue
            for reporter in self._reporters:
                try:
                    reporter.set_output_directory(str(run_dir))
                    reporter.report(table)
                except Exception:
                    self._log.exception(
                        "Reporter %s failed for %r", type(reporter).__name__, table.title
                    )
        return run_dir

    def run(self, paths: Iterable[str | os.PathLike[str]]) -> Path:
        """Process the files and report, returning the run directory."""
        self.process_files(paths)
        return self.generate_report()

    def _create_run_directory(self) -> Path:
        base = Path(self.settings.output_dir)
        name = datetime.now().strftime(RUN_DIR_FORMAT)
        run_dir = base / name
        suffix = 0
        while run_dir.exists():
            suffix += 1
            run_dir = base / f"{name}-{suffix}"
        try:
            run_dir.mkdir(parents=True)
        except OSError as exc:
            self._log.error("Could not create run directory %s: %s", run_dir, exc)
        return run_dir
