"""Tests for the processing manager's streaming loop and report fan-out."""
from __future__ import annotations

from pathlib import Path
from unittest import mock

import pytest

from logflow.aggregators.level_count import LevelCountAggregator
from logflow.aggregators.top_attribute import TopAttributeAggregator
from logflow.config import Settings
from logflow.errors import UnknownPluginError
from logflow.filters.regex_filter import RegexFilter
from logflow.filters.time_filter import TimeRangeFilter
from logflow.manager import ProcessingManager, RunSummary
from logflow.models import LogEntry, ResultTable
from logflow.parsers.apache import ApacheParser
from logflow.parsers.application import ApplicationLogParser
from logflow.parsers.json_parser import JsonParser
from logflow.reporters.csv_reporter import CsvReporter
from logflow.reporters.json_reporter import JsonReporter


class CollectingAggregator:
    """Keeps every entry it is handed."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def process(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def get_result(self) -> ResultTable:
        return ResultTable("Collected", ("Message",), [(e.message or "",) for e in self.entries])


class RecordingReporter:
    def __init__(self) -> None:
        self.directories: list[str] = []
        self.titles: list[str] = []

    def set_output_directory(self, path: str) -> None:
        self.directories.append(path)

    def report(self, table: ResultTable) -> None:
        self.titles.append(table.title)


class BrokenReporter(RecordingReporter):
    def report(self, table: ResultTable) -> None:
        raise RuntimeError("disk on fire")


class BrokenAggregator(CollectingAggregator):
    def get_result(self) -> ResultTable:
        raise RuntimeError("cannot summarise")


def _manager(settings: Settings, *aggregators, parsers=None) -> ProcessingManager:
    manager = ProcessingManager(parsers=parsers, settings=settings)
    for agg in aggregators:
        manager.add_aggregator(agg)
    return manager


# ---------------------------------------------------------------------------
# Parser registration
# ---------------------------------------------------------------------------

class TestParserSetup:
    def test_defaults_are_json_then_apache(self, settings) -> None:
        manager = ProcessingManager(settings=settings)
        assert [type(p) for p in manager.parsers] == [JsonParser, ApacheParser]

    def test_explicit_parsers_win(self, settings) -> None:
        manager = ProcessingManager(parsers=[ApplicationLogParser()], settings=settings)
        assert [type(p) for p in manager.parsers] == [ApplicationLogParser]

    def test_parsers_from_settings(self, tmp_path) -> None:
        settings = Settings(_env_file=None, output_dir=tmp_path, parsers=["application", "json"])
        manager = ProcessingManager(settings=settings)
        assert [type(p) for p in manager.parsers] == [ApplicationLogParser, JsonParser]

    def test_unknown_parser_id_in_settings(self, tmp_path) -> None:
        settings = Settings(_env_file=None, output_dir=tmp_path, parsers=["syslog"])
        with pytest.raises(UnknownPluginError):
            ProcessingManager(settings=settings)

    def test_register_parser_appends(self, settings) -> None:
        manager = ProcessingManager(settings=settings)
        manager.register_parser(ApplicationLogParser())
        assert isinstance(manager.parsers[-1], ApplicationLogParser)

    def test_registration_views(self, settings) -> None:
        manager = ProcessingManager(settings=settings)
        f = RegexFilter(field="level", regex="ERROR")
        agg = LevelCountAggregator()
        rep = RecordingReporter()
        manager.add_filter(f)
        manager.add_aggregator(agg)
        manager.add_reporter(rep)
        assert manager.filters == (f,)
        assert manager.aggregators == (agg,)
        assert manager.reporters == (rep,)


# ---------------------------------------------------------------------------
# process_files
# ---------------------------------------------------------------------------

class TestProcessFiles:
    def test_json_file(self, settings, tmp_log_file, json_log_lines) -> None:
        agg = LevelCountAggregator()
        summary = _manager(settings, agg).process_files([tmp_log_file(json_log_lines)])
        assert summary.files_processed == 1
        assert summary.units_parsed == 4
        assert summary.entries_aggregated == 4
        assert dict(agg.get_result().rows) == {"INFO": "2", "ERROR": "1", "WARN": "1"}

    def test_first_line_is_counted(self, settings, tmp_log_file, json_log_lines) -> None:
        agg = CollectingAggregator()
        _manager(settings, agg).process_files([tmp_log_file(json_log_lines)])
        assert agg.entries[0].message == "startup"

    def test_apache_file(self, settings, tmp_log_file, apache_log_lines) -> None:
        agg = TopAttributeAggregator(top_n=1)
        summary = _manager(settings, agg).process_files([tmp_log_file(apache_log_lines, "access.log")])
        assert summary.entries_aggregated == 4
        assert agg.get_result().rows == (("/api/v1/health", "2"),)

    def test_multi_line_file(self, settings, tmp_log_file, app_log_lines) -> None:
        agg = CollectingAggregator()
        manager = _manager(settings, agg, parsers=[ApplicationLogParser()])
        summary = manager.process_files([tmp_log_file(app_log_lines, "app.log")])
        assert summary.units_parsed == 3
        assert [e.level for e in agg.entries] == ["INFO", "ERROR", "WARN"]
        trace = agg.entries[1].message
        assert trace.startswith("2025-08-01 10:00:05")
        assert "OrderService.java:42" in trace
        assert agg.entries[2].attributes["multiline"] is False

    def test_multi_line_file_ending_in_continuation(self, settings, tmp_log_file, app_log_lines) -> None:
        agg = CollectingAggregator()
        manager = _manager(settings, agg, parsers=[ApplicationLogParser()])
        manager.process_files([tmp_log_file(app_log_lines[:5], "app.log")])
        assert len(agg.entries) == 2
        assert agg.entries[-1].message.endswith("OrderController.java:17)")

    def test_source_attached(self, settings, tmp_log_file, json_log_lines) -> None:
        agg = CollectingAggregator()
        path = tmp_log_file(json_log_lines, "svc.json")
        _manager(settings, agg).process_files([path])
        assert {e.source for e in agg.entries} == {str(path)}

    def test_leading_blank_lines_skipped(self, settings, tmp_log_file, json_log_lines) -> None:
        agg = CollectingAggregator()
        summary = _manager(settings, agg).process_files([tmp_log_file(["", "   ", *json_log_lines])])
        assert summary.files_processed == 1
        assert len(agg.entries) == 4

    def test_crlf_line_endings(self, settings, tmp_path, json_log_lines) -> None:
        path = tmp_path / "windows.json"
        path.write_bytes(("\r\n".join(json_log_lines) + "\r\n").encode("utf-8"))
        agg = CollectingAggregator()
        summary = _manager(settings, agg).process_files([path])
        assert summary.entries_rejected == 0
        assert len(agg.entries) == 4

    def test_unparseable_lines_counted_and_skipped(self, settings, tmp_log_file, json_log_lines) -> None:
        agg = LevelCountAggregator()
        lines = [json_log_lines[0], "garbage", json_log_lines[1]]
        summary = _manager(settings, agg).process_files([tmp_log_file(lines)])
        assert summary.units_parsed == 3
        assert summary.entries_rejected == 1
        assert agg.total == 2

    def test_unrecognised_file_skipped_next_still_processed(
        self, settings, tmp_log_file, json_log_lines
    ) -> None:
        agg = LevelCountAggregator()
        plain = tmp_log_file(["just some text", "more text"], "notes.txt")
        good = tmp_log_file(json_log_lines, "good.json")
        summary = _manager(settings, agg).process_files([plain, good])
        assert summary.files_skipped == 1
        assert summary.files_processed == 1
        assert agg.total == 4

    def test_missing_file_skipped(self, settings, tmp_path, tmp_log_file, json_log_lines) -> None:
        agg = LevelCountAggregator()
        summary = _manager(settings, agg).process_files(
            [tmp_path / "nope.log", tmp_log_file(json_log_lines)]
        )
        assert summary.files_skipped == 1
        assert agg.total == 4

    def test_empty_file_skipped(self, settings, tmp_path) -> None:
        path = tmp_path / "empty.log"
        path.write_text("", encoding="utf-8")
        summary = _manager(settings).process_files([path])
        assert summary == RunSummary(files_skipped=1)

    def test_parser_chosen_per_file(
        self, settings, tmp_log_file, json_log_lines, apache_log_lines
    ) -> None:
        agg = CollectingAggregator()
        _manager(settings, agg).process_files(
            [tmp_log_file(json_log_lines, "a.json"), tmp_log_file(apache_log_lines, "b.log")]
        )
        assert len(agg.entries) == 8
        assert agg.entries[-1].attributes["status"] == 503

    def test_every_aggregator_sees_every_entry(self, settings, tmp_log_file, json_log_lines) -> None:
        a, b = CollectingAggregator(), CollectingAggregator()
        _manager(settings, a, b).process_files([tmp_log_file(json_log_lines)])
        assert a.entries == b.entries

    def test_filters_are_anded(self, settings, tmp_log_file, json_log_lines) -> None:
        agg = CollectingAggregator()
        manager = _manager(settings, agg)
        manager.add_filter(RegexFilter(field="level", regex="ERROR|WARN"))
        manager.add_filter(TimeRangeFilter(end="2025-08-01T10:00:01Z"))
        summary = manager.process_files([tmp_log_file(json_log_lines)])
        assert [e.message for e in agg.entries] == ["disk full"]
        assert summary.entries_filtered == 3

    def test_filter_on_source(self, settings, tmp_log_file, json_log_lines) -> None:
        agg = CollectingAggregator()
        manager = _manager(settings, agg)
        manager.add_filter(RegexFilter(field="source", regex=r"keep\.json$"))
        manager.process_files(
            [tmp_log_file(json_log_lines, "keep.json"), tmp_log_file(json_log_lines, "drop.json")]
        )
        assert len(agg.entries) == 4

    def test_summary_str(self) -> None:
        text = str(RunSummary(files_processed=2, units_parsed=5, entries_aggregated=4))
        assert "2 file(s) processed" in text
        assert "4 of 5" in text


# ---------------------------------------------------------------------------
# generate_report
# ---------------------------------------------------------------------------

class TestGenerateReport:
    def test_writes_into_fresh_run_directory(self, settings, tmp_log_file, json_log_lines) -> None:
        manager = _manager(settings, LevelCountAggregator())
        manager.add_reporter(CsvReporter())
        manager.add_reporter(JsonReporter())
        manager.process_files([tmp_log_file(json_log_lines)])
        run_dir = manager.generate_report()

        assert run_dir.parent == Path(settings.output_dir)
        assert run_dir.name.startswith("run-")
        assert sorted(p.name for p in run_dir.iterdir()) == [
            "Log_Level_Counts.csv",
            "Log_Level_Counts.json",
        ]

    def test_run_directories_are_unique(self, settings) -> None:
        manager = _manager(settings, LevelCountAggregator())
        first = manager.generate_report()
        second = manager.generate_report()
        assert first != second
        assert first.is_dir() and second.is_dir()

    def test_every_aggregator_goes_to_every_reporter(self, settings) -> None:
        manager = _manager(settings, LevelCountAggregator(), TopAttributeAggregator())
        rep1, rep2 = RecordingReporter(), RecordingReporter()
        manager.add_reporter(rep1)
        manager.add_reporter(rep2)
        run_dir = manager.generate_report()
        assert rep1.titles == rep2.titles == ["Log Level Counts", "Top 10 Endpoints"]
        assert set(rep1.directories) == {str(run_dir)}

    def test_failing_reporter_does_not_block_others(self, settings, caplog) -> None:
        manager = _manager(settings, LevelCountAggregator(), TopAttributeAggregator())
        ok = RecordingReporter()
        manager.add_reporter(BrokenReporter())
        manager.add_reporter(ok)
        manager.generate_report()
        assert ok.titles == ["Log Level Counts", "Top 10 Endpoints"]
        assert "BrokenReporter failed" in caplog.text

    def test_reporter_told_run_directory_before_each_report(self, settings) -> None:
        manager = _manager(settings, LevelCountAggregator(), TopAttributeAggregator())
        reporter = mock.Mock()
        manager.add_reporter(reporter)
        run_dir = manager.generate_report()
        assert reporter.report.call_count == 2
        reporter.set_output_directory.assert_called_with(str(run_dir))
        names = [name for name, _, _ in reporter.method_calls]
        assert names == ["set_output_directory", "report", "set_output_directory", "report"]

    def test_failing_aggregator_skipped(self, settings) -> None:
        manager = _manager(settings, BrokenAggregator(), LevelCountAggregator())
        rep = RecordingReporter()
        manager.add_reporter(rep)
        manager.generate_report()
        assert rep.titles == ["Log Level Counts"]

    def test_run_is_process_then_report(self, settings, tmp_log_file, json_log_lines) -> None:
        manager = _manager(settings, LevelCountAggregator())
        manager.add_reporter(CsvReporter())
        run_dir = manager.run([tmp_log_file(json_log_lines)])
        text = (run_dir / "Log_Level_Counts.csv").read_text(encoding="utf-8")
        assert text.splitlines()[0] == "Log Level,Count"
        assert "ERROR,1" in text
