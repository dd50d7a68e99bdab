"""Logflow command line entry point.

Commands:
    logflow run     <file>...   Parse, filter, aggregate and report
    logflow plugins             List available parsers, filters, aggregators, reporters
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import get_settings
from .errors import LogflowError, UnknownPluginError
from .manager import ProcessingManager
from .plugins.registry import KINDS, PluginRegistry, builtin_registry, parse_plugin_spec

console = Console()
err_console = Console(stderr=True)

DEFAULT_AGGREGATORS = ("level-count",)
DEFAULT_REPORTERS = ("console",)

# ── Helpers ─────────────────────────────────────────────────────────────────


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_registry() -> PluginRegistry:
    registry = builtin_registry()
    registry.discover()
    return registry


def _build(registry: PluginRegistry, kind: str, specs: tuple[str, ...], option: str) -> list[Any]:
    """Turn ``id:key=value,...`` specs into plugin instances."""
    plugins = []
    for spec in specs:
        try:
            plugin_id, options = parse_plugin_spec(spec)
            plugins.append(registry.create(kind, plugin_id, options))
        except LogflowError as exc:
            raise click.BadParameter(str(exc), param_hint=option) from exc
    return plugins


# ── CLI root ─────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version="1.0.0", prog_name="logflow")
def main() -> None:
    """logflow: streaming log aggregation with pluggable parsers and reporters."""


# ── run ──────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--parser", "-p", "parsers", multiple=True,
    help="Parser id, in priority order (default: json, apache).",
)
@click.option(
    "--filter", "-F", "filters", multiple=True,
    help="Filter spec, e.g. 'regex:field=level,regex=ERROR|WARN'.",
)
@click.option(
    "--aggregator", "-a", "aggregators", multiple=True,
    help="Aggregator spec, e.g. 'top-endpoints:top_n=5' (default: level-count).",
)
@click.option(
    "--reporter", "-r", "reporters", multiple=True,
    help="Reporter id: console, csv, json (default: console).",
)
@click.option(
    "--output-dir", "-o", type=click.Path(file_okay=False, path_type=Path), default=None,
    help="Parent folder for the run directory (default: $LOGFLOW_OUTPUT_DIR or ./reports).",
)
@click.option("--verbose", "-v", count=True, help="-v for INFO, -vv for DEBUG logging.")
def run(
    files: tuple[Path, ...],
    parsers: tuple[str, ...],
    filters: tuple[str, ...],
    aggregators: tuple[str, ...],
    reporters: tuple[str, ...],
    output_dir: Path | None,
    verbose: int,
) -> None:
    """Aggregate one or more log files and render the results.

    Each file's dialect is detected from its first non-blank line.
    Filters are ANDed together.

    \b
    Examples:
      logflow run app.json
      logflow run access.log -a top-endpoints:top_n=5 -a error-rate -r console -r csv
      logflow run app.log -p application -F 'regex:field=logger,regex=^com\\.shop'
      logflow run access.log -F time-range:start=2025-09-18T16:00:00Z
    """
    overrides: dict[str, Any] = {}
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    settings = get_settings(**overrides)
    level = {0: settings.log_level, 1: "INFO"}.get(verbose, "DEBUG")
    _configure_logging(level)

    registry = _load_registry()
    try:
        parser_objs = [registry.create_parser(pid) for pid in parsers]
    except UnknownPluginError as exc:
        raise click.BadParameter(str(exc), param_hint="--parser") from exc

    try:
        manager = ProcessingManager(parsers=parser_objs, settings=settings, registry=registry)
    except LogflowError as exc:
        raise click.ClickException(f"LOGFLOW_PARSERS: {exc}") from exc
    for f in _build(registry, "filter", filters, "--filter"):
        manager.add_filter(f)
    for agg in _build(registry, "aggregator", aggregators or DEFAULT_AGGREGATORS, "--aggregator"):
        manager.add_aggregator(agg)
    for rep in _build(registry, "reporter", reporters or DEFAULT_REPORTERS, "--reporter"):
        manager.add_reporter(rep)

    summary = manager.process_files(files)
    run_dir = manager.generate_report()

    err_console.print(f"\n[dim]{summary}[/dim]")
    err_console.print(f"[dim]Run directory: {escape(str(run_dir))}[/dim]")
    if summary.files_processed == 0:
        raise click.ClickException("No input file could be processed.")


# ── plugins ──────────────────────────────────────────────────────────────────


@main.command()
def plugins() -> None:
    """List every registered plugin id."""
    registry = _load_registry()
    tbl = Table(title="Available plugins", box=box.ROUNDED)
    tbl.add_column("Kind", style="bold")
    tbl.add_column("Id", style="cyan")
    tbl.add_column("Description")
    for kind in KINDS:
        for plugin_id, description in registry.describe(kind):
            tbl.add_row(kind, plugin_id, description)
    console.print(tbl)


if __name__ == "__main__":
    main()
