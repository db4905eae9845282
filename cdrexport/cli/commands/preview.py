"""``cdrexport preview RECORD`` — evaluate the columns for one record.

RECORD is a JSON file holding a single call record.  The output shows the
values that would be sent to the storage engine; nothing is written.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from cdrexport.config import config
from cdrexport.core.config_loader import ConfigLoader, ConfigSourceError
from cdrexport.core.config_store import ConfigStore
from cdrexport.core.record_filter import RecordFilter
from cdrexport.core.template import TemplateEvaluator
from cdrexport.models.records import CallRecord
from cdrexport.routing.dispatcher import CdrDispatcher
from cdrexport.routing.engines import EngineRegistry

console = Console()


def preview_cmd(
    record_file: Path = typer.Argument(
        ...,
        help="JSON file containing one call record.",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the INI column configuration (default: CDREXPORT_CONFIG_PATH).",
    ),
) -> None:
    """Show the evaluated columns for a single call record."""
    try:
        record = CallRecord.model_validate(json.loads(record_file.read_text("utf-8")))
    except (OSError, ValueError, ValidationError) as exc:
        console.print(f"[bold red]Cannot read record:[/bold red] {exc}")
        raise typer.Exit(code=1)

    try:
        table = ConfigLoader(ConfigStore(), config_path or config.config_path).read_table()
    except ConfigSourceError as exc:
        console.print(
            f"[bold red]Configuration {exc.outcome.value}:[/bold red] {exc}"
        )
        raise typer.Exit(code=1)

    if not RecordFilter().should_dispatch(table.filter_enabled, record):
        console.print(
            f"[yellow]Record would be skipped:[/yellow] amaflags={record.amaflags.label}, "
            "filter accepts BILLING only"
        )
        return

    dispatcher = CdrDispatcher(
        ConfigStore(table),
        EngineRegistry(),
        TemplateEvaluator(config.substitution_buffer_size),
    )
    values = dispatcher.evaluate(table, record)

    grid = Table(title=f"Engine {table.engine_name}")
    grid.add_column("Name", style="cyan")
    grid.add_column("Value")
    for item in values:
        grid.add_row(item.name, item.value)
    console.print(grid)
