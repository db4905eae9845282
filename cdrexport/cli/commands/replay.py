"""``cdrexport replay RECORDS`` — push recorded CDRs through a backend.

RECORDS is a JSON-lines file, one call record per line.  A backend is
initialized from the column configuration, one of the bundled engines is
registered under the configured engine name, and every record is
dispatched exactly as a live call would be.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from cdrexport.config import config
from cdrexport.core.backend import CdrBackend
from cdrexport.models.records import CallRecord
from cdrexport.routing.engines import EngineRegistry, StorageEngine
from cdrexport.routing.engines.local_file import LocalFileEngine
from cdrexport.routing.engines.sqlite import SqliteEngine

console = Console()


class EngineKind(str, Enum):
    LOCAL_FILE = "local_file"
    SQLITE = "sqlite"


def _build_engine(kind: EngineKind, data_dir: Path, engine_name: str) -> StorageEngine:
    if kind is EngineKind.SQLITE:
        return SqliteEngine(data_dir / "cdr.db", engine_name=engine_name)
    return LocalFileEngine(data_dir, engine_name=engine_name)


def replay_cmd(
    records_file: Path = typer.Argument(
        ...,
        help="JSON-lines file, one call record per line.",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the INI column configuration (default: CDREXPORT_CONFIG_PATH).",
    ),
    engine: EngineKind = typer.Option(
        EngineKind.LOCAL_FILE,
        "--engine",
        "-e",
        help="Bundled storage engine to register under the configured engine name.",
    ),
    data_dir: Path = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Directory for engine output (default: CDREXPORT_ENGINE_DATA_PATH).",
    ),
) -> None:
    """Dispatch every record of a JSON-lines file through a fresh backend."""
    registry = EngineRegistry()
    backend = CdrBackend(registry=registry, config_path=config_path)
    if not backend.initialize():
        console.print(
            f"[bold red]Backend declined:[/bold red] configuration "
            f"{backend.loader.config_path} is missing or invalid"
        )
        raise typer.Exit(code=1)

    table = backend.field_table
    target_dir = data_dir or config.engine_data_path
    registry.register(_build_engine(engine, target_dir, table.engine_name))

    dispatched = 0
    rejected = 0
    try:
        with records_file.open(encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                if not line.strip():
                    continue
                try:
                    record = CallRecord.model_validate(json.loads(line))
                except (ValueError, ValidationError) as exc:
                    console.print(f"[yellow]line {lineno}: skipped[/yellow] {exc}")
                    rejected += 1
                    continue
                backend.write(record)
                dispatched += 1
    except OSError as exc:
        console.print(f"[bold red]Cannot read records:[/bold red] {exc}")
        raise typer.Exit(code=1)
    finally:
        backend.shutdown()

    console.print(
        Panel(
            "\n".join([
                f"[bold]Engine:[/bold]      {table.engine_name} ({engine.value})",
                f"[bold]Output:[/bold]      {target_dir}",
                f"[bold]Columns:[/bold]     {len(table.fields)}",
                f"[bold]Filter:[/bold]      {'BILLING only' if table.filter_enabled else 'off'}",
                f"[bold]Dispatched:[/bold]  {dispatched}",
                f"[bold]Unparseable:[/bold] {rejected}",
            ]),
            title="[bold]cdrexport replay[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
