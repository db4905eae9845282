"""``cdrexport show-config`` — print the parsed column configuration.

Parses the INI source exactly as the backend would and shows the engine
name, the filter flag, and every column with its template, in export
order.  Nothing is installed or written.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from cdrexport.config import config
from cdrexport.core.config_loader import ConfigLoader, ConfigSourceError
from cdrexport.core.config_store import ConfigStore
from cdrexport.core.hasher import compute_table_hash

console = Console()


def show_config_cmd(
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the INI column configuration (default: CDREXPORT_CONFIG_PATH).",
    ),
) -> None:
    """Show engine, filter and columns of the column configuration."""
    path = config_path or config.config_path
    loader = ConfigLoader(ConfigStore(), path)
    try:
        table = loader.read_table()
    except ConfigSourceError as exc:
        console.print(
            f"[bold red]Configuration {exc.outcome.value}:[/bold red] {exc}"
        )
        raise typer.Exit(code=1)

    console.print(f"[bold]Source:[/bold]  {path}")
    console.print(f"[bold]Engine:[/bold]  {table.engine_name}")
    filter_label = (
        "[green]BILLING only[/green]" if table.filter_enabled else "[dim]off[/dim]"
    )
    console.print(f"[bold]Filter:[/bold]  {filter_label}")
    console.print(f"[bold]Hash:[/bold]    {compute_table_hash(table)[:16]}")

    if table.is_empty:
        console.print("[yellow]No columns configured — every CDR will be skipped.[/yellow]")
        return

    grid = Table(title="Columns")
    grid.add_column("#", justify="right", style="dim")
    grid.add_column("Name", style="cyan")
    grid.add_column("Template")
    for i, field in enumerate(table.fields, start=1):
        grid.add_row(str(i), field.name, field.template)
    console.print(grid)
