"""Main Typer application — imports and registers all CLI commands.

Entry point: ``cdrexport`` (configured via pyproject.toml scripts).

Commands: show-config, preview, replay.
"""

from __future__ import annotations

import logging

import typer

from cdrexport.cli.commands.preview import preview_cmd
from cdrexport.cli.commands.replay import replay_cmd
from cdrexport.cli.commands.show_config import show_config_cmd
from cdrexport.config import config

app = typer.Typer(
    name="cdrexport",
    help="cdrexport: template-driven realtime CDR export to pluggable storage engines.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="show-config", help="Show the parsed column configuration.")(show_config_cmd)
app.command(name="preview", help="Evaluate the columns for one call record.")(preview_cmd)
app.command(name="replay", help="Dispatch recorded CDRs through a backend.")(replay_cmd)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.DEBUG if config.debug else config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app()


if __name__ == "__main__":
    main()
