"""cdrexport CLI — Typer-based operator tooling.

Provides the ``cdrexport`` command with subcommands for inspecting the
column configuration, previewing the values produced for a record, and
replaying recorded CDRs through a backend into a bundled engine.

All output uses Rich for formatted terminal display.
"""
