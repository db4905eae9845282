"""Shared test fixtures for cdrexport."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from cdrexport.core.config_store import ConfigStore
from cdrexport.models.fields import FieldDefinition, FieldTable
from cdrexport.models.records import AmaFlag, CallRecord
from cdrexport.routing.engines import EngineRegistry

BASIC_CONFIG = """\
[general]
engine = cdr_test
filter = no

[columns]
src = ${src}
dst = ${dst}
disposition = ${CDR(disposition)}
"""


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def store() -> ConfigStore:
    """Provide an empty ConfigStore."""
    return ConfigStore()


@pytest.fixture
def registry() -> EngineRegistry:
    """Provide an EngineRegistry with nothing registered."""
    return EngineRegistry()


@pytest.fixture
def basic_config() -> str:
    """INI text with engine cdr_test, filter off and three columns."""
    return BASIC_CONFIG


@pytest.fixture
def config_file(tmp_dir: Path) -> Path:
    """Path of the INI column configuration used by a test (not yet written)."""
    return tmp_dir / "cdr_realtime.conf"


# ---------------------------------------------------------------------------
# Factories — shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def write_config(config_file: Path) -> Callable[[str], Path]:
    """Factory fixture: (re)write the INI source, always moving its mtime.

    Filesystem timestamps can be coarser than two consecutive writes, so
    every rewrite pushes the mtime one second past the previous one.
    """

    def _write(text: str) -> Path:
        previous = config_file.stat().st_mtime_ns if config_file.exists() else None
        config_file.write_text(text, encoding="utf-8")
        if previous is not None:
            bumped = previous + 1_000_000_000
            os.utime(config_file, ns=(bumped, bumped))
        return config_file

    return _write


@pytest.fixture
def make_call_record() -> Callable[..., CallRecord]:
    """Factory fixture: build a CallRecord with sensible defaults."""

    def _factory(
        dst: str = "12345",
        amaflags: AmaFlag | str | int = AmaFlag.BILLING,
        **overrides: Any,
    ) -> CallRecord:
        defaults: dict[str, Any] = {
            "src": "1001",
            "dst": dst,
            "channel": "PJSIP/1001-00000001",
            "dcontext": "from-internal",
            "disposition": "ANSWERED",
            "duration": 42,
            "billsec": 37,
            "amaflags": amaflags,
            "uniqueid": "1700000000.1",
        }
        defaults.update(overrides)
        return CallRecord(**defaults)

    return _factory


@pytest.fixture
def make_field_table() -> Callable[..., FieldTable]:
    """Factory fixture: build a FieldTable from (name, template) pairs."""

    def _factory(
        columns: list[tuple[str, str]] | None = None,
        engine_name: str = "cdr_test",
        filter_enabled: bool = False,
    ) -> FieldTable:
        pairs = columns if columns is not None else [("dst", "${dst}")]
        return FieldTable(
            engine_name=engine_name,
            filter_enabled=filter_enabled,
            fields=tuple(FieldDefinition(name=n, template=t) for n, t in pairs),
        )

    return _factory


@pytest.fixture
def call_record(make_call_record: Callable[..., CallRecord]) -> CallRecord:
    """Convenience: a ready-made BILLING CallRecord."""
    return make_call_record()
