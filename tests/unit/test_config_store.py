"""Unit tests for ConfigStore — snapshot, install, hold, clear."""

from __future__ import annotations

import threading

from cdrexport.core.config_store import ConfigStore
from cdrexport.models.fields import FieldTable


class TestConfigStore:
    def test_starts_empty(self, store: ConfigStore):
        assert store.snapshot().is_empty
        assert store.generation == 0

    def test_initial_table(self, make_field_table):
        table = make_field_table()
        assert ConfigStore(table).snapshot() is table

    def test_install_replaces_reference(self, store, make_field_table):
        first = make_field_table(engine_name="a")
        second = make_field_table(engine_name="b")

        assert store.install(first).is_empty
        assert store.install(second) is first
        assert store.snapshot() is second
        assert store.generation == 2

    def test_clear_leaves_empty_table(self, store, make_field_table):
        store.install(make_field_table())
        store.clear()
        assert store.snapshot() == FieldTable.empty()

    def test_hold_yields_current_table(self, store, make_field_table):
        table = make_field_table()
        store.install(table)
        with store.hold() as held:
            assert held is table

    def test_install_waits_for_hold(self, store, make_field_table):
        """An install started while hold() is active lands only after it exits."""
        old = make_field_table(engine_name="old")
        new = make_field_table(engine_name="new")
        store.install(old)

        installed = threading.Event()

        def _install() -> None:
            store.install(new)
            installed.set()

        with store.hold() as held:
            worker = threading.Thread(target=_install)
            worker.start()
            assert not installed.wait(timeout=0.2)
            assert held is old

        worker.join(timeout=5)
        assert installed.is_set()
        assert store.snapshot() is new
