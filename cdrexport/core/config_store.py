"""ConfigStore — the single lock-guarded handle on the active FieldTable.

The store never mutates a table; it only swaps references.  Readers that
need a consistent view across several operations (the dispatcher
evaluating every column of one record) hold the lock via ``hold()``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from cdrexport.models.fields import FieldTable

logger = logging.getLogger(__name__)


class ConfigStore:
    """Holds exactly one active FieldTable behind one mutex.

    Usage
    -----
    >>> store = ConfigStore()
    >>> store.snapshot().is_empty
    True
    >>> previous = store.install(FieldTable(engine_name="cdr_pg"))
    >>> store.snapshot().engine_name
    'cdr_pg'
    """

    def __init__(self, table: FieldTable | None = None) -> None:
        self._lock = threading.Lock()
        self._table = table if table is not None else FieldTable.empty()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of installs since construction."""
        with self._lock:
            return self._generation

    def snapshot(self) -> FieldTable:
        """Return the current table reference."""
        with self._lock:
            return self._table

    @contextmanager
    def hold(self) -> Iterator[FieldTable]:
        """Yield the current table while keeping the lock held.

        No install can happen until the ``with`` block exits.
        """
        with self._lock:
            yield self._table

    def install(self, table: FieldTable) -> FieldTable:
        """Atomically replace the active table; return the previous one."""
        with self._lock:
            previous = self._table
            self._table = table
            self._generation += 1
            generation = self._generation
        logger.debug(
            "Installed field table generation %d (%d columns, engine %s)",
            generation,
            len(table.fields),
            table.engine_name,
        )
        return previous

    def clear(self) -> None:
        """Drop the active table, leaving the empty one in its place."""
        with self._lock:
            had_fields = not self._table.is_empty
            self._table = FieldTable.empty()
        if had_fields:
            logger.info("Released configured fields")
