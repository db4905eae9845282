"""Storage engine protocol and name-keyed registry.

All engines implement the ``StorageEngine`` protocol: an ``engine_name``
property and a ``write(fields)`` method.  The dispatcher never holds an
engine reference; it resolves the configured engine name through the
``EngineRegistry`` at write time.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from cdrexport.models.fields import DispatchedField

logger = logging.getLogger(__name__)


class EngineNotFoundError(LookupError):
    """Raised when no engine is registered under the requested name."""


class EngineWriteError(RuntimeError):
    """Raised by an engine that could not persist a record."""


@runtime_checkable
class StorageEngine(Protocol):
    """Protocol that every storage engine must implement.

    Attributes
    ----------
    engine_name : str
        The name the engine is registered under, matched against the
        ``[general] engine`` setting (e.g. ``"CDR"``, ``"cdr_pg"``).
    """

    @property
    def engine_name(self) -> str:
        """Return the name this engine is selected by."""
        ...

    def write(self, fields: Sequence[DispatchedField]) -> None:
        """Persist one record as an ordered list of name/value pairs.

        Implementations raise on failure; the dispatcher logs the error
        and carries on.

        Parameters
        ----------
        fields:
            Evaluated columns in configured order.  Never empty.
        """
        ...


class EngineRegistry:
    """Name-keyed registry of storage engines.

    Usage
    -----
    >>> registry = EngineRegistry()
    >>> registry.register(local_file_engine)
    >>> registry.write("CDR", fields)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._engines: dict[str, StorageEngine] = {}

    # ------------------------------------------------------------------
    # Engine management
    # ------------------------------------------------------------------

    def register(self, engine: StorageEngine, name: str | None = None) -> None:
        """Register *engine* under *name* (default: its ``engine_name``).

        A later registration under the same name replaces the earlier one.
        """
        key = name or engine.engine_name
        with self._lock:
            replaced = self._engines.get(key)
            self._engines[key] = engine
        if replaced is not None and replaced is not engine:
            logger.info("Replaced storage engine: %s", key)
        else:
            logger.info("Registered storage engine: %s", key)

    def unregister(self, name: str) -> None:
        """Remove the engine registered under *name*, if any."""
        with self._lock:
            removed = self._engines.pop(name, None)
        if removed is not None:
            logger.info("Unregistered storage engine: %s", name)

    def get(self, name: str) -> StorageEngine:
        """Return the engine registered under *name*.

        Raises
        ------
        EngineNotFoundError
            If nothing is registered under *name*.
        """
        with self._lock:
            engine = self._engines.get(name)
        if engine is None:
            raise EngineNotFoundError(f"No storage engine registered as {name!r}")
        return engine

    @property
    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._engines)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._engines

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write(self, engine_name: str, fields: Sequence[DispatchedField]) -> None:
        """Resolve *engine_name* and hand *fields* to that engine."""
        self.get(engine_name).write(fields)
