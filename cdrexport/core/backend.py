"""CdrBackend — lifecycle wiring for the realtime CDR export.

The host calls ``initialize()`` once at startup, ``write(record)`` for
every completed call, ``reload()`` whenever an operator asks for it, and
``shutdown()`` on unload.  ``write`` and ``reload`` may be called from any
number of threads at once.

Lifecycle::

    UNINITIALIZED --initialize()--> ACTIVE --shutdown()--> SHUT_DOWN
                         |             ^  |
                      decline          reload()
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from pathlib import Path

from cdrexport.config import config
from cdrexport.core.config_loader import ConfigLoader
from cdrexport.core.config_store import ConfigStore
from cdrexport.core.template import TemplateEvaluator
from cdrexport.models.fields import FieldTable
from cdrexport.models.records import CallRecord
from cdrexport.routing.dispatcher import CdrDispatcher
from cdrexport.routing.engines import EngineRegistry

logger = logging.getLogger(__name__)

BACKEND_NAME = "cdr_realtime"
BACKEND_DESCRIPTION = "Customizable Realtime CDR Backend"


class BackendState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DECLINED = "declined"
    SHUT_DOWN = "shut_down"


class CdrBackend:
    """Owns the config store, loader and dispatcher of one export backend.

    Parameters
    ----------
    registry:
        Storage engines available to the dispatcher.
    config_path:
        INI column configuration.  Defaults to ``config.config_path``.
    buffer_size:
        Substitution buffer size.  Defaults to
        ``config.substitution_buffer_size``.
    """

    name = BACKEND_NAME
    description = BACKEND_DESCRIPTION

    def __init__(
        self,
        registry: EngineRegistry | None = None,
        config_path: Path | str | None = None,
        buffer_size: int | None = None,
    ) -> None:
        self._registry = registry or EngineRegistry()
        self._store = ConfigStore()
        self._loader = ConfigLoader(self._store, config_path)
        self._dispatcher = CdrDispatcher(
            self._store,
            self._registry,
            TemplateEvaluator(buffer_size or config.substitution_buffer_size),
        )
        self._state = BackendState.UNINITIALIZED
        self._state_lock = threading.Lock()

    @property
    def state(self) -> BackendState:
        return self._state

    @property
    def registry(self) -> EngineRegistry:
        return self._registry

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def loader(self) -> ConfigLoader:
        return self._loader

    @property
    def dispatcher(self) -> CdrDispatcher:
        return self._dispatcher

    @property
    def field_table(self) -> FieldTable:
        return self._store.snapshot()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> bool:
        """First load.  Returns False (decline) if the config is unusable."""
        with self._state_lock:
            if self._state is BackendState.ACTIVE:
                return True
            outcome = self._loader.load(is_reload=False)
            if not outcome.ok:
                self._state = BackendState.DECLINED
                return False
            self._state = BackendState.ACTIVE
        logger.info("%s: %s activated", self.name, self.description)
        return True

    def reload(self) -> bool:
        """Re-read the config; keeps the current table on any failure."""
        with self._state_lock:
            if self._state is not BackendState.ACTIVE:
                logger.warning(
                    "%s: reload requested while %s", self.name, self._state.value
                )
                return False
            return self._loader.load(is_reload=True).ok

    def shutdown(self) -> None:
        """Release the field table; later writes become no-ops."""
        with self._state_lock:
            self._state = BackendState.SHUT_DOWN
            self._store.clear()
            self._loader.forget()
        logger.info("%s: shut down", self.name)

    # ------------------------------------------------------------------
    # Per-call entry point
    # ------------------------------------------------------------------

    def write(self, record: CallRecord | None) -> None:
        """Export one completed call record.  Never raises."""
        self._dispatcher.dispatch(record)
