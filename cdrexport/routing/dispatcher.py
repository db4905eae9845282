"""CdrDispatcher — evaluates the active columns for a record and writes them.

Per record:

1. snapshot the active FieldTable and evaluate every column while holding
   the config store's lock, so a concurrent reload can never produce a
   record mixing two table generations;
2. release the lock;
3. hand the ordered values to the storage engine selected by name.

The write can be slow and is never done under the lock.  Nothing in here
raises to the caller: empty configuration, missing records, filtered
records, evaluation errors and engine failures are logged and absorbed.
"""

from __future__ import annotations

import logging

from cdrexport.core.config_store import ConfigStore
from cdrexport.core.record_filter import RecordFilter
from cdrexport.core.template import TemplateEvaluator
from cdrexport.models.fields import DispatchedField, FieldTable
from cdrexport.models.records import CallRecord
from cdrexport.routing.engines import EngineRegistry

logger = logging.getLogger(__name__)


class CdrDispatcher:
    """Routes each completed call record to the configured storage engine.

    The dispatcher holds no state of its own between calls.

    Usage
    -----
    >>> dispatcher = CdrDispatcher(store, registry)
    >>> dispatcher.dispatch(record)
    """

    def __init__(
        self,
        store: ConfigStore,
        registry: EngineRegistry,
        evaluator: TemplateEvaluator | None = None,
        record_filter: RecordFilter | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._evaluator = evaluator or TemplateEvaluator()
        self._filter = record_filter or RecordFilter()

    @property
    def evaluator(self) -> TemplateEvaluator:
        return self._evaluator

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, table: FieldTable, record: CallRecord) -> list[DispatchedField]:
        """Evaluate every column of *table* for *record*, in column order."""
        namespace = record.namespace()
        return [
            DispatchedField(
                name=field.name,
                value=self._evaluator.render(field.template, namespace),
            )
            for field in table.fields
        ]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, record: CallRecord | None) -> None:
        """Export one record.  Never raises."""
        if record is None:
            logger.warning("No CDR supplied, skipping")
            return

        with self._store.hold() as table:
            if table.is_empty:
                logger.warning("No fields configured for export, skipping CDR update")
                return

            engine_name = table.engine_name
            if table.filter_enabled:
                logger.debug(
                    "%s - billing flag is %s", record.channel, record.amaflags.label
                )
                if not self._filter.should_dispatch(table.filter_enabled, record):
                    logger.debug(
                        "%s - skip writing CDR to engine %s - non billing record",
                        record.channel,
                        engine_name,
                    )
                    return

            try:
                values = self.evaluate(table, record)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "%s - error evaluating CDR for engine %s: %s",
                    record.channel,
                    engine_name,
                    exc,
                )
                return

        if not values:
            logger.error(
                "%s - no data to send to engine %s", record.channel, engine_name
            )
            return

        try:
            self._registry.write(engine_name, values)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "%s - error writing CDR to engine %s: %s",
                record.channel,
                engine_name,
                exc,
            )
            return

        logger.debug("%s - wrote CDR to engine %s", record.channel, engine_name)
