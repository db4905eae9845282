"""Local file engine — appends records to a JSON-lines file.

Layout: {base_path}/{engine_name}.jsonl

Each line is one record, a JSON object whose keys follow the configured
column order.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Sequence
from pathlib import Path

from cdrexport.models.fields import DispatchedField
from cdrexport.routing.engines import EngineWriteError

logger = logging.getLogger(__name__)


class LocalFileEngine:
    """Writes each record as one JSON line.

    Parameters
    ----------
    base_path:
        Directory holding the ``.jsonl`` files.  Defaults to
        ``.cdrexport/engines``.
    engine_name:
        Name the engine is registered and selected by.
    """

    def __init__(
        self, base_path: Path | str | None = None, engine_name: str = "CDR"
    ) -> None:
        self._base = Path(base_path) if base_path else Path(".cdrexport/engines")
        self._base.mkdir(parents=True, exist_ok=True)
        self._name = engine_name
        self._lock = threading.Lock()

    @property
    def engine_name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._base / f"{self._name}.jsonl"

    def write(self, fields: Sequence[DispatchedField]) -> None:
        """Append one record to the engine file."""
        line = json.dumps({f.name: f.value for f in fields}, ensure_ascii=False)
        try:
            with self._lock, self.path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as exc:
            raise EngineWriteError(f"{self.path}: {exc}") from exc

        logger.debug("LocalFileEngine: appended %d columns to %s", len(fields), self.path)

    def read_records(self) -> list[dict[str, str]]:
        """Read back every record written so far."""
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
