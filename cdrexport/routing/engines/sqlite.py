"""SQLite engine — stores each record as a row of a per-engine table.

Columns are created on demand as TEXT the first time a field name is
seen, so reloading the column configuration with new names needs no
migration.  Values are always stored as the evaluated strings.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from cdrexport.models.fields import DispatchedField
from cdrexport.routing.engines import EngineWriteError


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class SqliteEngine:
    """Inserts records into ``table`` (default: the engine name).

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    engine_name:
        Name the engine is registered and selected by.
    table:
        Target table; defaults to *engine_name*.
    """

    def __init__(
        self, db_path: Path | str, engine_name: str = "CDR", table: str | None = None
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._name = engine_name
        self._table = table or engine_name
        self._lock = threading.Lock()
        self._columns: set[str] | None = None

    @property
    def engine_name(self) -> str:
        return self._name

    @property
    def table(self) -> str:
        return self._table

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_columns(self, conn: sqlite3.Connection, names: Sequence[str]) -> None:
        if self._columns is None:
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {_quote(self._table)} "
                "(cdrexport_id INTEGER PRIMARY KEY AUTOINCREMENT)"
            )
            rows = conn.execute(f"PRAGMA table_info({_quote(self._table)})").fetchall()
            self._columns = {row[1] for row in rows}
        for name in names:
            if name not in self._columns:
                conn.execute(
                    f"ALTER TABLE {_quote(self._table)} "
                    f"ADD COLUMN {_quote(name)} TEXT NOT NULL DEFAULT ''"
                )
                self._columns.add(name)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write(self, fields: Sequence[DispatchedField]) -> None:
        """Insert one record as a new row."""
        names = [f.name for f in fields]
        sql = (
            f"INSERT INTO {_quote(self._table)} "
            f"({', '.join(_quote(n) for n in names)}) "
            f"VALUES ({', '.join('?' for _ in names)})"
        )
        try:
            with self._lock:
                conn = self._connect()
                try:
                    self._ensure_columns(conn, names)
                    conn.execute(sql, [f.value for f in fields])
                    conn.commit()
                finally:
                    conn.close()
        except sqlite3.Error as exc:
            # the cached column set may no longer match the database
            self._columns = None
            raise EngineWriteError(f"{self._db_path}:{self._table}: {exc}") from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def fetch_all(self) -> list[dict[str, Any]]:
        """Return every stored row (without the row id column), oldest first."""
        conn = self._connect()
        conn.row_factory = sqlite3.Row
        try:
            rows = conn.execute(
                f"SELECT * FROM {_quote(self._table)} ORDER BY cdrexport_id"
            ).fetchall()
        except sqlite3.OperationalError:
            return []
        finally:
            conn.close()
        return [{k: row[k] for k in row.keys() if k != "cdrexport_id"} for row in rows]
