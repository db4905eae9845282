"""ConfigLoader — builds FieldTables from the INI column configuration.

Source layout::

    [general]
    engine = cdr_pg          ; storage engine name, default "CDR"
    filter = yes             ; only export BILLING records

    [columns]
    calldate = ${start}
    dst      = ${dst}

A table is always built in full before it is installed; the config
store's lock is only taken for the reference swap.  A reload whose source
is byte-for-byte (or column-for-column) identical reports UNCHANGED and
leaves the installed table object in place.
"""

from __future__ import annotations

import configparser
import logging
import os
import threading
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from cdrexport.config import config
from cdrexport.core.config_store import ConfigStore
from cdrexport.core.hasher import compute_table_hash, sha256_hex
from cdrexport.models.fields import FieldDefinition, FieldTable
from cdrexport.models.outcomes import LoadOutcome

logger = logging.getLogger(__name__)

GENERAL_SECTION = "general"
COLUMNS_SECTION = "columns"

_TRUTHY = frozenset({"yes", "true", "y", "t", "1", "on"})

# keeps a literal [DEFAULT] section from leaking keys into [columns]
_NO_DEFAULT_SECTION = "\x00defaults"


class ConfigSourceError(RuntimeError):
    """Raised when the column configuration is absent or malformed."""

    def __init__(self, outcome: LoadOutcome, message: str) -> None:
        super().__init__(message)
        self.outcome = outcome


class SourceFingerprint(BaseModel):
    """Identity of one loaded configuration source."""

    model_config = ConfigDict(frozen=True)

    mtime_ns: int
    size: int
    digest: str
    table_hash: str = ""


def is_truthy(value: str | None) -> bool:
    """Boolean-like config value: yes/true/y/t/1/on, case-insensitive."""
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        delimiters=("=>", "="),
        comment_prefixes=(";", "#"),
        inline_comment_prefixes=(";",),
        interpolation=None,
        strict=True,
        default_section=_NO_DEFAULT_SECTION,
    )
    # column names are case-sensitive
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


class ConfigLoader:
    """Loads the column configuration and installs it into a ConfigStore.

    Parameters
    ----------
    store:
        The store shared with the dispatcher.
    config_path:
        INI source.  Defaults to ``config.config_path``.
    default_engine:
        Engine name used when ``[general] engine`` is absent or empty.
    """

    def __init__(
        self,
        store: ConfigStore,
        config_path: Path | str | None = None,
        default_engine: str | None = None,
    ) -> None:
        self._store = store
        self._path = Path(config_path) if config_path else config.config_path
        self._default_engine = default_engine or config.default_engine
        self._reload_lock = threading.Lock()
        self._fingerprint: SourceFingerprint | None = None

    @property
    def config_path(self) -> Path:
        return self._path

    @property
    def fingerprint(self) -> SourceFingerprint | None:
        return self._fingerprint

    # ------------------------------------------------------------------
    # Load / reload
    # ------------------------------------------------------------------

    def load(self, is_reload: bool = False) -> LoadOutcome:
        """Load the source and install a new table if it changed.

        Concurrent calls are serialized.  Failures never touch the
        installed table.
        """
        with self._reload_lock:
            try:
                return self._load_locked(is_reload)
            except ConfigSourceError as exc:
                if is_reload:
                    logger.warning(
                        "Failed to reload configuration file %s: %s", self._path, exc
                    )
                else:
                    logger.error(
                        "Failed to load configuration file %s: %s. Module not activated.",
                        self._path,
                        exc,
                    )
                return exc.outcome

    def _load_locked(self, is_reload: bool) -> LoadOutcome:
        stat = self._stat()
        previous = self._fingerprint

        if (
            is_reload
            and previous is not None
            and previous.mtime_ns == stat.st_mtime_ns
            and previous.size == stat.st_size
        ):
            logger.info("CDR config unchanged, skipping reload")
            return LoadOutcome.UNCHANGED

        raw = self._read_bytes()
        digest = sha256_hex(raw)
        if is_reload and previous is not None and previous.digest == digest:
            self._fingerprint = previous.model_copy(
                update={"mtime_ns": stat.st_mtime_ns, "size": stat.st_size}
            )
            logger.info("CDR config unchanged, skipping reload")
            return LoadOutcome.UNCHANGED

        table = self.parse(self._decode(raw))
        table_hash = compute_table_hash(table)
        fingerprint = SourceFingerprint(
            mtime_ns=stat.st_mtime_ns,
            size=stat.st_size,
            digest=digest,
            table_hash=table_hash,
        )

        if is_reload and previous is not None and previous.table_hash == table_hash:
            # only comments or whitespace changed
            self._fingerprint = fingerprint
            logger.info("CDR config columns unchanged, skipping reload")
            return LoadOutcome.UNCHANGED

        self._store.install(table)
        self._fingerprint = fingerprint
        logger.info(
            "CDR config %s: %d columns for engine %s",
            "reloaded" if is_reload else "loaded",
            len(table.fields),
            table.engine_name,
        )
        return LoadOutcome.LOADED

    def forget(self) -> None:
        """Drop the remembered fingerprint so the next reload always rebuilds."""
        with self._reload_lock:
            self._fingerprint = None

    # ------------------------------------------------------------------
    # Source access
    # ------------------------------------------------------------------

    def read_table(self) -> FieldTable:
        """Parse the source into a FieldTable without installing it.

        Raises
        ------
        ConfigSourceError
            If the source is missing or invalid.
        """
        return self.parse(self._decode(self._read_bytes()))

    def _stat(self) -> os.stat_result:
        try:
            return self._path.stat()
        except FileNotFoundError:
            raise ConfigSourceError(
                LoadOutcome.MISSING, f"{self._path} does not exist"
            ) from None
        except OSError as exc:
            raise ConfigSourceError(LoadOutcome.INVALID, str(exc)) from exc

    def _read_bytes(self) -> bytes:
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            raise ConfigSourceError(
                LoadOutcome.MISSING, f"{self._path} does not exist"
            ) from None
        except OSError as exc:
            raise ConfigSourceError(LoadOutcome.INVALID, str(exc)) from exc

    @staticmethod
    def _decode(raw: bytes) -> str:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigSourceError(
                LoadOutcome.INVALID, f"not valid UTF-8: {exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, text: str) -> FieldTable:
        """Build a FieldTable from INI text.

        Raises
        ------
        ConfigSourceError
            With outcome INVALID on any parse error.
        """
        parser = _new_parser()
        # leading whitespace is insignificant; there are no continuation lines
        flattened = "\n".join(line.lstrip() for line in text.splitlines())
        try:
            parser.read_string(flattened, source=str(self._path))
        except configparser.Error as exc:
            raise ConfigSourceError(LoadOutcome.INVALID, str(exc)) from exc

        engine = self._default_engine
        filter_enabled = False
        if parser.has_section(GENERAL_SECTION):
            # setting names match case-insensitively, unlike column names
            general = {
                key.lower(): value for key, value in parser.items(GENERAL_SECTION)
            }
            configured = general.get("engine", "").strip()
            if configured:
                engine = configured
            else:
                logger.info(
                    "No general/engine configured, using built-in engine name %s",
                    engine,
                )
            filter_enabled = is_truthy(general.get("filter"))
        else:
            logger.info(
                "No [general] section, using built-in engine name %s", engine
            )
        logger.info("CDR flow goes to engine %s", engine)
        if filter_enabled:
            logger.info("CDR filter enabled: only amaflags=BILLING records are exported")

        fields: list[FieldDefinition] = []
        if parser.has_section(COLUMNS_SECTION):
            for name, template in parser.items(COLUMNS_SECTION):
                fields.append(FieldDefinition(name=name, template=template))
                logger.info("Added column %s -> %s", name, template)

        return FieldTable(
            engine_name=engine,
            filter_enabled=filter_enabled,
            fields=tuple(fields),
        )
