"""cdrexport: Customizable Realtime CDR export.

Completed call records are mapped through a hot-reloadable set of named
column templates and written to a storage engine selected by name:
  - INI column configuration with atomic, lock-guarded reload
  - ``${VAR}`` / ``${CDR(field)}`` template substitution into bounded values
  - optional AMA BILLING filter
  - pluggable engines (JSON lines, SQLite, or any StorageEngine)
"""

__version__ = "0.1.0"
__description__ = "Template-driven realtime CDR export to pluggable storage engines"

from cdrexport.core.backend import CdrBackend
from cdrexport.models.records import AmaFlag, CallRecord
from cdrexport.routing.engines import EngineRegistry, StorageEngine

__all__ = [
    "CdrBackend",
    "CallRecord",
    "AmaFlag",
    "EngineRegistry",
    "StorageEngine",
    "__version__",
]
