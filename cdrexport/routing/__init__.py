"""cdrexport routing — hands evaluated records to named storage engines.

The CdrDispatcher evaluates the active column templates for each
completed call and writes the result through the EngineRegistry, which
resolves the configured engine name at write time.  Engines are
pluggable: a JSON-lines file, a SQLite table, or anything implementing
the StorageEngine protocol.
"""
