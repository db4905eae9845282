"""Hashing helpers for change detection of the column configuration."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from cdrexport.models.fields import FieldTable


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_table_hash(table: FieldTable) -> str:
    """SHA-256 of a field table, column order included.

    Two loads that produce the same engine, filter flag and ordered
    columns hash identically regardless of comments or whitespace in
    the source file.
    """
    payload = {
        "engine_name": table.engine_name,
        "filter_enabled": table.filter_enabled,
        "fields": [[f.name, f.template] for f in table.fields],
    }
    return sha256_hex(canonical_json_bytes(payload))
