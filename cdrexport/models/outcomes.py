"""Configuration load outcomes."""

from __future__ import annotations

from enum import Enum


class LoadOutcome(str, Enum):
    """Result of one ConfigLoader.load() call.

    UNCHANGED is only reported on reload.  MISSING and INVALID leave the
    previously installed table active.
    """

    LOADED = "loaded"
    UNCHANGED = "unchanged"
    MISSING = "missing"
    INVALID = "invalid"

    @property
    def ok(self) -> bool:
        return self in (LoadOutcome.LOADED, LoadOutcome.UNCHANGED)
