"""cdrexport data models — all Pydantic v2, all frozen (immutable)."""

from cdrexport.models.fields import (
    DEFAULT_ENGINE_NAME,
    DispatchedField,
    FieldDefinition,
    FieldTable,
)
from cdrexport.models.outcomes import LoadOutcome
from cdrexport.models.records import AmaFlag, CallRecord

__all__ = [
    # fields
    "DEFAULT_ENGINE_NAME",
    "FieldDefinition",
    "FieldTable",
    "DispatchedField",
    # records
    "AmaFlag",
    "CallRecord",
    # outcomes
    "LoadOutcome",
]
