"""Field table models — the unit of atomic configuration reload.

A ``FieldTable`` is built in full by the config loader and then swapped
into the config store as one immutable object, so ``engine_name``,
``filter_enabled`` and ``fields`` always come from the same load.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ENGINE_NAME = "CDR"


class FieldDefinition(BaseModel):
    """One configured output column: a name and its template expression."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    template: str = ""


class DispatchedField(BaseModel):
    """The evaluated value of a FieldDefinition for one call record."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str = ""


class FieldTable(BaseModel):
    """The active set of column templates plus engine name and filter flag.

    ``fields`` keeps source order; dispatched values are produced in the
    same order.

    Examples
    --------
    >>> table = FieldTable(
    ...     engine_name="cdr_pg",
    ...     fields=(FieldDefinition(name="dst", template="${dst}"),),
    ... )
    >>> table.column_names
    ['dst']
    >>> table.filter_enabled
    False
    """

    model_config = ConfigDict(frozen=True)

    engine_name: str = DEFAULT_ENGINE_NAME
    filter_enabled: bool = False
    fields: tuple[FieldDefinition, ...] = ()

    @classmethod
    def empty(cls) -> FieldTable:
        """The table held before the first load and after shutdown."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.fields

    @property
    def column_names(self) -> list[str]:
        return [f.name for f in self.fields]
