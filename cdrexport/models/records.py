"""Call detail record models — the read-only input of every dispatch."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import IntEnum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# strftime format used when rendering start/answer/end into the namespace
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class AmaFlag(IntEnum):
    """Billing classification of a call (Automated Message Accounting)."""

    NONE = 0
    OMIT = 1
    BILLING = 2
    DOCUMENTATION = 3

    @property
    def label(self) -> str:
        if self is AmaFlag.NONE:
            return "Unknown"
        return self.name

    @classmethod
    def parse(cls, value: Any) -> AmaFlag:
        """Accept an AmaFlag, its numeric value, or its name.

        ``"default"`` maps to DOCUMENTATION; anything unrecognised is NONE.
        """
        if isinstance(value, AmaFlag):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return cls.NONE
        text = str(value).strip()
        if text.isdigit():
            return cls.parse(int(text))
        if text.lower() == "default":
            return cls.DOCUMENTATION
        return cls.__members__.get(text.upper(), cls.NONE)


class CallRecord(BaseModel):
    """Point-in-time snapshot of one completed call.

    The record is frozen, ``variables`` included (stored as a read-only
    copy): the dispatcher only borrows it for the duration of a single
    dispatch.  Standard CDR attributes and custom ``variables``
    together form the namespace that templates are resolved against.

    Examples
    --------
    >>> record = CallRecord(dst="12345", amaflags="billing")
    >>> record.amaflags
    <AmaFlag.BILLING: 2>
    >>> record.namespace()["dst"]
    '12345'
    """

    model_config = ConfigDict(frozen=True)

    clid: str = ""
    src: str = ""
    dst: str = ""
    dcontext: str = ""
    channel: str = ""
    dstchannel: str = ""
    lastapp: str = ""
    lastdata: str = ""
    start: datetime | None = None
    answer: datetime | None = None
    end: datetime | None = None
    duration: int = 0
    billsec: int = 0
    disposition: str = ""
    amaflags: AmaFlag = AmaFlag.DOCUMENTATION
    accountcode: str = ""
    peeraccount: str = ""
    uniqueid: str = ""
    linkedid: str = ""
    userfield: str = ""
    sequence: int = 0
    variables: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("amaflags", mode="before")
    @classmethod
    def _coerce_amaflags(cls, value: Any) -> AmaFlag:
        return AmaFlag.parse(value)

    @field_validator("variables")
    @classmethod
    def _freeze_variables(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        # private copy; the caller keeps ownership of the mapping it passed in
        return MappingProxyType(dict(value))

    @field_serializer("variables")
    def _dump_variables(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)

    @property
    def is_billing(self) -> bool:
        return self.amaflags is AmaFlag.BILLING

    def standard_fields(self) -> dict[str, str]:
        """Render the standard CDR attributes as strings."""
        rendered: dict[str, str] = {}
        for name in type(self).model_fields:
            if name == "variables":
                continue
            value = getattr(self, name)
            if value is None:
                rendered[name] = ""
            elif isinstance(value, datetime):
                rendered[name] = value.strftime(TIMESTAMP_FORMAT)
            elif isinstance(value, AmaFlag):
                rendered[name] = value.label
            else:
                rendered[name] = str(value)
        return rendered

    def namespace(self) -> dict[str, str]:
        """Variables visible to template substitution.

        Standard attributes shadow custom variables of the same name.
        """
        merged = dict(self.variables)
        merged.update(self.standard_fields())
        return merged
