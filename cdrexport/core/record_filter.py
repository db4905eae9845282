"""Billing filter — decides whether a record is exported at all."""

from __future__ import annotations

from cdrexport.models.records import AmaFlag, CallRecord


class RecordFilter:
    """Passes only BILLING records when filtering is enabled.

    A rejected record is a skip, not a failure: the dispatcher treats it
    as handled.
    """

    billing_flag: AmaFlag = AmaFlag.BILLING

    def should_dispatch(self, filter_enabled: bool, record: CallRecord) -> bool:
        if not filter_enabled:
            return True
        return record.amaflags is self.billing_flag
