"""Exceptions raised at the edges of the reconciliation engine.

The engine's arithmetic never raises; these are raised while validating raw
input before it reaches the engine and by the submission workflow.
"""

from typing import Any


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class InvalidInputError(ReconciliationError, ValueError):
    """A raw input field could not be accepted."""

    def __init__(self, field: str, value: Any, reason: str = "invalid value"):
        super().__init__(f"{field}: {reason} ({value!r})", details={"field": field})
        self.field = field
        self.value = value
        self.reason = reason


class InvalidAmountError(InvalidInputError):
    """A monetary field is not a finite number, or is negative where it must not be."""

    pass


class InvalidDateError(InvalidInputError):
    """A date field is missing or not an ISO calendar date."""

    pass


class DuplicateReportError(ReconciliationError):
    """A report already exists for the (store, date) being submitted."""

    def __init__(self, store_id: str, report_date: Any, existing_id: str):
        super().__init__(
            f"Report {existing_id} already exists for store {store_id} on {report_date}",
            details={"store_id": store_id, "date": str(report_date), "report_id": existing_id},
        )
        self.store_id = store_id
        self.report_date = report_date
        self.existing_id = existing_id


class ReportLockedError(ReconciliationError):
    """A locked phase of the daily entry was modified."""

    pass
