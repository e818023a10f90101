"""Two-phase daily entry, submission and administrative amendment.

Start-of-day counts are entered and locked first; end-of-day counts, sales
and expenses are added afterwards. Submission pulls the store's pending POS
checkouts, computes the report once and hands it to the storage
collaborator. Storage itself lives behind ``ReportRepository``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Protocol
from uuid import uuid4

import structlog
from pydantic.alias_generators import to_snake

from eod_recon.config import bind_report_context, clear_report_context
from eod_recon.dates import as_utc
from eod_recon.errors import DuplicateReportError, InvalidInputError, ReportLockedError
from eod_recon.models import (
    DailyReport,
    ExpenseLine,
    ManualSaleLine,
    PosSaleLine,
    PosTransaction,
    ReconciliationStatus,
    ReportInputs,
)
from eod_recon.money import ZERO
from eod_recon.reconciliation import compute_daily_report
from eod_recon.sales import merge_pos_transactions
from eod_recon.schemas import parse_report_inputs

logger = structlog.get_logger(__name__)

START_OF_DAY_FIELDS = frozenset(
    {"sod_gpo", "sod_gcash", "sod_petty_cash", "sod_petty_cash_note", "fund_in", "cash_atm"}
)


class ReportRepository(Protocol):
    """Storage operations the workflow needs."""

    def find_report(self, store_id: str, report_date: date) -> DailyReport | None: ...

    def pending_pos_transactions(self, store_id: str, report_date: date) -> list[PosTransaction]: ...

    def save_report(self, report: DailyReport) -> None: ...

    def link_pos_transactions(self, store_id: str, report_date: date, report_id: str) -> None: ...


@dataclass
class ReportDraft:
    """A daily report being entered. Start-of-day values freeze once locked."""

    sod_gpo: Decimal = ZERO
    sod_gcash: Decimal = ZERO
    sod_petty_cash: Decimal = ZERO
    sod_petty_cash_note: str = ""
    fund_in: Decimal = ZERO
    cash_atm: Decimal = ZERO
    eod_gpo: Decimal = ZERO
    eod_gcash: Decimal = ZERO
    eod_actual_cash: Decimal = ZERO
    custom_sales: list[ManualSaleLine] = field(default_factory=list)
    bank_transfer_fees: Decimal = ZERO
    expenses: list[ExpenseLine] = field(default_factory=list)
    gcash_notebook: Decimal | None = None
    notes: str = ""
    sod_locked: bool = field(default=False, init=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "sod_locked", False):
            if name in START_OF_DAY_FIELDS:
                raise ReportLockedError(f"Start of day is locked; cannot change {name}")
            if name == "sod_locked" and not value:
                raise ReportLockedError("Start of day cannot be unlocked")
        super().__setattr__(name, value)

    @classmethod
    def from_payload(cls, payload: dict[str, Any], *, strict: bool | None = None) -> ReportDraft:
        """Validate an entry-form payload into a draft (start of day unlocked)."""
        inputs = parse_report_inputs(payload, strict=strict)
        return cls(
            sod_gpo=inputs.sod_gpo,
            sod_gcash=inputs.sod_gcash,
            sod_petty_cash=inputs.sod_petty_cash,
            sod_petty_cash_note=inputs.sod_petty_cash_note,
            fund_in=inputs.fund_in,
            cash_atm=inputs.cash_atm,
            eod_gpo=inputs.eod_gpo,
            eod_gcash=inputs.eod_gcash,
            eod_actual_cash=inputs.eod_actual_cash,
            custom_sales=list(inputs.custom_sales),
            bank_transfer_fees=inputs.bank_transfer_fees,
            expenses=list(inputs.expenses),
            gcash_notebook=inputs.gcash_notebook,
            notes=inputs.notes,
        )

    def lock_start_of_day(self) -> None:
        self.sod_locked = True

    def to_inputs(self, pos_lines: tuple[PosSaleLine, ...] | list[PosSaleLine] = ()) -> ReportInputs:
        """Freeze the draft into ReportInputs.

        Raises:
            ReportLockedError: If the start of day was never locked.
        """
        if not self.sod_locked:
            raise ReportLockedError("Start of day must be saved before submitting")
        return ReportInputs(
            sod_gpo=self.sod_gpo,
            sod_gcash=self.sod_gcash,
            sod_petty_cash=self.sod_petty_cash,
            sod_petty_cash_note=self.sod_petty_cash_note,
            fund_in=self.fund_in,
            cash_atm=self.cash_atm,
            eod_gpo=self.eod_gpo,
            eod_gcash=self.eod_gcash,
            eod_actual_cash=self.eod_actual_cash,
            custom_sales=tuple(self.custom_sales),
            pos_sales_details=tuple(pos_lines),
            bank_transfer_fees=self.bank_transfer_fees,
            expenses=tuple(self.expenses),
            gcash_notebook=self.gcash_notebook,
            notes=self.notes,
        )


def _submitted_at(timestamp: datetime | None) -> datetime:
    return as_utc(timestamp) if timestamp is not None else datetime.now(timezone.utc)


def submit_daily_report(
    repository: ReportRepository,
    draft: ReportDraft,
    *,
    store_id: str,
    user_id: str,
    report_date: date,
    report_id: str | None = None,
    timestamp: datetime | None = None,
) -> DailyReport:
    """Compute and store the report for one store-day.

    Raises:
        DuplicateReportError: If the store already has a report for the date.
        ReportLockedError: If the draft's start of day is not locked.
    """
    bind_report_context(store_id, report_date.isoformat())
    try:
        existing = repository.find_report(store_id, report_date)
        if existing is not None:
            raise DuplicateReportError(store_id, report_date, existing.id)

        pending = repository.pending_pos_transactions(store_id, report_date)
        inputs = draft.to_inputs(merge_pos_transactions(pending))
        report = compute_daily_report(
            inputs,
            report_id=report_id or str(uuid4()),
            store_id=store_id,
            user_id=user_id,
            report_date=report_date,
            timestamp=_submitted_at(timestamp),
        )
        repository.save_report(report)
        repository.link_pos_transactions(store_id, report_date, report.id)

        logger.info(
            "report_submitted",
            report_id=report.id,
            pos_transactions=len(pending),
            status=report.status.value,
            discrepancy=str(report.discrepancy),
        )
        if report.status != ReconciliationStatus.BALANCED:
            logger.warning(
                "report_variance",
                report_id=report.id,
                status=report.status.value,
                discrepancy=str(report.discrepancy),
            )
        return report
    finally:
        clear_report_context()


def amend_daily_report(
    repository: ReportRepository,
    report: DailyReport,
    *,
    editor_id: str,
    changes: dict[str, Any],
    timestamp: datetime | None = None,
) -> DailyReport:
    """Administrative edit of a submitted report.

    ``changes`` uses input field names (camelCase or snake_case) and is
    validated together with the report's current inputs. The result keeps the
    report's identity and carries the next version number.

    Raises:
        InvalidInputError: If the merged inputs are rejected.
    """
    merged = asdict(report.inputs)
    for key, value in changes.items():
        name = to_snake(key)
        if name not in merged:
            raise InvalidInputError(key, value, "unknown report field")
        merged[name] = value
    inputs = parse_report_inputs(merged, strict=True)

    amended = compute_daily_report(
        inputs,
        report_id=report.id,
        store_id=report.store_id,
        user_id=report.user_id,
        report_date=report.date,
        timestamp=_submitted_at(timestamp),
        version=report.version + 1,
    )
    amended = replace(amended, amended_by=editor_id)
    repository.save_report(amended)

    logger.info(
        "report_amended",
        report_id=report.id,
        editor_id=editor_id,
        version=amended.version,
        fields=sorted(changes),
        previous_discrepancy=str(report.discrepancy),
        discrepancy=str(amended.discrepancy),
    )
    return amended
