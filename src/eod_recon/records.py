"""Round-trip of daily reports to storage records.

Records use the storage layer's snake_case column names. Derived fields
are written and read back unchanged; they are a cache and
``eod_recon.reconciliation.recompute`` is the way to refresh them.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import Field, ValidationError, ValidationInfo, field_validator

from eod_recon.config import get_settings
from eod_recon.dates import as_utc, parse_iso_date
from eod_recon.models import DailyReport, ReconciliationStatus
from eod_recon.money import ZERO
from eod_recon.reconciliation import classify_status
from eod_recon.schemas import ReportInputsSchema, as_input_error, coerce_amount

DERIVED_FIELDS = (
    "total_start_fund",
    "total_end_assets",
    "total_net_sales",
    "total_expenses",
    "theoretical_growth",
    "recorded_profit",
    "discrepancy",
)

SIGNED_DERIVED_FIELDS = frozenset({"theoretical_growth", "recorded_profit", "discrepancy"})


class ReportRecordSchema(ReportInputsSchema):
    """A stored report row: identity, raw inputs and cached derived fields."""

    id: str
    store_id: str
    user_id: str = ""
    date: date
    timestamp: datetime | None = None
    version: int = 1

    total_start_fund: Decimal = ZERO
    total_end_assets: Decimal = ZERO
    total_net_sales: Decimal = ZERO
    total_expenses: Decimal = ZERO
    theoretical_growth: Decimal = ZERO
    recorded_profit: Decimal = ZERO
    discrepancy: Decimal = ZERO
    status: str | None = Field(default=None)

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value: Any) -> date:
        return parse_iso_date(value, "date")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _check_timestamp(cls, value: Any) -> Any:
        # Older rows store epoch milliseconds.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return value

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Naive stored timestamps are UTC.
        return as_utc(value) if value is not None else None

    @field_validator(*DERIVED_FIELDS, mode="before")
    @classmethod
    def _check_derived(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info, allow_negative=info.field_name in SIGNED_DERIVED_FIELDS)


def _status(value: str | None, discrepancy: Decimal) -> ReconciliationStatus:
    if value:
        try:
            return ReconciliationStatus.from_value(value)
        except ValueError:
            pass
    # Unknown markers such as DRAFT fall back to the rule.
    return classify_status(discrepancy)


def report_from_record(row: dict[str, Any], *, strict: bool | None = None) -> DailyReport:
    """Build a DailyReport from a storage row.

    Args:
        row: Row keyed by storage column names.
        strict: Reject malformed amounts (default from settings). When False,
            malformed amounts read as zero.

    Raises:
        InvalidInputError: If a field of the row is rejected.
    """
    if strict is None:
        strict = get_settings().strict_input
    try:
        record = ReportRecordSchema.model_validate(row, context={"strict": strict})
    except ValidationError as exc:
        raise as_input_error(exc) from exc

    timestamp = record.timestamp or datetime.combine(record.date, datetime.min.time(), timezone.utc)
    return DailyReport(
        id=record.id,
        store_id=record.store_id,
        user_id=record.user_id,
        date=record.date,
        timestamp=timestamp,
        inputs=record.to_domain(),
        total_start_fund=record.total_start_fund,
        total_end_assets=record.total_end_assets,
        total_net_sales=record.total_net_sales,
        total_expenses=record.total_expenses,
        theoretical_growth=record.theoretical_growth,
        recorded_profit=record.recorded_profit,
        discrepancy=record.discrepancy,
        status=_status(record.status, record.discrepancy),
        version=record.version,
    )


def report_to_record(report: DailyReport) -> dict[str, Any]:
    """Serialize a DailyReport to a storage row."""
    inputs = report.inputs
    return {
        "id": report.id,
        "store_id": report.store_id,
        "user_id": report.user_id,
        "date": report.date.isoformat(),
        "timestamp": report.timestamp.isoformat(),
        "version": report.version,
        "sod_gpo": inputs.sod_gpo,
        "sod_gcash": inputs.sod_gcash,
        "sod_petty_cash": inputs.sod_petty_cash,
        "sod_petty_cash_note": inputs.sod_petty_cash_note,
        "fund_in": inputs.fund_in,
        "cash_atm": inputs.cash_atm,
        "custom_sales": [
            {
                "id": sale.id,
                "name": sale.name,
                "amount": sale.amount,
                "cost": sale.cost,
                "category": sale.category,
            }
            for sale in inputs.custom_sales
        ],
        "pos_sales_details": [
            {
                "id": line.id,
                "name": line.name,
                "price": line.price,
                "cost": line.cost,
                "quantity": line.quantity,
                "category": line.category,
            }
            for line in inputs.pos_sales_details
        ],
        "bank_transfer_fees": inputs.bank_transfer_fees,
        "operational_expenses": inputs.operational_expenses,
        "operational_expenses_note": ", ".join(
            expense.description for expense in inputs.expenses if expense.description
        ),
        "expenses": [
            {"id": expense.id, "amount": expense.amount, "description": expense.description}
            for expense in inputs.expenses
        ],
        "eod_gpo": inputs.eod_gpo,
        "eod_gcash": inputs.eod_gcash,
        "eod_actual_cash": inputs.eod_actual_cash,
        "gcash_notebook": inputs.gcash_notebook,
        "printer_revenue": inputs.printer_revenue,
        "printer_service_revenue": inputs.printer_service_revenue,
        "service_revenue": inputs.service_revenue,
        "other_sales": inputs.other_sales,
        "total_start_fund": report.total_start_fund,
        "total_end_assets": report.total_end_assets,
        "total_net_sales": report.total_net_sales,
        "total_expenses": report.total_expenses,
        "theoretical_growth": report.theoretical_growth,
        "recorded_profit": report.recorded_profit,
        "discrepancy": report.discrepancy,
        "status": report.status.value,
        "notes": inputs.notes,
    }
