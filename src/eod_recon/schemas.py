"""Boundary validation for raw entry-form and collaborator payloads.

Payloads use the camelCase keys of the entry form (``sodGpo``,
``customSales``) but snake_case names are accepted as well. Amounts are
parsed strictly: a malformed or negative amount is rejected with a typed
error instead of being zeroed, unless lenient parsing is requested.
"""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from eod_recon.config import get_settings
from eod_recon.dates import parse_iso_date
from eod_recon.errors import InvalidDateError, InvalidInputError
from eod_recon.models import (
    ExpenseLine,
    GeneralExpense,
    ManualSaleLine,
    PosSaleLine,
    PosTransaction,
    ReportInputs,
)
from eod_recon.money import ZERO, num, to_amount


def _new_id() -> str:
    return str(uuid4())


def coerce_amount(value: Any, info: ValidationInfo, *, allow_negative: bool = False) -> Decimal:
    context = info.context or {}
    if not context.get("strict", True):
        return num(value)
    return to_amount(value, info.field_name or "amount", allow_negative=allow_negative)


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ManualSaleLineSchema(_Schema):
    id: str = Field(default_factory=_new_id)
    name: str = ""
    amount: Decimal = ZERO
    cost: Decimal = ZERO
    category: str | None = None

    @field_validator("amount", "cost", mode="before")
    @classmethod
    def _check_amount(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info)

    def to_domain(self) -> ManualSaleLine:
        return ManualSaleLine(
            id=self.id,
            name=self.name,
            amount=self.amount,
            cost=self.cost,
            category=self.category or None,
        )


class PosSaleLineSchema(_Schema):
    id: str
    name: str = ""
    price: Decimal = ZERO
    cost: Decimal = ZERO
    quantity: int = Field(default=1, ge=0)
    category: str | None = None

    @field_validator("price", "cost", mode="before")
    @classmethod
    def _check_amount(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info)

    def to_domain(self) -> PosSaleLine:
        return PosSaleLine(
            id=self.id,
            name=self.name,
            price=self.price,
            cost=self.cost,
            quantity=self.quantity,
            category=self.category or None,
        )


class ExpenseLineSchema(_Schema):
    id: str = Field(default_factory=_new_id)
    amount: Decimal = ZERO
    description: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def _check_amount(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info)

    def to_domain(self) -> ExpenseLine:
        return ExpenseLine(id=self.id, amount=self.amount, description=self.description)


class ReportInputsSchema(_Schema):
    """Raw inputs of a daily report."""

    sod_gpo: Decimal = ZERO
    sod_gcash: Decimal = ZERO
    sod_petty_cash: Decimal = ZERO
    sod_petty_cash_note: str = ""
    fund_in: Decimal = ZERO
    cash_atm: Decimal = ZERO

    eod_gpo: Decimal = ZERO
    eod_gcash: Decimal = ZERO
    eod_actual_cash: Decimal = ZERO

    custom_sales: list[ManualSaleLineSchema] = Field(default_factory=list)
    pos_sales_details: list[PosSaleLineSchema] = Field(default_factory=list)

    bank_transfer_fees: Decimal = ZERO
    expenses: list[ExpenseLineSchema] = Field(default_factory=list)
    operational_expenses: Decimal = ZERO

    gcash_notebook: Decimal | None = None

    printer_revenue: Decimal = ZERO
    printer_service_revenue: Decimal = ZERO
    service_revenue: Decimal = ZERO
    other_sales: Decimal = ZERO

    notes: str = ""

    @field_validator(
        "sod_gpo",
        "sod_gcash",
        "sod_petty_cash",
        "fund_in",
        "cash_atm",
        "eod_gpo",
        "eod_gcash",
        "eod_actual_cash",
        "bank_transfer_fees",
        "operational_expenses",
        "printer_revenue",
        "printer_service_revenue",
        "service_revenue",
        "other_sales",
        mode="before",
    )
    @classmethod
    def _check_amount(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info)

    @field_validator("gcash_notebook", mode="before")
    @classmethod
    def _check_notebook(cls, value: Any, info: ValidationInfo) -> Decimal | None:
        # Blank means "no notebook entry", which is different from zero.
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return coerce_amount(value, info, allow_negative=True)

    @field_validator("custom_sales", "pos_sales_details", "expenses", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("sod_petty_cash_note", "notes", mode="before")
    @classmethod
    def _none_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_domain(self) -> ReportInputs:
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
            custom_sales=tuple(line.to_domain() for line in self.custom_sales),
            pos_sales_details=tuple(line.to_domain() for line in self.pos_sales_details),
            bank_transfer_fees=self.bank_transfer_fees,
            expenses=tuple(line.to_domain() for line in self.expenses),
            operational_expenses=self.operational_expenses,
            gcash_notebook=self.gcash_notebook,
            printer_revenue=self.printer_revenue,
            printer_service_revenue=self.printer_service_revenue,
            service_revenue=self.service_revenue,
            other_sales=self.other_sales,
            notes=self.notes,
        )


class GeneralExpenseSchema(_Schema):
    id: str = Field(default_factory=_new_id)
    store_id: str
    date: date
    category: str
    amount: Decimal = ZERO
    description: str = ""
    recorded_by: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value: Any) -> date:
        return parse_iso_date(value, "date")

    @field_validator("amount", mode="before")
    @classmethod
    def _check_amount(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info)

    def to_domain(self) -> GeneralExpense:
        return GeneralExpense(
            id=self.id,
            store_id=self.store_id,
            date=self.date,
            category=self.category,
            amount=self.amount,
            description=self.description,
            recorded_by=self.recorded_by,
        )


class PosTransactionSchema(_Schema):
    id: str
    store_id: str
    date: date
    items: list[PosSaleLineSchema] = Field(default_factory=list)
    total_amount: Decimal = ZERO
    cashier_name: str = ""
    report_id: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value: Any) -> date:
        return parse_iso_date(value, "date")

    @field_validator("total_amount", mode="before")
    @classmethod
    def _check_amount(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_amount(value, info)

    def to_domain(self) -> PosTransaction:
        return PosTransaction(
            id=self.id,
            store_id=self.store_id,
            date=self.date,
            items=tuple(item.to_domain() for item in self.items),
            total_amount=self.total_amount,
            cashier_name=self.cashier_name,
            report_id=self.report_id,
        )


def as_input_error(exc: ValidationError) -> InvalidInputError:
    """Translate the first pydantic error into the engine's error types."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ())) or "payload"
    cause = (error.get("ctx") or {}).get("error")
    value = error.get("input")
    if isinstance(cause, InvalidInputError):
        return type(cause)(field, cause.value, cause.reason)
    if error.get("type") == "missing" and field.endswith("date"):
        return InvalidDateError(field, None, "is required")
    return InvalidInputError(field, value, error.get("msg", "invalid value"))


def _validate(schema: type[_Schema], payload: Any, strict: bool | None) -> Any:
    if strict is None:
        strict = get_settings().strict_input
    try:
        return schema.model_validate(payload, context={"strict": strict})
    except ValidationError as exc:
        raise as_input_error(exc) from exc


def parse_report_inputs(payload: dict[str, Any], *, strict: bool | None = None) -> ReportInputs:
    """Validate a raw report payload into ReportInputs.

    Raises:
        InvalidInputError: With the path of the first rejected field.
    """
    return _validate(ReportInputsSchema, payload, strict).to_domain()


def parse_general_expense(payload: dict[str, Any], *, strict: bool | None = None) -> GeneralExpense:
    return _validate(GeneralExpenseSchema, payload, strict).to_domain()


def parse_pos_transaction(payload: dict[str, Any], *, strict: bool | None = None) -> PosTransaction:
    return _validate(PosTransactionSchema, payload, strict).to_domain()
