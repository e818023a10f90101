"""Domain types for daily reconciliation.

Everything here is an immutable value: raw inputs are validated once at the
boundary (see ``eod_recon.schemas``) and derived figures are computed by
``eod_recon.reconciliation``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from eod_recon.money import ZERO, total


class ReconciliationStatus(str, Enum):
    """Variance classification of a daily report."""

    BALANCED = "BALANCED"
    SHORTAGE = "SHORTAGE"
    SURPLUS = "SURPLUS"

    @classmethod
    def from_value(cls, value: str) -> ReconciliationStatus:
        """Parse a stored status, accepting the legacy OVERAGE spelling."""
        normalized = value.strip().upper()
        if normalized == "OVERAGE":
            return cls.SURPLUS
        return cls(normalized)


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


@dataclass(frozen=True)
class Store:
    id: str
    name: str
    location: str = ""


@dataclass(frozen=True)
class User:
    """User as supplied by the user-lookup collaborator."""

    id: str
    name: str
    role: UserRole = UserRole.EMPLOYEE
    store_id: str | None = None


@dataclass(frozen=True)
class ManualSaleLine:
    """A sale recorded by a cashier outside the POS (e.g. a service fee)."""

    id: str
    name: str
    amount: Decimal
    cost: Decimal = ZERO
    category: str | None = None

    @property
    def net(self) -> Decimal:
        return self.amount - self.cost


@dataclass(frozen=True)
class PosSaleLine:
    """A cart line from the point-of-sale subsystem."""

    id: str
    name: str
    price: Decimal
    cost: Decimal
    quantity: int
    category: str | None = None

    @property
    def revenue(self) -> Decimal:
        return self.price * self.quantity

    @property
    def total_cost(self) -> Decimal:
        return self.cost * self.quantity

    @property
    def net(self) -> Decimal:
        return (self.price - self.cost) * self.quantity


@dataclass(frozen=True)
class ExpenseLine:
    """A same-day operational expense attached to a report."""

    id: str
    amount: Decimal
    description: str = ""


@dataclass(frozen=True)
class GeneralExpense:
    """Store expense recorded independently of daily reports."""

    id: str
    store_id: str
    date: date
    category: str
    amount: Decimal
    description: str = ""
    recorded_by: str | None = None


@dataclass(frozen=True)
class PosTransaction:
    """A POS checkout. ``report_id`` is None until it is reconciled."""

    id: str
    store_id: str
    date: date
    items: tuple[PosSaleLine, ...] = ()
    total_amount: Decimal = ZERO
    cashier_name: str = ""
    report_id: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.report_id is None


@dataclass(frozen=True)
class ReportInputs:
    """Raw inputs of one store-day, as counted and entered."""

    # Start of day
    sod_gpo: Decimal = ZERO
    sod_gcash: Decimal = ZERO
    sod_petty_cash: Decimal = ZERO
    sod_petty_cash_note: str = ""
    fund_in: Decimal = ZERO
    cash_atm: Decimal = ZERO

    # End of day
    eod_gpo: Decimal = ZERO
    eod_gcash: Decimal = ZERO
    eod_actual_cash: Decimal = ZERO

    # Sales
    custom_sales: tuple[ManualSaleLine, ...] = ()
    pos_sales_details: tuple[PosSaleLine, ...] = ()

    # Expenses
    bank_transfer_fees: Decimal = ZERO
    expenses: tuple[ExpenseLine, ...] = ()
    operational_expenses: Decimal = ZERO  # deprecated scalar, used when expenses is empty

    # Human-recorded GCash net; overrides the derived value when set
    gcash_notebook: Decimal | None = None

    # Revenue scalars from reports entered before itemised manual sales
    printer_revenue: Decimal = ZERO
    printer_service_revenue: Decimal = ZERO
    service_revenue: Decimal = ZERO
    other_sales: Decimal = ZERO

    notes: str = ""

    @property
    def legacy_revenue(self) -> Decimal:
        return total(
            (
                self.printer_revenue,
                self.printer_service_revenue,
                self.service_revenue,
                self.other_sales,
            )
        )

    @property
    def has_notebook_entry(self) -> bool:
        return self.gcash_notebook is not None


@dataclass(frozen=True)
class DailyReport:
    """A submitted daily report: identity, raw inputs and cached derived fields.

    The derived fields are a cache. ``eod_recon.reconciliation.recompute``
    rebuilds them from ``inputs``.
    """

    id: str
    store_id: str
    user_id: str
    date: date
    timestamp: datetime
    inputs: ReportInputs
    total_start_fund: Decimal
    total_end_assets: Decimal
    total_net_sales: Decimal
    total_expenses: Decimal
    theoretical_growth: Decimal
    recorded_profit: Decimal
    discrepancy: Decimal
    status: ReconciliationStatus
    version: int = 1
    amended_by: str | None = field(default=None, compare=False)

    @property
    def fund_in(self) -> Decimal:
        return self.inputs.fund_in

    @property
    def gross_eod_sales(self) -> Decimal:
        """Total EOD sales: recorded revenue plus the GCash net."""
        return self.total_net_sales + self.discrepancy
