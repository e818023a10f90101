"""Daily cash reconciliation.

GCash movement is not recorded directly. It is inferred as the growth in
counted assets that recorded sales do not explain:

    derived GCash net = (end assets - start fund) - sales revenue

A notebook value entered by staff replaces the inferred figure in every
downstream total, and the gap between the two is reported separately as
the notebook difference.

``derive_figures`` is the only place this algebra lives. The write path
(``compute_daily_report``) and every read path (``recompute``, the rollup
and period views) go through it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal

import structlog

from eod_recon.models import DailyReport, ReconciliationStatus, ReportInputs
from eod_recon.money import ZERO, is_balanced, snap, total
from eod_recon.sales import SalesTotals, aggregate_sales

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReconciliationFigures:
    """Every intermediate and derived value of one day's reconciliation."""

    total_start_fund: Decimal
    total_end_assets: Decimal
    sales: SalesTotals
    operational_expenses_total: Decimal
    total_expenses: Decimal
    actual_cash_sales: Decimal
    raw_derived_gcash_net: Decimal
    derived_gcash_net: Decimal
    effective_gcash_net: Decimal
    total_eod_sales: Decimal
    recorded_profit: Decimal
    notebook_difference: Decimal
    has_notebook_entry: bool

    @property
    def total_sales_revenue(self) -> Decimal:
        return self.sales.total_revenue

    @property
    def total_sales_net(self) -> Decimal:
        return self.sales.total_net

    @property
    def theoretical_growth(self) -> Decimal:
        return self.actual_cash_sales

    @property
    def discrepancy(self) -> Decimal:
        return self.effective_gcash_net

    @property
    def status(self) -> ReconciliationStatus:
        return classify_status(self.discrepancy)


def classify_status(discrepancy: Decimal) -> ReconciliationStatus:
    """Classify a variance as BALANCED, SHORTAGE or SURPLUS."""
    if is_balanced(discrepancy):
        return ReconciliationStatus.BALANCED
    if discrepancy < 0:
        return ReconciliationStatus.SHORTAGE
    return ReconciliationStatus.SURPLUS


def operational_expenses_total(inputs: ReportInputs) -> Decimal:
    """Sum itemised expenses, falling back to the deprecated scalar."""
    if inputs.expenses:
        return total(expense.amount for expense in inputs.expenses)
    return inputs.operational_expenses


def derive_figures(inputs: ReportInputs) -> ReconciliationFigures:
    """Compute all derived reconciliation values from raw inputs."""
    total_start_fund = total(
        (
            inputs.sod_gpo,
            inputs.sod_gcash,
            inputs.sod_petty_cash,
            inputs.fund_in,
            inputs.cash_atm,
        )
    )
    total_end_assets = total((inputs.eod_gpo, inputs.eod_gcash, inputs.eod_actual_cash))

    sales = aggregate_sales(
        inputs.custom_sales,
        inputs.pos_sales_details,
        legacy_revenue=inputs.legacy_revenue,
    )

    op_expenses = operational_expenses_total(inputs)
    total_expenses = inputs.bank_transfer_fees + op_expenses

    actual_cash_sales = total_end_assets - total_start_fund
    raw_derived = actual_cash_sales - sales.total_revenue
    derived = snap(raw_derived)

    if inputs.gcash_notebook is not None:
        effective = inputs.gcash_notebook
        notebook_difference = snap(derived - inputs.gcash_notebook)
    else:
        effective = derived
        notebook_difference = ZERO

    return ReconciliationFigures(
        total_start_fund=total_start_fund,
        total_end_assets=total_end_assets,
        sales=sales,
        operational_expenses_total=op_expenses,
        total_expenses=total_expenses,
        actual_cash_sales=actual_cash_sales,
        raw_derived_gcash_net=raw_derived,
        derived_gcash_net=derived,
        effective_gcash_net=effective,
        total_eod_sales=effective + sales.total_revenue,
        recorded_profit=effective + sales.total_net - total_expenses,
        notebook_difference=notebook_difference,
        has_notebook_entry=inputs.gcash_notebook is not None,
    )


def compute_daily_report(
    inputs: ReportInputs,
    *,
    report_id: str,
    store_id: str,
    user_id: str,
    report_date: date,
    timestamp: datetime,
    version: int = 1,
) -> DailyReport:
    """Build a DailyReport with all derived fields filled in.

    Deterministic: identical arguments always produce an equal report.
    """
    figures = derive_figures(inputs)
    report = DailyReport(
        id=report_id,
        store_id=store_id,
        user_id=user_id,
        date=report_date,
        timestamp=timestamp,
        inputs=inputs,
        total_start_fund=figures.total_start_fund,
        total_end_assets=figures.total_end_assets,
        total_net_sales=figures.total_sales_revenue,
        total_expenses=figures.total_expenses,
        theoretical_growth=figures.theoretical_growth,
        recorded_profit=figures.recorded_profit,
        discrepancy=figures.discrepancy,
        status=figures.status,
        version=version,
    )
    logger.debug(
        "report_computed",
        report_id=report_id,
        discrepancy=str(report.discrepancy),
        status=report.status.value,
    )
    return report


def recompute(report: DailyReport) -> DailyReport:
    """Rebuild a report's cached derived fields from its raw inputs."""
    figures = derive_figures(report.inputs)
    return replace(
        report,
        total_start_fund=figures.total_start_fund,
        total_end_assets=figures.total_end_assets,
        total_net_sales=figures.total_sales_revenue,
        total_expenses=figures.total_expenses,
        theoretical_growth=figures.theoretical_growth,
        recorded_profit=figures.recorded_profit,
        discrepancy=figures.discrepancy,
        status=figures.status,
    )
