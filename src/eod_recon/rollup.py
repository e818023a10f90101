"""History-table rows and column totals.

Rows are recomputed from each report's raw inputs rather than read from the
cached derived fields, so reports saved before a formula change still show
current figures.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from eod_recon.errors import InvalidDateError
from eod_recon.models import DailyReport, ReconciliationStatus
from eod_recon.money import ZERO
from eod_recon.reconciliation import derive_figures


@dataclass(frozen=True)
class ReportRow:
    """Recomputed figures of one report as shown in the history table."""

    report: DailyReport
    gcash_net: Decimal
    pos_net: Decimal
    manual_net: Decimal
    total_sales_revenue: Decimal
    total_expenses: Decimal
    notebook_difference: Decimal
    recorded_profit: Decimal
    status: ReconciliationStatus


@dataclass(frozen=True)
class RollupSummary:
    """Column-wise totals of a set of report rows."""

    report_count: int = 0
    gcash_net: Decimal = ZERO
    pos_net: Decimal = ZERO
    manual_net: Decimal = ZERO
    total_sales_revenue: Decimal = ZERO
    total_expenses: Decimal = ZERO
    notebook_difference: Decimal = ZERO
    recorded_profit: Decimal = ZERO


def report_row(report: DailyReport) -> ReportRow:
    figures = derive_figures(report.inputs)
    return ReportRow(
        report=report,
        gcash_net=figures.effective_gcash_net,
        pos_net=figures.sales.pos_net,
        manual_net=figures.sales.manual_net,
        total_sales_revenue=figures.total_sales_revenue,
        total_expenses=figures.total_expenses,
        notebook_difference=figures.notebook_difference,
        recorded_profit=figures.recorded_profit,
        status=figures.status,
    )


def rollup_totals(reports: Iterable[DailyReport]) -> RollupSummary:
    """Recompute every report and sum the history-table columns."""
    count = 0
    gcash_net = pos_net = manual_net = ZERO
    revenue = expenses = notebook_difference = profit = ZERO
    for report in reports:
        row = report_row(report)
        count += 1
        gcash_net += row.gcash_net
        pos_net += row.pos_net
        manual_net += row.manual_net
        revenue += row.total_sales_revenue
        expenses += row.total_expenses
        notebook_difference += row.notebook_difference
        profit += row.recorded_profit

    return RollupSummary(
        report_count=count,
        gcash_net=gcash_net,
        pos_net=pos_net,
        manual_net=manual_net,
        total_sales_revenue=revenue,
        total_expenses=expenses,
        notebook_difference=notebook_difference,
        recorded_profit=profit,
    )


def filter_reports(
    reports: Iterable[DailyReport],
    *,
    store_id: str | None = None,
    month: int | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[DailyReport]:
    """Apply the history view filters, newest first.

    ``month`` is a calendar month number (1-12) matched in any year; ``start``
    and ``end`` are inclusive.
    """
    if month is not None and not (1 <= month <= 12):
        raise InvalidDateError("month", month, "month must be 1-12")

    selected = []
    for report in reports:
        if store_id and report.store_id != store_id:
            continue
        if month is not None and report.date.month != month:
            continue
        if start is not None and report.date < start:
            continue
        if end is not None and report.date > end:
            continue
        selected.append(report)
    selected.sort(key=lambda report: report.timestamp, reverse=True)
    return selected
