"""Period aggregation for dashboards and analytics.

Reports and general expenses are folded over a date predicate (a day, a
month, a year, an explicit range, or all time) into scalar totals and a
series of buckets for charting. Whole-year views are bucketed by month and
zero-filled to twelve points; every other view is bucketed by day and only
holds observed dates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

import structlog

from eod_recon.config import get_settings
from eod_recon.dates import day_key, month_key, parse_iso_date, parse_year_month
from eod_recon.errors import InvalidDateError
from eod_recon.models import (
    DailyReport,
    GeneralExpense,
    ReconciliationStatus,
    Store,
    User,
    UserRole,
)
from eod_recon.money import ZERO
from eod_recon.reconciliation import classify_status

logger = structlog.get_logger(__name__)


class Period(ABC):
    """Date-membership predicate with its bucketing rule."""

    @abstractmethod
    def contains(self, value: date) -> bool:
        """Whether the date falls inside the period."""

    def bucket_key(self, value: date) -> str:
        return day_key(value)

    def zero_fill_keys(self) -> list[str]:
        return []


@dataclass(frozen=True)
class DayPeriod(Period):
    day: date

    def contains(self, value: date) -> bool:
        return value == self.day


@dataclass(frozen=True)
class MonthPeriod(Period):
    year: int
    month: int

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month


@dataclass(frozen=True)
class YearPeriod(Period):
    year: int

    def contains(self, value: date) -> bool:
        return value.year == self.year

    def bucket_key(self, value: date) -> str:
        return month_key(value)

    def zero_fill_keys(self) -> list[str]:
        return [f"{self.year:04d}-{month:02d}" for month in range(1, 13)]


@dataclass(frozen=True)
class RangePeriod(Period):
    """Inclusive range; either bound may be open. start > end matches nothing."""

    start: date | None = None
    end: date | None = None

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class AllTime(Period):
    def contains(self, value: date) -> bool:
        return True


def period_from_filter(
    day: str | None = None,
    month: str | None = None,
    year: str | int | None = None,
    start: str | None = None,
    end: str | None = None,
) -> Period:
    """Build a period from view filters.

    The most specific filter wins: day, then month (``YYYY-MM``), then year,
    then start/end. No filter at all means all time.

    Raises:
        InvalidDateError: If a filter value is malformed.
    """
    if day:
        return DayPeriod(parse_iso_date(day, "day"))
    if month:
        year_part, month_part = parse_year_month(month)
        return MonthPeriod(year_part, month_part)
    if year is not None and str(year).strip():
        text = str(year).strip()
        if not text.isdigit():
            raise InvalidDateError("year", year, "must be a four-digit year")
        return YearPeriod(int(text))
    if start or end:
        return RangePeriod(
            start=parse_iso_date(start, "start") if start else None,
            end=parse_iso_date(end, "end") if end else None,
        )
    return AllTime()


@dataclass(frozen=True)
class StoreScope:
    """Which stores a view covers. ``store_id=None`` means every store."""

    store_id: str | None = None

    @classmethod
    def for_user(cls, user: User, selected_store_id: str | None = None) -> StoreScope:
        """Employees only ever see their own store; admins see their selection."""
        if user.role != UserRole.ADMIN and user.store_id:
            return cls(user.store_id)
        return cls(selected_store_id or None)

    def includes(self, store_id: str) -> bool:
        return self.store_id is None or self.store_id == store_id


@dataclass
class PeriodBucket:
    key: str
    net_sales: Decimal = ZERO
    expenses: Decimal = ZERO
    fund_in: Decimal = ZERO
    recorded_profit: Decimal = ZERO


@dataclass(frozen=True)
class PeriodTotals:
    gross_eod_sales: Decimal = ZERO
    net_profit: Decimal = ZERO
    general_expenses: Decimal = ZERO
    total_fund_in: Decimal = ZERO
    total_shortage: Decimal = ZERO
    total_surplus: Decimal = ZERO
    balanced_count: int = 0
    report_count: int = 0

    @property
    def running_profit(self) -> Decimal:
        return self.net_profit - self.general_expenses


@dataclass(frozen=True)
class PeriodSummary:
    totals: PeriodTotals
    series: list[PeriodBucket] = field(default_factory=list)


def _entry_date(value: object, field_name: str) -> date:
    # Unparseable dates are rejected; dropping them would make views disagree.
    return parse_iso_date(value, field_name)


def _normalize_category(category: str) -> str:
    return category.strip().casefold()


def split_general_expenses(
    expenses: Iterable[GeneralExpense],
    fund_in_categories: Iterable[str] | None = None,
) -> tuple[list[GeneralExpense], list[GeneralExpense]]:
    """Split general expenses into (fund-ins, operating expenses)."""
    if fund_in_categories is None:
        fund_in_categories = get_settings().fund_in_categories
    fund_in_keys = {_normalize_category(category) for category in fund_in_categories}

    fund_ins: list[GeneralExpense] = []
    operating: list[GeneralExpense] = []
    for expense in expenses:
        if _normalize_category(expense.category) in fund_in_keys:
            fund_ins.append(expense)
        else:
            operating.append(expense)
    return fund_ins, operating


def aggregate_period(
    reports: Iterable[DailyReport],
    expenses: Iterable[GeneralExpense],
    scope: StoreScope,
    predicate: Period,
    *,
    fund_in_categories: Iterable[str] | None = None,
) -> PeriodSummary:
    """Fold reports and general expenses into totals and a bucketed series.

    Raises:
        InvalidDateError: If a report or expense carries an unparseable date.
    """
    buckets: dict[str, PeriodBucket] = {key: PeriodBucket(key) for key in predicate.zero_fill_keys()}

    def bucket_for(value: date) -> PeriodBucket:
        key = predicate.bucket_key(value)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = PeriodBucket(key)
        return bucket

    gross_eod_sales = ZERO
    net_profit = ZERO
    total_fund_in = ZERO
    general_expenses = ZERO
    total_shortage = ZERO
    total_surplus = ZERO
    balanced_count = 0
    report_count = 0

    for report in reports:
        report_date = _entry_date(report.date, f"report[{report.id}].date")
        if not scope.includes(report.store_id) or not predicate.contains(report_date):
            continue
        report_count += 1
        gross = report.gross_eod_sales
        gross_eod_sales += gross
        net_profit += report.recorded_profit
        total_fund_in += report.fund_in

        status = classify_status(report.discrepancy)
        if status == ReconciliationStatus.BALANCED:
            balanced_count += 1
        if report.discrepancy < 0:
            total_shortage += report.discrepancy
        elif report.discrepancy > 0:
            total_surplus += report.discrepancy

        bucket = bucket_for(report_date)
        bucket.net_sales += gross
        bucket.recorded_profit += report.recorded_profit
        bucket.fund_in += report.fund_in

    fund_ins, operating = split_general_expenses(expenses, fund_in_categories)
    for expense in fund_ins:
        expense_date = _entry_date(expense.date, f"expense[{expense.id}].date")
        if not scope.includes(expense.store_id) or not predicate.contains(expense_date):
            continue
        total_fund_in += expense.amount
        bucket_for(expense_date).fund_in += expense.amount
    for expense in operating:
        expense_date = _entry_date(expense.date, f"expense[{expense.id}].date")
        if not scope.includes(expense.store_id) or not predicate.contains(expense_date):
            continue
        general_expenses += expense.amount
        bucket_for(expense_date).expenses += expense.amount

    totals = PeriodTotals(
        gross_eod_sales=gross_eod_sales,
        net_profit=net_profit,
        general_expenses=general_expenses,
        total_fund_in=total_fund_in,
        total_shortage=total_shortage,
        total_surplus=total_surplus,
        balanced_count=balanced_count,
        report_count=report_count,
    )
    series = [buckets[key] for key in sorted(buckets)]
    logger.debug(
        "period_aggregated",
        period=type(predicate).__name__,
        store_id=scope.store_id,
        reports=report_count,
        buckets=len(series),
    )
    return PeriodSummary(totals=totals, series=series)


def recent_entries(
    reports: Iterable[DailyReport],
    scope: StoreScope,
    limit: int | None = None,
) -> list[DailyReport]:
    """Return the latest ``limit`` reports in scope, oldest first."""
    if limit is None:
        limit = get_settings().recent_entries_limit
    in_scope = [report for report in reports if scope.includes(report.store_id)]
    in_scope.sort(key=lambda report: report.timestamp, reverse=True)
    return list(reversed(in_scope[:limit]))


@dataclass(frozen=True)
class StoreOverview:
    store: Store
    report_count: int
    last_report_date: date | None
    total_profit: Decimal


def summarize_stores(
    stores: Iterable[Store],
    reports: Iterable[DailyReport],
) -> list[StoreOverview]:
    """Per-store report count, latest report date and summed profit."""
    counts: dict[str, int] = {}
    latest: dict[str, DailyReport] = {}
    profit: dict[str, Decimal] = {}
    for report in reports:
        counts[report.store_id] = counts.get(report.store_id, 0) + 1
        profit[report.store_id] = profit.get(report.store_id, ZERO) + report.recorded_profit
        current = latest.get(report.store_id)
        if current is None or report.timestamp > current.timestamp:
            latest[report.store_id] = report

    return [
        StoreOverview(
            store=store,
            report_count=counts.get(store.id, 0),
            last_report_date=latest[store.id].date if store.id in latest else None,
            total_profit=profit.get(store.id, ZERO),
        )
        for store in stores
    ]
