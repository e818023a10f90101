"""Tests for period aggregation used by dashboards and analytics."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from eod_recon.errors import InvalidDateError
from eod_recon.models import (
    GeneralExpense,
    ManualSaleLine,
    ReconciliationStatus,
    ReportInputs,
    Store,
    User,
    UserRole,
)
from eod_recon.periods import (
    AllTime,
    DayPeriod,
    MonthPeriod,
    RangePeriod,
    StoreScope,
    YearPeriod,
    aggregate_period,
    period_from_filter,
    recent_entries,
    split_general_expenses,
    summarize_stores,
)


def _expense(expense_id: str, day: date, category: str, amount: str, store_id: str = "store-a"):
    return GeneralExpense(
        id=expense_id,
        store_id=store_id,
        date=day,
        category=category,
        amount=Decimal(amount),
    )


@pytest.fixture
def shortage_inputs():
    """Start 1200 (incl. 200 fund-in), end 1150, one 100 manual sale."""
    return ReportInputs(
        sod_gpo=Decimal("1000"),
        fund_in=Decimal("200"),
        eod_gpo=Decimal("1150"),
        custom_sales=(ManualSaleLine(id="m", name="Service", amount=Decimal("100")),),
    )


@pytest.fixture
def march_reports(example_inputs, shortage_inputs, report_factory):
    return [
        report_factory(example_inputs, report_id="r-15", report_date=date(2024, 3, 15)),
        report_factory(shortage_inputs, report_id="r-16", report_date=date(2024, 3, 16)),
        report_factory(
            example_inputs,
            report_id="r-b",
            store_id="store-b",
            report_date=date(2024, 3, 15),
        ),
    ]


@pytest.fixture
def march_expenses():
    return [
        _expense("x-rent", date(2024, 3, 15), "Rent", "300"),
        _expense("x-fund", date(2024, 3, 16), "GPO Fund-in", "500"),
        _expense("x-other", date(2024, 3, 15), "Rent", "999", store_id="store-b"),
        _expense("x-april", date(2024, 4, 2), "Utilities", "75"),
    ]


class TestAggregatePeriod:
    def test_scalar_totals(self, march_reports, march_expenses):
        summary = aggregate_period(
            march_reports, march_expenses, StoreScope("store-a"), MonthPeriod(2024, 3)
        )
        totals = summary.totals

        assert totals.report_count == 2
        assert totals.gross_eod_sales == Decimal("450")
        assert totals.net_profit == Decimal("330")
        assert totals.general_expenses == Decimal("300")
        assert totals.running_profit == Decimal("30")
        assert totals.total_fund_in == Decimal("700")
        assert totals.total_shortage == Decimal("-150")
        assert totals.total_surplus == Decimal("300")
        assert totals.balanced_count == 0

    def test_daily_series_holds_only_observed_dates(self, march_reports, march_expenses):
        summary = aggregate_period(
            march_reports, march_expenses, StoreScope("store-a"), MonthPeriod(2024, 3)
        )

        assert [bucket.key for bucket in summary.series] == ["2024-03-15", "2024-03-16"]
        first, second = summary.series
        assert first.net_sales == Decimal("500")
        assert first.expenses == Decimal("300")
        assert first.fund_in == Decimal("0")
        assert first.recorded_profit == Decimal("380")
        assert second.net_sales == Decimal("-50")
        assert second.fund_in == Decimal("700")
        assert second.recorded_profit == Decimal("-50")

    def test_all_stores_scope(self, march_reports, march_expenses):
        summary = aggregate_period(
            march_reports, march_expenses, StoreScope(), MonthPeriod(2024, 3)
        )

        assert summary.totals.report_count == 3
        assert summary.totals.general_expenses == Decimal("1299")

    def test_whole_year_is_zero_filled(self, example_inputs, report_factory):
        reports = [
            report_factory(example_inputs, report_id="mar", report_date=date(2024, 3, 10)),
            report_factory(example_inputs, report_id="jul", report_date=date(2024, 7, 4)),
            report_factory(example_inputs, report_id="old", report_date=date(2023, 7, 4)),
        ]

        summary = aggregate_period(reports, [], StoreScope(), YearPeriod(2024))

        assert len(summary.series) == 12
        assert summary.series[0].key == "2024-01"
        assert summary.series[-1].key == "2024-12"
        empty = [
            bucket
            for bucket in summary.series
            if bucket.net_sales == bucket.expenses == bucket.fund_in == bucket.recorded_profit == 0
        ]
        assert len(empty) == 10
        assert summary.series[2].recorded_profit == Decimal("380")
        assert summary.series[6].recorded_profit == Decimal("380")

    def test_range_view_is_not_zero_filled(self, march_reports):
        period = RangePeriod(date(2024, 3, 1), date(2024, 3, 31))
        summary = aggregate_period(march_reports, [], StoreScope("store-a"), period)

        assert len(summary.series) == 2

    def test_inverted_range_is_an_empty_period(self, march_reports, march_expenses):
        period = RangePeriod(date(2024, 3, 31), date(2024, 3, 1))
        summary = aggregate_period(march_reports, march_expenses, StoreScope(), period)

        assert summary.series == []
        assert summary.totals.report_count == 0
        assert summary.totals.gross_eod_sales == Decimal("0")

    def test_day_view(self, march_reports, march_expenses):
        summary = aggregate_period(
            march_reports, march_expenses, StoreScope("store-a"), DayPeriod(date(2024, 3, 16))
        )

        assert summary.totals.report_count == 1
        assert [bucket.key for bucket in summary.series] == ["2024-03-16"]

    def test_balanced_count_ignores_stored_status(self, example_inputs, report_factory):
        report = report_factory(
            replace(example_inputs, gcash_notebook=Decimal("0.5")),
        )
        report = replace(report, status=ReconciliationStatus.SURPLUS)

        summary = aggregate_period([report], [], StoreScope(), AllTime())

        assert summary.totals.balanced_count == 1

    def test_unparseable_report_date_is_rejected(self, march_reports):
        broken = replace(march_reports[0], date="2024-02-30")

        with pytest.raises(InvalidDateError):
            aggregate_period([broken], [], StoreScope(), AllTime())

    @pytest.mark.parametrize("value", ["2024-03-15garbage", "2024-03-15 12:00 PM", "15/03/2024"])
    def test_unparseable_report_date_text_is_rejected(self, march_reports, value):
        broken = replace(march_reports[0], date=value)

        with pytest.raises(InvalidDateError):
            aggregate_period([broken], [], StoreScope(), AllTime())

    def test_iso_datetime_text_counts_on_its_day(self, march_reports):
        stored = replace(march_reports[0], date="2024-03-15T20:00:00")

        summary = aggregate_period([stored], [], StoreScope(), DayPeriod(date(2024, 3, 15)))

        assert summary.totals.report_count == 1

    def test_unparseable_expense_date_is_rejected(self):
        broken = _expense("x", date(2024, 3, 1), "Rent", "10")
        broken = replace(broken, date="")

        with pytest.raises(InvalidDateError):
            aggregate_period([], [broken], StoreScope(), AllTime())

    def test_custom_fund_in_categories(self, march_expenses):
        summary = aggregate_period(
            [],
            march_expenses,
            StoreScope("store-a"),
            MonthPeriod(2024, 3),
            fund_in_categories=["Rent"],
        )

        assert summary.totals.total_fund_in == Decimal("300")
        assert summary.totals.general_expenses == Decimal("500")


def test_split_general_expenses_defaults_to_gpo_fund_in(march_expenses):
    fund_ins, operating = split_general_expenses(march_expenses)

    assert [expense.id for expense in fund_ins] == ["x-fund"]
    assert [expense.id for expense in operating] == ["x-rent", "x-other", "x-april"]


def test_split_general_expenses_ignores_case_and_spacing():
    fund_ins, _ = split_general_expenses([_expense("x", date(2024, 1, 1), " gpo fund-in ", "5")])

    assert len(fund_ins) == 1


class TestPeriodFromFilter:
    def test_day_wins(self):
        assert period_from_filter(day="2024-03-15", month="2024-03") == DayPeriod(date(2024, 3, 15))

    def test_month(self):
        assert period_from_filter(month="2024-03") == MonthPeriod(2024, 3)

    def test_year(self):
        assert period_from_filter(year="2024") == YearPeriod(2024)

    def test_open_range(self):
        assert period_from_filter(start="2024-03-01") == RangePeriod(date(2024, 3, 1), None)

    def test_no_filter_is_all_time(self):
        assert period_from_filter() == AllTime()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"day": "15/03/2024"},
            {"day": "2024-03-15garbage"},
            {"month": "2024-13"},
            {"month": "March"},
            {"year": "24a"},
        ],
    )
    def test_malformed_filters_raise(self, kwargs):
        with pytest.raises(InvalidDateError):
            period_from_filter(**kwargs)


class TestStoreScope:
    def test_employee_pinned_to_own_store(self):
        user = User(id="u", name="Cashier", role=UserRole.EMPLOYEE, store_id="store-a")

        assert StoreScope.for_user(user, selected_store_id="store-b") == StoreScope("store-a")

    def test_admin_sees_selection_or_everything(self):
        admin = User(id="a", name="Owner", role=UserRole.ADMIN)

        assert StoreScope.for_user(admin, "store-b") == StoreScope("store-b")
        assert StoreScope.for_user(admin).store_id is None
        assert StoreScope.for_user(admin).includes("anything")


def test_recent_entries_returns_latest_oldest_first(example_inputs, report_factory):
    reports = [
        report_factory(example_inputs, report_id=f"r-{day}", report_date=date(2024, 3, day))
        for day in (5, 1, 9, 3, 7)
    ]

    recent = recent_entries(reports, StoreScope(), limit=3)

    assert [report.id for report in recent] == ["r-5", "r-7", "r-9"]


def test_recent_entries_default_limit(example_inputs, report_factory):
    reports = [
        report_factory(example_inputs, report_id=f"r-{day}", report_date=date(2024, 3, day))
        for day in range(1, 11)
    ]

    assert len(recent_entries(reports, StoreScope())) == 7


def test_summarize_stores(march_reports):
    stores = [
        Store(id="store-a", name="Main", location="Poblacion"),
        Store(id="store-b", name="Annex"),
        Store(id="store-c", name="New"),
    ]

    overview = summarize_stores(stores, march_reports)

    assert [item.report_count for item in overview] == [2, 1, 0]
    assert overview[0].last_report_date == date(2024, 3, 16)
    assert overview[0].total_profit == Decimal("330")
    assert overview[2].last_report_date is None
    assert overview[2].total_profit == Decimal("0")
