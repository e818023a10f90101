"""Pytest configuration and fixtures."""

import os
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("STRICT_INPUT", "true")

from eod_recon.config import get_settings  # noqa: E402
from eod_recon.models import (  # noqa: E402
    ExpenseLine,
    ManualSaleLine,
    PosSaleLine,
    ReportInputs,
)
from eod_recon.reconciliation import compute_daily_report  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_report(
    inputs: ReportInputs,
    *,
    report_id: str = "r-1",
    store_id: str = "store-a",
    report_date: date = date(2024, 3, 15),
    hour: int = 20,
):
    """Compute a report with fixed identity fields."""
    return compute_daily_report(
        inputs,
        report_id=report_id,
        store_id=store_id,
        user_id="u-cashier",
        report_date=report_date,
        timestamp=datetime(
            report_date.year, report_date.month, report_date.day, hour, tzinfo=timezone.utc
        ),
    )


@pytest.fixture
def example_inputs():
    """Start 1500, end 2000, one POS line of 4 x (50 - 30)."""
    return ReportInputs(
        sod_gpo=Decimal("1000"),
        sod_gcash=Decimal("500"),
        eod_gpo=Decimal("1200"),
        eod_gcash=Decimal("500"),
        eod_actual_cash=Decimal("300"),
        pos_sales_details=(
            PosSaleLine(
                id="item-1",
                name="Toy car",
                price=Decimal("50"),
                cost=Decimal("30"),
                quantity=4,
            ),
        ),
    )


@pytest.fixture
def busy_day_inputs():
    """A day with every kind of input filled in."""
    return ReportInputs(
        sod_gpo=Decimal("2000.00"),
        sod_gcash=Decimal("1500.00"),
        sod_petty_cash=Decimal("250.00"),
        fund_in=Decimal("1000.00"),
        cash_atm=Decimal("500.00"),
        eod_gpo=Decimal("1800.50"),
        eod_gcash=Decimal("2600.25"),
        eod_actual_cash=Decimal("1420.00"),
        custom_sales=(
            ManualSaleLine(
                id="m-1",
                name="Printing",
                amount=Decimal("120.00"),
                cost=Decimal("20.00"),
                category="Printers",
            ),
            ManualSaleLine(id="m-2", name="Load", amount=Decimal("55.50")),
        ),
        pos_sales_details=(
            PosSaleLine(
                id="p-1",
                name="Notebook",
                price=Decimal("35.00"),
                cost=Decimal("22.50"),
                quantity=3,
            ),
            PosSaleLine(
                id="p-2",
                name="Ballpen",
                price=Decimal("12.00"),
                cost=Decimal("7.00"),
                quantity=10,
            ),
        ),
        bank_transfer_fees=Decimal("15.00"),
        expenses=(
            ExpenseLine(id="e-1", amount=Decimal("80.00"), description="Water"),
            ExpenseLine(id="e-2", amount=Decimal("45.00"), description="Tape"),
        ),
    )


@pytest.fixture
def report_factory():
    """Return the make_report helper."""
    return make_report
