"""Tests for report storage records."""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from eod_recon.errors import InvalidAmountError
from eod_recon.models import ReconciliationStatus
from eod_recon.periods import StoreScope, recent_entries
from eod_recon.records import report_from_record, report_to_record


def test_record_round_trip(busy_day_inputs, report_factory):
    report = report_factory(replace(busy_day_inputs, gcash_notebook=Decimal("-12.40")))

    restored = report_from_record(report_to_record(report))

    assert restored == report


def test_record_uses_storage_column_names(example_inputs, report_factory):
    record = report_to_record(report_factory(example_inputs))

    assert record["store_id"] == "store-a"
    assert record["date"] == "2024-03-15"
    assert record["total_net_sales"] == Decimal("200")
    assert record["theoretical_growth"] == Decimal("500")
    assert record["recorded_profit"] == Decimal("380")
    assert record["discrepancy"] == Decimal("300")
    assert record["status"] == "SURPLUS"
    assert record["gcash_notebook"] is None
    assert record["pos_sales_details"][0]["quantity"] == 4


def test_cached_fields_are_not_recomputed_on_read(example_inputs, report_factory):
    record = report_to_record(report_factory(example_inputs))
    record["recorded_profit"] = Decimal("1.23")

    assert report_from_record(record).recorded_profit == Decimal("1.23")


@pytest.fixture
def legacy_row():
    """A row written by an older client."""
    return {
        "id": "r-legacy",
        "store_id": "store-a",
        "user_id": "u_admin",
        "date": "2024-01-05",
        "timestamp": 1704456000000,
        "sod_gpo": 1000,
        "sod_gcash": 0,
        "fund_ins": 0,
        "custom_sales": None,
        "pos_sales_details": None,
        "operational_expenses": 40,
        "expenses": None,
        "eod_gpo": 1100,
        "printer_revenue": 60,
        "total_net_sales": 60,
        "recorded_profit": 0,
        "discrepancy": 40,
        "status": "OVERAGE",
    }


def test_legacy_row(legacy_row):
    report = report_from_record(legacy_row)

    assert report.status == ReconciliationStatus.SURPLUS
    assert report.timestamp == datetime(2024, 1, 5, 12, tzinfo=timezone.utc)
    assert report.inputs.printer_revenue == Decimal("60")
    assert report.inputs.custom_sales == ()
    assert report.inputs.operational_expenses == Decimal("40")


def test_unknown_status_falls_back_to_rule(legacy_row):
    legacy_row["status"] = "DRAFT"
    legacy_row["discrepancy"] = "-3"

    assert report_from_record(legacy_row).status == ReconciliationStatus.SHORTAGE


def test_missing_timestamp_defaults_to_report_date(legacy_row):
    del legacy_row["timestamp"]

    report = report_from_record(legacy_row)

    assert report.timestamp == datetime(2024, 1, 5, tzinfo=timezone.utc)


def test_strict_read_rejects_malformed_amount(legacy_row):
    legacy_row["eod_gpo"] = "1,1OO"

    with pytest.raises(InvalidAmountError):
        report_from_record(legacy_row, strict=True)


def test_lenient_read_zeroes_malformed_amount(legacy_row):
    legacy_row["eod_gpo"] = "1,1OO"

    assert report_from_record(legacy_row, strict=False).inputs.eod_gpo == Decimal("0")


def test_naive_timestamp_is_read_as_utc(legacy_row, example_inputs, report_factory):
    legacy_row["timestamp"] = "2024-03-16T20:00:00"
    stored = report_from_record(legacy_row)
    fresh = report_factory(example_inputs)

    assert stored.timestamp == datetime(2024, 3, 16, 20, tzinfo=timezone.utc)
    assert [report.id for report in recent_entries([stored, fresh], StoreScope())] == [
        "r-1",
        "r-legacy",
    ]
