"""Calendar helpers shared by the boundary parsers and period views."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from eod_recon.errors import InvalidDateError


def parse_iso_date(value: Any, field: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` date or a full ISO datetime (truncated to its date).

    Raises:
        InvalidDateError: If the value is missing or not a calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError as exc:
            raise InvalidDateError(field, value, "must be an ISO date (YYYY-MM-DD)") from exc
    raise InvalidDateError(field, value, "must be an ISO date (YYYY-MM-DD)")


def as_utc(value: datetime) -> datetime:
    """Read a naive datetime as UTC; aware datetimes are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_year_month(value: str, field: str = "month") -> tuple[int, int]:
    """Parse a ``YYYY-MM`` prefix into (year, month)."""
    parts = value.strip().split("-") if isinstance(value, str) else []
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise InvalidDateError(field, value, "must be YYYY-MM")
    year, month = int(parts[0]), int(parts[1])
    if not (1 <= month <= 12):
        raise InvalidDateError(field, value, "month must be 1-12")
    return year, month


def day_key(value: date) -> str:
    return value.isoformat()


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"
