"""Money helpers: coercion, tolerance checks and rounding."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from eod_recon.config import get_settings
from eod_recon.errors import InvalidAmountError

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Absorbs noise from repeated additions of two-decimal amounts.
SNAP_EPSILON = Decimal("0.005")

# Business rule for a BALANCED day. Must stay separate from SNAP_EPSILON.
BALANCED_TOLERANCE = Decimal("1")


def _parse(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        stripped = value.strip().replace(",", "")
        if not stripped:
            return None
        try:
            parsed = Decimal(stripped)
        except InvalidOperation:
            return None
    else:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def num(value: Any) -> Decimal:
    """Parse a number, falling back to zero for anything unparseable.

    Only meant for reading legacy rows; new input goes through to_amount.
    """
    parsed = _parse(value)
    return ZERO if parsed is None else parsed


def to_amount(value: Any, field: str, *, allow_negative: bool = False) -> Decimal:
    """Strictly parse a monetary input.

    Missing values (None or blank strings) are zero. Anything else must be a
    finite number, and non-negative unless allow_negative is set.

    Raises:
        InvalidAmountError: If the value is not numeric or is negative.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return ZERO
    parsed = _parse(value)
    if parsed is None:
        raise InvalidAmountError(field, value, "must be a finite number")
    if parsed < 0 and not allow_negative:
        raise InvalidAmountError(field, value, "must not be negative")
    return parsed


def snap(value: Decimal) -> Decimal:
    """Return zero when value is within SNAP_EPSILON of zero."""
    if abs(value) < SNAP_EPSILON:
        return ZERO
    return value


def is_balanced(value: Decimal) -> bool:
    """Return True if a variance is within the BALANCED tolerance."""
    return abs(value) < BALANCED_TOLERANCE


def total(values: Iterable[Decimal]) -> Decimal:
    """Sum Decimals starting from an exact zero."""
    return sum(values, ZERO)


def round_money(value: Decimal, quantize: Decimal = CENT) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(quantize, rounding=ROUND_HALF_UP)


def format_money(value: Decimal, symbol: str | None = None, *, signed: bool = False) -> str:
    """Format an amount for display, e.g. ``₱1,234.50`` or ``-₱20.00``."""
    if symbol is None:
        symbol = get_settings().currency_symbol
    rounded = round_money(value)
    sign = "-" if rounded < 0 else ("+" if signed and rounded > 0 else "")
    return f"{sign}{symbol}{abs(rounded):,.2f}"
