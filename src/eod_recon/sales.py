"""Sales aggregation across manual entries and POS cart lines."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import Decimal

import structlog

from eod_recon.models import ManualSaleLine, PosSaleLine, PosTransaction
from eod_recon.money import ZERO

logger = structlog.get_logger(__name__)

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class SalesTotals:
    """Revenue, cost and net of a day's sales, split by source."""

    manual_revenue: Decimal = ZERO
    manual_cost: Decimal = ZERO
    pos_revenue: Decimal = ZERO
    pos_cost: Decimal = ZERO
    pos_quantity: int = 0

    @property
    def manual_net(self) -> Decimal:
        return self.manual_revenue - self.manual_cost

    @property
    def pos_net(self) -> Decimal:
        return self.pos_revenue - self.pos_cost

    @property
    def total_revenue(self) -> Decimal:
        return self.manual_revenue + self.pos_revenue

    @property
    def total_cost(self) -> Decimal:
        return self.manual_cost + self.pos_cost

    @property
    def total_net(self) -> Decimal:
        return self.manual_net + self.pos_net


def aggregate_sales(
    custom_sales: Iterable[ManualSaleLine],
    pos_lines: Iterable[PosSaleLine],
    legacy_revenue: Decimal = ZERO,
) -> SalesTotals:
    """Fold manual and POS lines into unified totals.

    POS quantity multiplies both price and cost. Manual lines count once.
    ``legacy_revenue`` is revenue from old scalar fields and carries no cost.
    """
    manual_revenue = legacy_revenue
    manual_cost = ZERO
    for sale in custom_sales:
        manual_revenue += sale.amount
        manual_cost += sale.cost

    pos_revenue = ZERO
    pos_cost = ZERO
    pos_quantity = 0
    for line in pos_lines:
        pos_revenue += line.revenue
        pos_cost += line.total_cost
        pos_quantity += line.quantity

    return SalesTotals(
        manual_revenue=manual_revenue,
        manual_cost=manual_cost,
        pos_revenue=pos_revenue,
        pos_cost=pos_cost,
        pos_quantity=pos_quantity,
    )


def merge_pos_transactions(transactions: Iterable[PosTransaction]) -> list[PosSaleLine]:
    """Combine pending checkouts into one cart line per item.

    Quantities of the same item id are summed; price, cost and name come from
    the first occurrence. Transactions already attached to a report are skipped.
    """
    merged: dict[str, PosSaleLine] = {}
    merged_count = 0
    for transaction in transactions:
        if not transaction.is_pending:
            continue
        merged_count += 1
        for item in transaction.items:
            existing = merged.get(item.id)
            if existing is None:
                merged[item.id] = item
            else:
                merged[item.id] = replace(existing, quantity=existing.quantity + item.quantity)

    logger.debug("pos_lines_merged", transactions=merged_count, lines=len(merged))
    return list(merged.values())


def group_manual_sales_by_category(
    custom_sales: Iterable[ManualSaleLine],
) -> dict[str, Decimal]:
    """Return manual revenue per category, in first-seen order."""
    by_category: dict[str, Decimal] = {}
    for sale in custom_sales:
        key = sale.category or UNCATEGORIZED
        by_category[key] = by_category.get(key, ZERO) + sale.amount
    return by_category
