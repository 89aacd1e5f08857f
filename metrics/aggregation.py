"""
metrics/aggregation.py

Folds an order stream into daily, monthly, category and region summaries.

Formulas
--------
total_sales          = Σ amount              (non-numeric amounts count as 0)
transaction_count    = number of orders in the bucket
average_order_value  = total_sales / transaction_count   (0 for an empty bucket)

Ordering
--------
daily      ascending by calendar day
monthly    ascending by ``YYYY-MM``
category   descending by total_sales
region     descending by total_sales

Each function accumulates into a plain ``dict`` keyed by bucket, so input
order does not matter; only the final sort defines output order. All four
are pure: the same input yields structurally equal output, and nothing is
shared between calls.
"""

from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import TypeVar

from app.domain.orders import (
    CategoryMetric,
    DailyMetric,
    MonthlyMetric,
    OrderRecord,
    RegionMetric,
)

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
UNKNOWN_REGION = "Unknown"

K = TypeVar("K", bound=Hashable)


@dataclass
class _Accumulator:
    total_sales: float = 0.0
    transaction_count: int = 0

    def add(self, amount: float) -> None:
        self.total_sales += amount
        self.transaction_count += 1

    @property
    def average_order_value(self) -> float:
        if self.transaction_count == 0:
            return 0.0
        return self.total_sales / self.transaction_count


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def safe_amount(value: object) -> float:
    """Return *value* as a finite float, or ``0.0`` when it is not a usable number."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0.0
    amount = float(value)
    return amount if math.isfinite(amount) else 0.0


def order_day(order: OrderRecord) -> date | None:
    """Calendar day of *order*, or ``None`` when its date is missing or invalid."""
    value = getattr(order, "date", None)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def month_label(key: str) -> str:
    year, month = key.split("-")
    return date(int(year), int(month), 1).strftime("%b %Y")


def _accumulate(
    orders: Iterable[OrderRecord],
    key_for: Callable[[OrderRecord], K | None],
    view: str,
) -> dict[K, _Accumulator]:
    buckets: dict[K, _Accumulator] = {}
    for order in orders:
        key = key_for(order)
        if key is None:
            logger.warning(
                "Skipping order with invalid date view=%s order_id=%r",
                view,
                getattr(order, "order_id", None),
            )
            continue
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _Accumulator()
        bucket.add(safe_amount(getattr(order, "amount", None)))
    return buckets


# ---------------------------------------------------------------------------
# Public aggregations
# ---------------------------------------------------------------------------


def daily_metrics(orders: Iterable[OrderRecord]) -> list[DailyMetric]:
    """One entry per distinct calendar day, ascending by date."""
    buckets = _accumulate(orders, order_day, "daily")
    return [
        DailyMetric(
            date=day,
            total_sales=bucket.total_sales,
            transaction_count=bucket.transaction_count,
            average_order_value=bucket.average_order_value,
        )
        for day, bucket in sorted(buckets.items())
    ]


def monthly_metrics(orders: Iterable[OrderRecord]) -> list[MonthlyMetric]:
    """One entry per ``YYYY-MM`` month, ascending by month."""

    def _key(order: OrderRecord) -> str | None:
        day = order_day(order)
        return month_key(day) if day is not None else None

    buckets = _accumulate(orders, _key, "monthly")
    return [
        MonthlyMetric(
            month=key,
            label=month_label(key),
            total_sales=bucket.total_sales,
            transaction_count=bucket.transaction_count,
            average_order_value=bucket.average_order_value,
        )
        for key, bucket in sorted(buckets.items())
    ]


def category_metrics(orders: Iterable[OrderRecord]) -> list[CategoryMetric]:
    """Sales per category, largest contributor first."""
    buckets = _accumulate(
        orders,
        lambda order: getattr(order, "category", None) or UNCATEGORIZED,
        "category",
    )
    results = [
        CategoryMetric(
            category=category,
            total_sales=bucket.total_sales,
            transaction_count=bucket.transaction_count,
        )
        for category, bucket in buckets.items()
    ]
    results.sort(key=lambda metric: metric.total_sales, reverse=True)
    return results


def region_metrics(orders: Iterable[OrderRecord]) -> list[RegionMetric]:
    """Sales per shipping state, largest contributor first."""
    buckets = _accumulate(
        orders,
        lambda order: getattr(order, "state", None) or UNKNOWN_REGION,
        "region",
    )
    results = [
        RegionMetric(
            region=region,
            total_sales=bucket.total_sales,
            transaction_count=bucket.transaction_count,
        )
        for region, bucket in buckets.items()
    ]
    results.sort(key=lambda metric: metric.total_sales, reverse=True)
    return results
