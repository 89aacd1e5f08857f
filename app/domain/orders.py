"""
app/domain/orders.py

Domain models for order ingestion and sales metrics.

Every metric type is a derived view: computed from an order sequence,
returned, and discarded. None of them is mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

Row = list[str]
"""One tokenized CSV line: ordered field strings, no coercion applied."""


@dataclass(frozen=True)
class OrderRecord:
    """
    One typed order mapped from a tokenized export row.

    ``date`` is a naive local datetime pinned to 12:00 so that formatting
    it as ``YYYY-MM-DD`` never shifts the calendar day. ``None`` marks a
    record without a usable date; aggregation skips such records.
    """

    order_id: str
    date: datetime | None
    status: str
    quantity: int = 1
    amount: float = 0.0
    currency: str = "INR"
    category: str = "Uncategorized"
    city: str = "Unknown"
    state: str = "Unknown"
    date_inferred: bool = False
    """True when ``date`` is the placeholder produced for an unparseable value."""


@dataclass(frozen=True)
class DailyMetric:
    date: date
    total_sales: float
    transaction_count: int
    average_order_value: float


@dataclass(frozen=True)
class MonthlyMetric:
    month: str
    """Sort key in ``YYYY-MM`` form."""

    label: str
    """Human-readable month and year, e.g. ``"Apr 2022"``."""

    total_sales: float
    transaction_count: int
    average_order_value: float


@dataclass(frozen=True)
class CategoryMetric:
    category: str
    total_sales: float
    transaction_count: int


@dataclass(frozen=True)
class RegionMetric:
    region: str
    total_sales: float
    transaction_count: int


@dataclass(frozen=True)
class SalesSummary:
    """
    Headline totals plus split-half trend percentages over daily metrics.
    """

    total_sales: float
    total_transactions: int
    average_order_value: float
    sales_trend: int
    transactions_trend: int
    aov_trend: int


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    All four metric views and the summary for one order selection.
    """

    daily: list[DailyMetric]
    monthly: list[MonthlyMetric]
    categories: list[CategoryMetric]
    regions: list[RegionMetric]
    summary: SalesSummary
    order_count: int
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class RowValidationError:
    """
    One CSV row adaptation problem. Recorded for reporting, never raised.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class OrderIngestionSummary:
    """
    End-of-run summary for one uploaded export.
    """

    rows_read: int
    orders_loaded: int
    rows_skipped: int
    rows_excluded: int
    used_fallback: bool = False
    message: str | None = None
    validation_errors: list[RowValidationError] = field(default_factory=list)
