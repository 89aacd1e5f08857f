"""
metrics/summary.py

Headline totals and split-half trends over daily metrics.

Formulas
--------
midpoint            = floor(len(daily) / 2)
first half          = daily[:midpoint]
second half         = daily[midpoint:]
trend (percent)     = round((second - first) / first * 100)   when first > 0, else 0

The AOV trend compares each half's aggregate average
(``half_sales / half_transactions``), not the mean of per-day averages.
Rounding is half-up, so -2.5 rounds to -2 and 2.5 to 3.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from app.domain.orders import DailyMetric, SalesSummary

EMPTY_SUMMARY = SalesSummary(
    total_sales=0.0,
    total_transactions=0,
    average_order_value=0.0,
    sales_trend=0,
    transactions_trend=0,
    aov_trend=0,
)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def percent_change(previous: float, current: float) -> int:
    """
    Whole-number percent change from *previous* to *current*.

    Returns 0 when *previous* is not positive.
    """
    if previous <= 0:
        return 0
    return round_half_up((current - previous) / previous * 100)


def _average(sales: float, transactions: int) -> float:
    return sales / transactions if transactions > 0 else 0.0


def summarize_daily_metrics(daily: Sequence[DailyMetric]) -> SalesSummary:
    """
    Build the dashboard summary from date-ordered daily metrics.
    """
    if not daily:
        return EMPTY_SUMMARY

    total_sales = sum(item.total_sales for item in daily)
    total_transactions = sum(item.transaction_count for item in daily)

    midpoint = len(daily) // 2
    first, second = daily[:midpoint], daily[midpoint:]

    first_sales = sum(item.total_sales for item in first)
    second_sales = sum(item.total_sales for item in second)
    first_transactions = sum(item.transaction_count for item in first)
    second_transactions = sum(item.transaction_count for item in second)

    return SalesSummary(
        total_sales=total_sales,
        total_transactions=total_transactions,
        average_order_value=_average(total_sales, total_transactions),
        sales_trend=percent_change(first_sales, second_sales),
        transactions_trend=percent_change(first_transactions, second_transactions),
        aov_trend=percent_change(
            _average(first_sales, first_transactions),
            _average(second_sales, second_transactions),
        ),
    )
