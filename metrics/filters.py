"""
metrics/filters.py

Order selection ahead of aggregation: date range, category and region.

Date bounds are inclusive and compared on calendar days, so the noon
time-of-day carried by every order never matters.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from app.domain.orders import OrderRecord
from metrics.aggregation import order_day


def filter_orders(
    orders: Iterable[OrderRecord],
    *,
    start: date | None = None,
    end: date | None = None,
    category: str | None = None,
    region: str | None = None,
) -> list[OrderRecord]:
    """
    Return the orders matching every given criterion.

    Orders without a valid date are dropped whenever a date bound is set.
    """
    has_range = start is not None or end is not None
    selected: list[OrderRecord] = []
    for order in orders:
        if has_range:
            day = order_day(order)
            if day is None:
                continue
            if start is not None and day < start:
                continue
            if end is not None and day > end:
                continue
        if category is not None and order.category != category:
            continue
        if region is not None and order.state != region:
            continue
        selected.append(order)
    return selected


def data_date_window(
    orders: Iterable[OrderRecord],
    days: int = 30,
) -> tuple[date, date] | None:
    """
    ``(latest_day - days, latest_day)`` over the orders' valid dates.

    ``None`` when fewer than two distinct days are present.
    """
    valid_days = [day for day in (order_day(order) for order in orders) if day is not None]
    if not valid_days:
        return None
    earliest, latest = min(valid_days), max(valid_days)
    if earliest >= latest:
        return None
    return latest - timedelta(days=days), latest
