"""
app/services/dashboard_service.py

In-memory order dataset and dashboard snapshots.

The service starts with the built-in sample orders. A successful upload
replaces the dataset; an upload without usable orders leaves the current
(last known good) dataset in place. Nothing is written to disk.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from datetime import date
from functools import lru_cache

from app.config import get_dashboard_settings
from app.domain.orders import DashboardSnapshot, OrderRecord
from metrics.aggregation import category_metrics, daily_metrics, monthly_metrics, region_metrics
from metrics.filters import data_date_window, filter_orders
from metrics.sample_data import sample_orders
from metrics.summary import summarize_daily_metrics

logger = logging.getLogger(__name__)

SOURCE_SAMPLE = "sample"
SOURCE_UPLOAD = "upload"


class SalesDashboardService:
    """
    Holds the active order dataset and derives metric views from it.
    """

    def __init__(
        self,
        *,
        initial_orders: Sequence[OrderRecord] | None = None,
        default_window_days: int = 30,
    ) -> None:
        self._lock = threading.Lock()
        if initial_orders is None:
            self._orders: tuple[OrderRecord, ...] = tuple(sample_orders())
            self._source = SOURCE_SAMPLE
        else:
            self._orders = tuple(initial_orders)
            self._source = SOURCE_UPLOAD
        self._default_window_days = max(1, default_window_days)

    @property
    def orders(self) -> list[OrderRecord]:
        with self._lock:
            return list(self._orders)

    @property
    def source(self) -> str:
        with self._lock:
            return self._source

    def replace_orders(self, orders: Sequence[OrderRecord]) -> None:
        """
        Make *orders* the active dataset. An empty sequence is ignored.
        """

        if not orders:
            logger.warning("Ignoring empty order dataset; keeping current %s dataset", self.source)
            return
        with self._lock:
            self._orders = tuple(orders)
            self._source = SOURCE_UPLOAD
        logger.info("Active order dataset replaced orders=%d", len(orders))

    def reset_to_sample(self) -> None:
        with self._lock:
            self._orders = tuple(sample_orders())
            self._source = SOURCE_SAMPLE
        logger.info("Active order dataset reset to sample data")

    def snapshot(
        self,
        *,
        start: date | None = None,
        end: date | None = None,
        category: str | None = None,
        region: str | None = None,
    ) -> DashboardSnapshot:
        """
        Compute all metric views for the selected orders.

        When a date range selects nothing from a non-empty dataset, the
        range snaps to the last ``default_window_days`` of data instead.
        """

        orders = self.orders
        dated = filter_orders(orders, start=start, end=end)
        if (start is not None or end is not None) and not dated and orders:
            window = data_date_window(orders, self._default_window_days)
            if window is not None:
                start, end = window
                dated = filter_orders(orders, start=start, end=end)
                logger.info("Date range matched no orders; snapped to %s..%s", start, end)
            else:
                start = end = None
                dated = orders

        selected = filter_orders(dated, category=category, region=region)
        daily = daily_metrics(selected)
        return DashboardSnapshot(
            daily=daily,
            monthly=monthly_metrics(selected),
            categories=category_metrics(selected),
            regions=region_metrics(selected),
            summary=summarize_daily_metrics(daily),
            order_count=len(selected),
            start_date=start,
            end_date=end,
        )


@lru_cache(maxsize=1)
def get_dashboard_service() -> SalesDashboardService:
    return SalesDashboardService(
        default_window_days=get_dashboard_settings().default_window_days,
    )
