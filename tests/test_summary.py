"""
tests/test_summary.py

Pytest unit tests for the dashboard summary and split-half trends.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from app.domain.orders import DailyMetric
from metrics.summary import EMPTY_SUMMARY, percent_change, round_half_up, summarize_daily_metrics


def _daily(*values: tuple[float, int]) -> list[DailyMetric]:
    start = date(2022, 4, 1)
    return [
        DailyMetric(
            date=start + timedelta(days=offset),
            total_sales=sales,
            transaction_count=count,
            average_order_value=sales / count,
        )
        for offset, (sales, count) in enumerate(values)
    ]


class TestSummary:
    def test_empty_input(self) -> None:
        assert summarize_daily_metrics([]) == EMPTY_SUMMARY

    def test_split_half_trends(self) -> None:
        summary = summarize_daily_metrics(_daily((100, 1), (100, 1), (150, 1), (150, 1)))

        assert summary.total_sales == 500
        assert summary.total_transactions == 4
        assert summary.average_order_value == 125
        assert summary.sales_trend == 50
        assert summary.transactions_trend == 0
        assert summary.aov_trend == 50

    def test_odd_length_puts_middle_day_in_second_half(self) -> None:
        summary = summarize_daily_metrics(_daily((100, 1), (50, 1), (50, 1)))
        assert summary.sales_trend == 0

    def test_single_day_has_zero_trends(self) -> None:
        summary = summarize_daily_metrics(_daily((100, 2)))

        assert summary.total_sales == 100
        assert summary.average_order_value == 50
        assert (summary.sales_trend, summary.transactions_trend, summary.aov_trend) == (0, 0, 0)

    def test_aov_trend_uses_aggregate_half_averages(self) -> None:
        # First half: 300 over 3 orders (AOV 100); second half: 400 over 2 (AOV 200).
        summary = summarize_daily_metrics(_daily((100, 1), (200, 2), (200, 1), (200, 1)))
        assert summary.aov_trend == 100
        assert summary.transactions_trend == -33


class TestPercentChange:
    def test_zero_previous_is_zero(self) -> None:
        assert percent_change(0, 500) == 0

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2.5, 3), (-2.5, -2), (0.4, 0), (-0.6, -1)],
    )
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected
