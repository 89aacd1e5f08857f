"""
app/schemas/metrics.py

Response schemas for dashboard metric endpoints.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from app.domain.orders import (
    CategoryMetric,
    DailyMetric,
    DashboardSnapshot,
    MonthlyMetric,
    RegionMetric,
    SalesSummary,
)


class DailyMetricResponse(BaseModel):
    date: dt.date
    total_sales: float
    transaction_count: int = Field(..., ge=1)
    average_order_value: float

    @classmethod
    def from_metric(cls, metric: DailyMetric) -> DailyMetricResponse:
        return cls(
            date=metric.date,
            total_sales=metric.total_sales,
            transaction_count=metric.transaction_count,
            average_order_value=metric.average_order_value,
        )


class MonthlyMetricResponse(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    label: str
    total_sales: float
    transaction_count: int = Field(..., ge=1)
    average_order_value: float

    @classmethod
    def from_metric(cls, metric: MonthlyMetric) -> MonthlyMetricResponse:
        return cls(
            month=metric.month,
            label=metric.label,
            total_sales=metric.total_sales,
            transaction_count=metric.transaction_count,
            average_order_value=metric.average_order_value,
        )


class CategoryMetricResponse(BaseModel):
    category: str
    total_sales: float
    transaction_count: int = Field(..., ge=1)

    @classmethod
    def from_metric(cls, metric: CategoryMetric) -> CategoryMetricResponse:
        return cls(
            category=metric.category,
            total_sales=metric.total_sales,
            transaction_count=metric.transaction_count,
        )


class RegionMetricResponse(BaseModel):
    region: str
    total_sales: float
    transaction_count: int = Field(..., ge=1)

    @classmethod
    def from_metric(cls, metric: RegionMetric) -> RegionMetricResponse:
        return cls(
            region=metric.region,
            total_sales=metric.total_sales,
            transaction_count=metric.transaction_count,
        )


class SalesSummaryResponse(BaseModel):
    total_sales: float
    total_transactions: int = Field(..., ge=0)
    average_order_value: float
    sales_trend: int
    transactions_trend: int
    aov_trend: int

    @classmethod
    def from_summary(cls, summary: SalesSummary) -> SalesSummaryResponse:
        return cls(
            total_sales=summary.total_sales,
            total_transactions=summary.total_transactions,
            average_order_value=summary.average_order_value,
            sales_trend=summary.sales_trend,
            transactions_trend=summary.transactions_trend,
            aov_trend=summary.aov_trend,
        )


class DashboardResponse(BaseModel):
    """
    All metric views for one filter selection.

    ``start_date``/``end_date`` echo the range actually applied, which may
    differ from the request when it matched no orders.
    """

    source: str
    order_count: int = Field(..., ge=0)
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    summary: SalesSummaryResponse
    daily: list[DailyMetricResponse] = Field(default_factory=list)
    monthly: list[MonthlyMetricResponse] = Field(default_factory=list)
    categories: list[CategoryMetricResponse] = Field(default_factory=list)
    regions: list[RegionMetricResponse] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: DashboardSnapshot, *, source: str) -> DashboardResponse:
        return cls(
            source=source,
            order_count=snapshot.order_count,
            start_date=snapshot.start_date,
            end_date=snapshot.end_date,
            summary=SalesSummaryResponse.from_summary(snapshot.summary),
            daily=[DailyMetricResponse.from_metric(metric) for metric in snapshot.daily],
            monthly=[MonthlyMetricResponse.from_metric(metric) for metric in snapshot.monthly],
            categories=[CategoryMetricResponse.from_metric(metric) for metric in snapshot.categories],
            regions=[RegionMetricResponse.from_metric(metric) for metric in snapshot.regions],
        )


class DatasetResponse(BaseModel):
    source: str
    order_count: int = Field(..., ge=0)
