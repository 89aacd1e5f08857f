"""
app/api/routers/metrics.py

Dashboard metric endpoints over the active order dataset.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import MetricFilters
from app.domain.orders import DashboardSnapshot
from app.schemas.metrics import (
    CategoryMetricResponse,
    DailyMetricResponse,
    DashboardResponse,
    DatasetResponse,
    MonthlyMetricResponse,
    RegionMetricResponse,
    SalesSummaryResponse,
)
from app.services.dashboard_service import SalesDashboardService, get_dashboard_service

router = APIRouter(tags=["metrics"])


def _snapshot(filters: MetricFilters, dashboard: SalesDashboardService) -> DashboardSnapshot:
    return dashboard.snapshot(
        start=filters.start_date,
        end=filters.end_date,
        category=filters.category,
        region=filters.region,
    )


@router.get("/metrics/dashboard", response_model=DashboardResponse)
def get_dashboard(
    filters: MetricFilters = Depends(),
    dashboard: SalesDashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    return DashboardResponse.from_snapshot(_snapshot(filters, dashboard), source=dashboard.source)


@router.get("/metrics/daily", response_model=list[DailyMetricResponse])
def get_daily_metrics(
    filters: MetricFilters = Depends(),
    dashboard: SalesDashboardService = Depends(get_dashboard_service),
) -> list[DailyMetricResponse]:
    return [DailyMetricResponse.from_metric(metric) for metric in _snapshot(filters, dashboard).daily]


@router.get("/metrics/monthly", response_model=list[MonthlyMetricResponse])
def get_monthly_metrics(
    filters: MetricFilters = Depends(),
    dashboard: SalesDashboardService = Depends(get_dashboard_service),
) -> list[MonthlyMetricResponse]:
    return [MonthlyMetricResponse.from_metric(metric) for metric in _snapshot(filters, dashboard).monthly]


@router.get("/metrics/categories", response_model=list[CategoryMetricResponse])
def get_category_metrics(
    filters: MetricFilters = Depends(),
    dashboard: SalesDashboardService = Depends(get_dashboard_service),
) -> list[CategoryMetricResponse]:
    return [CategoryMetricResponse.from_metric(metric) for metric in _snapshot(filters, dashboard).categories]


@router.get("/metrics/regions", response_model=list[RegionMetricResponse])
def get_region_metrics(
    filters: MetricFilters = Depends(),
    dashboard: SalesDashboardService = Depends(get_dashboard_service),
) -> list[RegionMetricResponse]:
    return [RegionMetricResponse.from_metric(metric) for metric in _snapshot(filters, dashboard).regions]


@router.get("/metrics/summary", response_model=SalesSummaryResponse)
def get_summary(
    filters: MetricFilters = Depends(),
    dashboard: SalesDashboardService = Depends(get_dashboard_service),
) -> SalesSummaryResponse:
    return SalesSummaryResponse.from_summary(_snapshot(filters, dashboard).summary)


@router.get("/dataset", response_model=DatasetResponse)
def get_dataset(
    dashboard: SalesDashboardService = Depends(get_dashboard_service),
) -> DatasetResponse:
    return DatasetResponse(source=dashboard.source, order_count=len(dashboard.orders))


@router.post("/dataset/reset", response_model=DatasetResponse)
def reset_dataset(
    dashboard: SalesDashboardService = Depends(get_dashboard_service),
) -> DatasetResponse:
    """
    Replace the active dataset with the built-in sample orders.
    """

    dashboard.reset_to_sample()
    return DatasetResponse(source=dashboard.source, order_count=len(dashboard.orders))
