"""
app/domain package marker.
"""

from app.domain.orders import (
    CategoryMetric,
    DailyMetric,
    DashboardSnapshot,
    MonthlyMetric,
    OrderIngestionSummary,
    OrderRecord,
    RegionMetric,
    Row,
    RowValidationError,
    SalesSummary,
)

__all__ = [
    "CategoryMetric",
    "DailyMetric",
    "DashboardSnapshot",
    "MonthlyMetric",
    "OrderIngestionSummary",
    "OrderRecord",
    "RegionMetric",
    "Row",
    "RowValidationError",
    "SalesSummary",
]
