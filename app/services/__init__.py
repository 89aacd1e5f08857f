"""
app/services package marker.
"""

from app.services.csv_ingestion_service import (
    CSVIngestionService,
    UploadInProgressError,
    get_csv_ingestion_service,
)
from app.services.csv_parsing_service import CSVParsingService, get_csv_parsing_service
from app.services.dashboard_service import SalesDashboardService, get_dashboard_service
from app.services.upload_job_service import (
    UploadJobNotFoundError,
    UploadJobService,
    get_upload_job_service,
)

__all__ = [
    "CSVIngestionService",
    "CSVParsingService",
    "SalesDashboardService",
    "UploadInProgressError",
    "UploadJobNotFoundError",
    "UploadJobService",
    "get_csv_ingestion_service",
    "get_csv_parsing_service",
    "get_dashboard_service",
    "get_upload_job_service",
]
