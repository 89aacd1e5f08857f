"""
app/schemas package marker.
"""

from app.schemas.csv_ingestion import CSVIngestionSummaryResponse, CSVValidationErrorResponse
from app.schemas.csv_worker import (
    ParseFailureMessage,
    ParseRequestMessage,
    ParseSuccessMessage,
    ProgressMessage,
    parse_worker_message,
)
from app.schemas.metrics import DashboardResponse, DatasetResponse, SalesSummaryResponse
from app.schemas.uploads import (
    UploadJobAcceptedResponse,
    UploadJobListResponse,
    UploadJobStatusResponse,
)

__all__ = [
    "CSVIngestionSummaryResponse",
    "CSVValidationErrorResponse",
    "DashboardResponse",
    "DatasetResponse",
    "ParseFailureMessage",
    "ParseRequestMessage",
    "ParseSuccessMessage",
    "ProgressMessage",
    "SalesSummaryResponse",
    "UploadJobAcceptedResponse",
    "UploadJobListResponse",
    "UploadJobStatusResponse",
    "parse_worker_message",
]
