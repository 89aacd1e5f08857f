"""
app/workers package marker.
"""

from app.workers.csv_worker import (
    CSVParseCancelledError,
    CSVParseError,
    CSVParseWorker,
    WorkerBusyError,
    run_tokenize_job,
)

__all__ = [
    "CSVParseCancelledError",
    "CSVParseError",
    "CSVParseWorker",
    "WorkerBusyError",
    "run_tokenize_job",
]
