"""
app/services/csv_ingestion_service.py

Service layer for order export uploads.

Flow for one upload::

    bytes ──decode──▶ text ──worker──▶ rows ──mapper──▶ orders ──▶ dashboard dataset

* Structural problems (not UTF-8, header too narrow, tokenizer failure)
  raise before any state changes.
* Row-level problems are recovered inside the mapper and reported in the
  summary.
* An export that yields zero usable orders keeps the previous dataset and
  sets ``used_fallback`` on the summary.

Only one upload runs at a time; a second one is rejected with
:class:`UploadInProgressError` until the first finishes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from functools import lru_cache

from fastapi import UploadFile

from app.config import get_order_ingestion_settings
from app.domain.orders import OrderIngestionSummary, Row
from app.mappers.order_mapper import OrderRecordMapper
from app.parsing.csv_tokenizer import ProgressCallback
from app.services.csv_parsing_service import CSVParsingService, get_csv_parsing_service
from app.services.dashboard_service import SalesDashboardService, get_dashboard_service
from app.validators.csv_validator import CSVHeaderValidationError, OrderFieldValidator
from app.schemas.csv_worker import format_parse_error
from app.workers.csv_worker import CSVParseCancelledError, CSVParseWorker

logger = logging.getLogger(__name__)

NO_VALID_ORDERS_MESSAGE = (
    "No valid orders found in the CSV. Please check your file and try again. "
    "The dashboard keeps showing the previous data for now."
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class UploadInProgressError(RuntimeError):
    """
    Raised when an upload is started while another one is still running.
    """


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _cancel_check(worker: CSVParseWorker | None) -> Callable[[], bool] | None:
    if worker is None:
        return None
    return lambda: worker.cancelled


def decode_csv_bytes(data: bytes) -> str:
    """
    Decode an uploaded export. A UTF-8 byte order mark is dropped.
    """

    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise CSVHeaderValidationError("CSV must be UTF-8 encoded.") from exc


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Coordinates CSV tokenizing, order mapping, and dataset replacement.
    """

    def __init__(
        self,
        *,
        parser: CSVParsingService | None = None,
        mapper: OrderRecordMapper | None = None,
        dashboard: SalesDashboardService | None = None,
    ) -> None:
        self._parser = parser or get_csv_parsing_service()
        self._mapper = mapper or OrderRecordMapper()
        self._dashboard = dashboard or get_dashboard_service()
        self._upload_lock = threading.Lock()

    @property
    def dashboard(self) -> SalesDashboardService:
        return self._dashboard

    @property
    def is_busy(self) -> bool:
        return self._upload_lock.locked()

    def create_worker(self) -> CSVParseWorker:
        return self._parser.create_worker()

    def ingest_text(
        self,
        text: str,
        on_progress: ProgressCallback | None = None,
        *,
        worker: CSVParseWorker | None = None,
    ) -> OrderIngestionSummary:
        """
        Tokenize *text* in a worker process and load the resulting orders.
        """

        with self._exclusive_upload():
            rows = self._parser.parse_text(text, on_progress, worker=worker)
            return self.ingest_rows(rows, cancelled=_cancel_check(worker))

    async def ingest_text_async(
        self,
        text: str,
        on_progress: ProgressCallback | None = None,
        *,
        worker: CSVParseWorker | None = None,
    ) -> OrderIngestionSummary:
        """
        Same as :meth:`ingest_text` without blocking the running event loop.
        """

        with self._exclusive_upload():
            rows = await self._parser.parse_text_async(text, on_progress, worker=worker)
            return self.ingest_rows(rows, cancelled=_cancel_check(worker))

    async def ingest_upload_async(
        self,
        upload_file: UploadFile,
        on_progress: ProgressCallback | None = None,
    ) -> OrderIngestionSummary:
        data = await upload_file.read()
        return await self.ingest_text_async(decode_csv_bytes(data), on_progress)

    def ingest_rows(
        self,
        rows: Sequence[Row],
        *,
        cancelled: Callable[[], bool] | None = None,
    ) -> OrderIngestionSummary:
        """
        Map tokenized rows and replace the dashboard dataset.

        Raises CSVHeaderValidationError for an unexpected header and
        CSVParseCancelledError when *cancelled* reports true once mapping
        is done; the dataset is left untouched in both cases.
        """

        result = self._mapper.map_rows(rows)

        if not result.orders:
            logger.warning(
                "Upload produced no valid orders rows=%d skipped=%d excluded=%d; "
                "keeping current %s dataset",
                result.rows_read,
                result.rows_skipped,
                result.rows_excluded,
                self._dashboard.source,
            )
            return OrderIngestionSummary(
                rows_read=result.rows_read,
                orders_loaded=0,
                rows_skipped=result.rows_skipped,
                rows_excluded=result.rows_excluded,
                used_fallback=True,
                message=NO_VALID_ORDERS_MESSAGE,
                validation_errors=result.validation_errors,
            )

        if cancelled is not None and cancelled():
            raise CSVParseCancelledError(format_parse_error("upload was cancelled"))

        self._dashboard.replace_orders(result.orders)
        return OrderIngestionSummary(
            rows_read=result.rows_read,
            orders_loaded=len(result.orders),
            rows_skipped=result.rows_skipped,
            rows_excluded=result.rows_excluded,
            validation_errors=result.validation_errors,
        )

    @contextmanager
    def _exclusive_upload(self) -> Iterator[None]:
        if not self._upload_lock.acquire(blocking=False):
            raise UploadInProgressError("Another CSV upload is still being processed.")
        try:
            yield
        finally:
            self._upload_lock.release()


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """
    settings = get_order_ingestion_settings()
    mapper = OrderRecordMapper(
        validator=OrderFieldValidator(min_header_columns=settings.min_header_columns),
        fallback_date_offset_days=settings.fallback_date_offset_days,
        max_validation_errors=settings.max_validation_errors,
        log_validation_errors=settings.log_validation_errors,
    )
    return CSVIngestionService(mapper=mapper)
