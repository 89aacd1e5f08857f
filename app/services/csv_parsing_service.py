"""
app/services/csv_parsing_service.py

Tokenizes CSV text through an isolated worker process.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import lru_cache

from app.config import CSVParsingSettings, get_csv_parsing_settings
from app.domain.orders import Row
from app.parsing.csv_tokenizer import ProgressCallback
from app.schemas.csv_worker import format_parse_error
from app.workers.csv_worker import CSVParseCancelledError, CSVParseWorker

logger = logging.getLogger(__name__)


class CSVParsingService:
    """
    Starts one worker per parse and returns its rows.

    Both entry points raise :class:`~app.workers.csv_worker.CSVParseError`
    with the worker's error text on failure. The worker is always cleaned
    up, including when the caller is cancelled mid-parse.
    """

    def __init__(
        self,
        *,
        settings: CSVParsingSettings | None = None,
        worker_factory: Callable[[], CSVParseWorker] | None = None,
    ) -> None:
        self._settings = settings or get_csv_parsing_settings()
        self._worker_factory = worker_factory

    def create_worker(self) -> CSVParseWorker:
        if self._worker_factory is not None:
            return self._worker_factory()
        return CSVParseWorker(settings=self._settings)

    def parse_text(
        self,
        text: str,
        on_progress: ProgressCallback | None = None,
        *,
        worker: CSVParseWorker | None = None,
    ) -> list[Row]:
        """
        Block until *text* is tokenized.
        """

        with worker or self.create_worker() as active_worker:
            active_worker.start(text)
            rows = active_worker.collect(on_progress)
            if active_worker.cancelled:
                raise CSVParseCancelledError(format_parse_error("parse was cancelled"))
        logger.debug("Tokenized CSV text length=%d rows=%d", len(text), len(rows))
        return rows

    async def parse_text_async(
        self,
        text: str,
        on_progress: ProgressCallback | None = None,
        *,
        worker: CSVParseWorker | None = None,
    ) -> list[Row]:
        """
        Tokenize *text* while leaving the event loop free for other requests.
        """

        with worker or self.create_worker() as active_worker:
            active_worker.start(text)
            rows = await active_worker.collect_async(on_progress)
            if active_worker.cancelled:
                raise CSVParseCancelledError(format_parse_error("parse was cancelled"))
        logger.debug("Tokenized CSV text length=%d rows=%d", len(text), len(rows))
        return rows


@lru_cache(maxsize=1)
def get_csv_parsing_service() -> CSVParsingService:
    """
    Build and cache the parsing service with env-driven settings.
    """
    return CSVParsingService(settings=get_csv_parsing_settings())
