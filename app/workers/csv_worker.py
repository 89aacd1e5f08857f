"""
app/workers/csv_worker.py

Runs the CSV tokenizer in a separate process and relays its messages.

Protocol
--------
The caller starts one worker process per parse. The worker pushes plain
dict messages onto a bounded ``multiprocessing.Queue``:

    {"type": "progress", "progress": 0.42}     zero or more
    {"success": True, "data": [[...], ...]}     exactly one terminal message
    {"success": False, "error": "Error parsing CSV file: ..."}

Nothing is shared by reference: the text goes in as a process argument and
rows come back pickled, so no locking is needed around parse state.

Cancellation is fire-and-forget. :meth:`CSVParseWorker.terminate` kills the
process; no partial rows are delivered afterwards.
"""

from __future__ import annotations

import asyncio
import logging
import multiprocessing
import queue
import threading
from collections.abc import Iterator
from multiprocessing.context import BaseContext
from typing import Any, Protocol

from app.config import CSVParsingSettings, get_csv_parsing_settings
from app.domain.orders import Row
from app.logging_utils import log_event
from app.parsing.csv_tokenizer import DEFAULT_PROGRESS_INTERVAL, ProgressCallback, tokenize_csv
from app.schemas.csv_worker import (
    ParseFailureMessage,
    ParseRequestMessage,
    ParseSuccessMessage,
    ProgressMessage,
    TerminalMessage,
    WorkerMessage,
    format_parse_error,
    parse_worker_message,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class WorkerBusyError(RuntimeError):
    """
    Raised when a parse is started while another one is still in flight.
    """


class CSVParseError(RuntimeError):
    """
    Raised when the worker reports a terminal failure.

    ``str(exc)`` is the worker's human-readable error text.
    """


class CSVParseCancelledError(CSVParseError):
    """
    Raised when the worker was terminated before delivering a result.
    """


# ---------------------------------------------------------------------------
# Worker side
# ---------------------------------------------------------------------------


class MessageSink(Protocol):
    def put(self, item: Any) -> None:
        ...


def run_tokenize_job(
    text: str,
    outbox: MessageSink,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> None:
    """
    Worker entry point. Emits progress messages, then exactly one terminal message.

    Any failure while tokenizing is reported as a single failure message;
    rows parsed before the failure are discarded.
    """

    def _report(progress: float) -> None:
        outbox.put(ProgressMessage(progress=progress).model_dump())

    try:
        request = ParseRequestMessage.model_validate({"text": text})
        rows = tokenize_csv(request.text, _report, progress_interval=progress_interval)
    except Exception as exc:  # noqa: BLE001
        outbox.put(ParseFailureMessage(error=format_parse_error(exc)).model_dump())
        return

    outbox.put(ParseSuccessMessage(data=rows).model_dump())


# ---------------------------------------------------------------------------
# Caller side
# ---------------------------------------------------------------------------


class CSVParseWorker:
    """
    Owns one tokenizer process at a time and exposes its message stream.

    Usage::

        worker = CSVParseWorker()
        worker.start(text)
        rows = worker.collect(on_progress=print)

    ``poll`` never blocks longer than its timeout, so callers can interleave
    it with other work; ``collect_async`` does the same from an event loop.
    """

    def __init__(
        self,
        *,
        settings: CSVParsingSettings | None = None,
        context: BaseContext | None = None,
    ) -> None:
        self._settings = settings or get_csv_parsing_settings()
        self._context = context or multiprocessing.get_context(self._settings.start_method)
        self._lock = threading.Lock()
        self._process: multiprocessing.process.BaseProcess | None = None
        self._outbox: Any = None
        self._finished = True
        self._cancelled = False

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._process is not None and not self._finished

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    def start(self, text: str) -> None:
        """
        Spawn the worker process for *text*.

        Raises WorkerBusyError if a previous parse has not finished and
        CSVParseCancelledError once :meth:`cancel` was called.
        """

        with self._lock:
            if self._cancelled:
                raise CSVParseCancelledError(format_parse_error("parse was cancelled"))
            if self._process is not None and not self._finished:
                raise WorkerBusyError("A CSV parse is already in progress.")
            self._close_outbox()

            outbox = self._context.Queue(maxsize=self._settings.queue_size)
            process = self._context.Process(
                target=run_tokenize_job,
                args=(text, outbox, self._settings.progress_interval),
                name="csv-tokenizer",
                daemon=True,
            )
            process.start()
            self._outbox = outbox
            self._process = process
            self._finished = False

        log_event(
            logger,
            logging.INFO,
            "csv_worker_started",
            pid=process.pid,
            text_length=len(text),
        )

    def poll(self, timeout: float | None = None) -> WorkerMessage | None:
        """
        Wait up to *timeout* seconds for the next message.

        Returns ``None`` when nothing arrived or the worker already finished.
        A worker that exits without a terminal message yields a synthesized
        failure message.
        """

        with self._lock:
            if self._process is None:
                raise RuntimeError("CSV parse worker has not been started.")
            if self._finished:
                return None
            process = self._process
            outbox = self._outbox

        wait = self._settings.poll_interval_seconds if timeout is None else max(0.0, timeout)
        try:
            payload = outbox.get(timeout=wait)
        except queue.Empty:
            if process.is_alive():
                return None
            try:
                # Data flushed right before exit may still be in the pipe.
                payload = outbox.get(timeout=wait)
            except queue.Empty:
                return self._finish(
                    ParseFailureMessage(
                        error=format_parse_error(
                            f"worker exited unexpectedly (exit code {process.exitcode})"
                        )
                    )
                )
        except (OSError, ValueError):
            # Queue closed underneath us by terminate().
            return None

        if not self.is_active:
            return None

        message = parse_worker_message(payload)
        if isinstance(message, ProgressMessage):
            return message
        return self._finish(message)

    def messages(self) -> Iterator[WorkerMessage]:
        """
        Yield progress messages and then the terminal message.

        Stops without a terminal message when the worker is terminated.
        """

        while self.is_active:
            message = self.poll()
            if message is not None:
                yield message

    def collect(self, on_progress: ProgressCallback | None = None) -> list[Row]:
        """
        Block until the worker finishes and return its rows.

        Raises CSVParseError on a failure message and CSVParseCancelledError
        when the worker is terminated first.
        """

        for message in self.messages():
            rows = self._consume(message, on_progress)
            if rows is not None:
                return rows
        raise CSVParseCancelledError(format_parse_error("parse was cancelled"))

    async def collect_async(self, on_progress: ProgressCallback | None = None) -> list[Row]:
        """
        Await the worker result without blocking the running event loop.
        """

        while self.is_active:
            message = await asyncio.to_thread(self.poll)
            if message is None:
                continue
            rows = self._consume(message, on_progress)
            if rows is not None:
                return rows
        raise CSVParseCancelledError(format_parse_error("parse was cancelled"))

    def terminate(self) -> None:
        """
        Kill the worker process if it is still running. Safe to call repeatedly.
        """

        with self._lock:
            process = self._process
            was_active = process is not None and not self._finished
            self._finished = True

        if process is None:
            return
        if process.is_alive():
            process.terminate()
        process.join(timeout=self._settings.join_timeout_seconds)
        if was_active:
            log_event(
                logger,
                logging.INFO,
                "csv_worker_terminated",
                pid=process.pid,
                exit_code=process.exitcode,
            )

    def cancel(self) -> None:
        """
        Terminate the current parse and refuse any later :meth:`start`.
        """

        with self._lock:
            self._cancelled = True
        self.terminate()

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def __enter__(self) -> CSVParseWorker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.terminate()
        with self._lock:
            self._close_outbox()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _consume(
        message: WorkerMessage,
        on_progress: ProgressCallback | None,
    ) -> list[Row] | None:
        if isinstance(message, ProgressMessage):
            if on_progress is not None:
                on_progress(message.progress)
            return None
        if isinstance(message, ParseSuccessMessage):
            return message.data
        raise CSVParseError(message.error)

    def _finish(self, message: TerminalMessage) -> TerminalMessage:
        with self._lock:
            self._finished = True
            process = self._process

        if process is not None:
            process.join(timeout=self._settings.join_timeout_seconds)
            if process.is_alive():
                process.terminate()
                process.join(timeout=self._settings.join_timeout_seconds)

        if isinstance(message, ParseSuccessMessage):
            log_event(
                logger,
                logging.INFO,
                "csv_worker_completed",
                pid=process.pid if process else None,
                rows=len(message.data),
            )
        else:
            log_event(
                logger,
                logging.WARNING,
                "csv_worker_failed",
                pid=process.pid if process else None,
                error=message.error,
            )
        return message

    def _close_outbox(self) -> None:
        if self._outbox is None:
            return
        self._outbox.close()
        self._outbox.cancel_join_thread()
        self._outbox = None
