"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class AppSettings:
    """
    Top-level application settings.
    """

    log_level: str = "INFO"
    title: str = "Sales Dashboard API"


@dataclass(frozen=True)
class CSVParsingSettings:
    """
    Runtime settings for the CSV tokenizer worker.
    """

    progress_interval: int = 100
    queue_size: int = 256
    poll_interval_seconds: float = 0.1
    start_method: str = "spawn"
    join_timeout_seconds: float = 5.0


@dataclass(frozen=True)
class OrderIngestionSettings:
    """
    Runtime settings for mapping tokenized rows to orders.
    """

    min_header_columns: int = 10
    fallback_date_offset_days: int = 15
    max_validation_errors: int = 500
    log_validation_errors: bool = False


@dataclass(frozen=True)
class DashboardSettings:
    """
    Runtime settings for dashboard snapshots.
    """

    default_window_days: int = 30


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """
    Return cached application settings.
    """

    return AppSettings(
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
        title=_get_str_env("APP_TITLE", "Sales Dashboard API"),
    )


@lru_cache(maxsize=1)
def get_csv_parsing_settings() -> CSVParsingSettings:
    """
    Return cached tokenizer worker settings from environment variables.
    """

    return CSVParsingSettings(
        progress_interval=max(1, _get_int_env("CSV_PROGRESS_INTERVAL", 100)),
        queue_size=max(2, _get_int_env("CSV_WORKER_QUEUE_SIZE", 256)),
        poll_interval_seconds=max(0.01, _get_float_env("CSV_WORKER_POLL_SECONDS", 0.1)),
        start_method=_get_str_env("CSV_WORKER_START_METHOD", "spawn").lower(),
        join_timeout_seconds=max(0.1, _get_float_env("CSV_WORKER_JOIN_TIMEOUT_SECONDS", 5.0)),
    )


@lru_cache(maxsize=1)
def get_order_ingestion_settings() -> OrderIngestionSettings:
    """
    Return cached order mapping settings from environment variables.
    """

    return OrderIngestionSettings(
        min_header_columns=max(1, _get_int_env("ORDERS_MIN_HEADER_COLUMNS", 10)),
        fallback_date_offset_days=max(0, _get_int_env("ORDERS_FALLBACK_DATE_OFFSET_DAYS", 15)),
        max_validation_errors=max(1, _get_int_env("ORDERS_MAX_VALIDATION_ERRORS", 500)),
        log_validation_errors=_get_bool_env("ORDERS_LOG_VALIDATION_ERRORS", False),
    )


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return cached dashboard settings from environment variables.
    """

    return DashboardSettings(
        default_window_days=max(1, _get_int_env("DASHBOARD_DEFAULT_WINDOW_DAYS", 30)),
    )
