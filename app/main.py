from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import get_app_settings


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = get_app_settings().log_level
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Load the dashboard dataset on boot; terminate running upload workers on exit."""
    from app.services.dashboard_service import get_dashboard_service
    from app.services.upload_job_service import get_upload_job_service

    dashboard = get_dashboard_service()
    logging.getLogger(__name__).info(
        "Dashboard ready source=%s orders=%d",
        dashboard.source,
        len(dashboard.orders),
    )
    try:
        yield
    finally:
        get_upload_job_service().shutdown()
        logging.getLogger(__name__).info("Upload workers shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title=get_app_settings().title,
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import (
        csv_ingestion_router,
        metrics_router,
        uploads_router,
    )

    application.include_router(csv_ingestion_router)
    application.include_router(uploads_router)
    application.include_router(metrics_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
