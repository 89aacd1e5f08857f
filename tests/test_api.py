"""
tests/test_api.py

HTTP tests for the FastAPI surface using TestClient.

Each test gets fresh service instances through dependency overrides; the
upload endpoints run the real worker process end to end.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.config import CSVParsingSettings
from app.main import app
from app.mappers.order_mapper import OrderRecordMapper
from app.services.csv_ingestion_service import CSVIngestionService, get_csv_ingestion_service
from app.services.csv_parsing_service import CSVParsingService
from app.services.dashboard_service import SalesDashboardService, get_dashboard_service
from app.services.upload_job_service import UploadJobService, get_upload_job_service
from metrics.sample_data import sample_orders

HEADER = (
    "index,Order ID,Date,Status,Fulfilment,Sales Channel,ship-service-level,Style,SKU,"
    "Category,Size,ASIN,Courier Status,Qty,currency,Amount,ship-city,ship-state"
)

VALID_CSV = "\r\n".join(
    [
        HEADER,
        "0,171-9198151-1101146,04-30-22,Shipped,Merchant,Amazon.in,Standard,S1,S1-K,kurta,S,B0,,1,INR,406.00,BENGALURU,KARNATAKA",
        "1,404-0687676-7273146,04-30-22,Shipped,Amazon,Amazon.in,Expedited,S2,S2-K,kurta,M,B1,,1,INR,329.00,NAVI MUMBAI,MAHARASHTRA",
        '2,407-1069790-7240320,04-29-22,Cancelled,Amazon,Amazon.in,Expedited,S3,S3-K,"Top, Long",L,B2,,1,INR,574.00,CHENNAI,TAMIL NADU',
    ]
).encode("utf-8")


@pytest.fixture()
def dashboard() -> SalesDashboardService:
    return SalesDashboardService()


@pytest.fixture()
def ingestion(dashboard: SalesDashboardService) -> CSVIngestionService:
    parser = CSVParsingService(settings=CSVParsingSettings(poll_interval_seconds=0.05))
    return CSVIngestionService(parser=parser, mapper=OrderRecordMapper(), dashboard=dashboard)


@pytest.fixture()
def client(
    dashboard: SalesDashboardService,
    ingestion: CSVIngestionService,
) -> Iterator[TestClient]:
    jobs = UploadJobService(ingestion_service=ingestion)
    app.dependency_overrides[get_dashboard_service] = lambda: dashboard
    app.dependency_overrides[get_csv_ingestion_service] = lambda: ingestion
    app.dependency_overrides[get_upload_job_service] = lambda: jobs
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        jobs.shutdown()
        app.dependency_overrides.clear()


def _csv_file(content: bytes = VALID_CSV, name: str = "orders.csv", content_type: str = "text/csv"):
    return {"file": (name, content, content_type)}


# ---------------------------------------------------------------------------
# Health / metrics
# ---------------------------------------------------------------------------


class TestMetricsEndpoints:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_dashboard_on_sample_data(self, client: TestClient) -> None:
        response = client.get("/metrics/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "sample"
        assert body["order_count"] == len(sample_orders())
        assert body["summary"]["total_sales"] == pytest.approx(sum(o.amount for o in sample_orders()))
        assert [row["month"] for row in body["monthly"]] == ["2022-02", "2022-03", "2022-04"]
        days = [row["date"] for row in body["daily"]]
        assert days == sorted(days)

    def test_category_filter(self, client: TestClient) -> None:
        response = client.get("/metrics/categories", params={"category": "Set"})

        assert response.status_code == 200
        assert [row["category"] for row in response.json()] == ["Set"]

    def test_region_endpoint_is_sorted_descending(self, client: TestClient) -> None:
        totals = [row["total_sales"] for row in client.get("/metrics/regions").json()]
        assert totals == sorted(totals, reverse=True)

    def test_reversed_range_is_rejected(self, client: TestClient) -> None:
        response = client.get(
            "/metrics/daily",
            params={"start_date": "2022-05-01", "end_date": "2022-04-01"},
        )
        assert response.status_code == 400

    def test_summary_endpoint(self, client: TestClient) -> None:
        body = client.get("/metrics/summary").json()
        assert set(body) == {
            "total_sales",
            "total_transactions",
            "average_order_value",
            "sales_trend",
            "transactions_trend",
            "aov_trend",
        }


# ---------------------------------------------------------------------------
# Synchronous upload
# ---------------------------------------------------------------------------


class TestUploadCSV:
    def test_valid_upload_replaces_dataset(self, client: TestClient) -> None:
        response = client.post("/upload-csv", files=_csv_file())

        assert response.status_code == 200
        body = response.json()
        assert body["orders_loaded"] == 2
        assert body["rows_excluded"] == 1
        assert body["used_fallback"] is False

        daily = client.get("/metrics/daily").json()
        assert daily == [
            {
                "date": "2022-04-30",
                "total_sales": 735.0,
                "transaction_count": 2,
                "average_order_value": 367.5,
            }
        ]
        assert client.get("/dataset").json() == {"source": "upload", "order_count": 2}

    def test_wrong_file_type(self, client: TestClient) -> None:
        response = client.post("/upload-csv", files=_csv_file(name="orders.txt", content_type="text/plain"))
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid file format. Please upload a .csv file."

    def test_narrow_header(self, client: TestClient) -> None:
        response = client.post("/upload-csv", files=_csv_file(b"a,b,c,d,e,f\n1,2,3,4,5,6"))
        assert response.status_code == 400
        assert "correct order report" in response.json()["detail"]

    def test_no_valid_orders_keeps_sample(self, client: TestClient) -> None:
        response = client.post("/upload-csv", files=_csv_file(HEADER.encode("utf-8")))

        assert response.status_code == 200
        assert response.json()["used_fallback"] is True
        assert client.get("/dataset").json()["source"] == "sample"

    def test_upload_while_busy_conflicts(self, client: TestClient, ingestion: CSVIngestionService) -> None:
        with ingestion._exclusive_upload():
            response = client.post("/upload-csv", files=_csv_file())
        assert response.status_code == 409

    def test_reset(self, client: TestClient) -> None:
        client.post("/upload-csv", files=_csv_file())

        response = client.post("/dataset/reset")

        assert response.status_code == 200
        assert response.json() == {"source": "sample", "order_count": len(sample_orders())}


# ---------------------------------------------------------------------------
# Background uploads
# ---------------------------------------------------------------------------


class TestUploadJobs:
    def test_job_runs_to_completion(self, client: TestClient) -> None:
        accepted = client.post("/uploads", files=_csv_file())

        assert accepted.status_code == 202
        job_id = accepted.json()["job_id"]

        status_response = client.get(f"/uploads/{job_id}")
        assert status_response.status_code == 200
        body = status_response.json()
        assert body["status"] == "completed"
        assert body["progress"] == 1.0
        assert body["summary"]["orders_loaded"] == 2

        listing = client.get("/uploads").json()
        assert [job["job_id"] for job in listing["jobs"]] == [job_id]

    def test_failed_job_reports_error(self, client: TestClient) -> None:
        job_id = client.post("/uploads", files=_csv_file(b"a,b\n1,2")).json()["job_id"]

        body = client.get(f"/uploads/{job_id}").json()
        assert body["status"] == "failed"
        assert "CSV format is not valid" in body["error_message"]

    def test_unknown_job(self, client: TestClient) -> None:
        missing = "00000000-0000-0000-0000-000000000000"
        assert client.get(f"/uploads/{missing}").status_code == 404
        assert client.delete(f"/uploads/{missing}").status_code == 404

    def test_cancel_finished_job_returns_final_state(self, client: TestClient) -> None:
        job_id = client.post("/uploads", files=_csv_file()).json()["job_id"]

        response = client.delete(f"/uploads/{job_id}")

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
