"""Service endpoints and request middleware."""

from __future__ import annotations

from fastapi.testclient import TestClient

from trace_api.main import app
from trace_api.middleware.logging import REQUEST_ID_HEADER

client = TestClient(app)


def test_root_lists_endpoints() -> None:
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational"
    assert "POST /api/query" in body["endpoints"]


def test_health_reports_healthy() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_id_is_echoed() -> None:
    response = client.get("/health", headers={REQUEST_ID_HEADER: "abc123"})

    assert response.headers[REQUEST_ID_HEADER] == "abc123"


def test_metrics_expose_pipeline_series() -> None:
    client.get("/")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "trace_http_requests_total" in response.text
    assert "trace_query_stage_seconds" in response.text
