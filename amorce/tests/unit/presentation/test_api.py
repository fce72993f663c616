"""
Unit tests for the HTTP API.

Tests liveness, metrics and documentation routes plus middleware,
using FastAPI's in-process TestClient.

Usage:
    pytest amorce/tests/unit/presentation
"""

import logging

import pytest
from fastapi.testclient import TestClient

from amorce.config.settings import Settings
from amorce.infrastructure.monitoring.metrics import create_http_metrics
from amorce.presentation.api import create_app


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_ENABLED": False,
        "METRICS_ENABLED": True,
        "DOCS_ENABLED": True,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client():
    """Client for an app with metrics and docs enabled."""
    with TestClient(create_app(make_settings())) as test_client:
        yield test_client


class TestHealthcheck:
    """Tests for the liveness route."""

    def test_returns_ok(self, client):
        """Test /healthcheck returns plain text ok."""
        response = client.get("/healthcheck")

        assert response.status_code == 200
        assert response.text == "ok"
        assert response.headers["content-type"].startswith("text/plain")

    def test_request_id_generated(self, client):
        """Test responses carry a generated request ID."""
        response = client.get("/healthcheck")

        assert response.headers["X-Request-ID"]

    def test_request_id_propagated(self, client):
        """Test an incoming request ID is echoed back."""
        response = client.get("/healthcheck", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_requests_traced_at_info(self, client, caplog):
        """Test start and finish of each request are logged."""
        with caplog.at_level(
            logging.INFO, logger="amorce.presentation.api.middleware"
        ):
            client.get("/healthcheck")

        messages = [r.getMessage() for r in caplog.records]
        assert any("started processing request GET /healthcheck" in m for m in messages)
        finished = [
            r
            for r in caplog.records
            if "finished processing request GET /healthcheck status=200" in r.getMessage()
        ]
        assert len(finished) == 1
        assert finished[0].method == "GET"
        assert finished[0].path == "/healthcheck"
        assert finished[0].status == 200


class TestMetrics:
    """Tests for the Prometheus route and middleware."""

    def test_metrics_exposed(self, client):
        """Test /metrics serves Prometheus text."""
        client.get("/healthcheck")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert (
            'app_http_requests_total{method="GET",endpoint="/healthcheck",status="200"}'
            in response.text
        )

    def test_scrape_requests_not_recorded(self, client):
        """Test /metrics itself is excluded from HTTP metrics."""
        client.get("/metrics")

        response = client.get("/metrics")

        assert 'endpoint="/metrics"' not in response.text

    def test_custom_prefix(self):
        """Test METRICS_PREFIX renames HTTP metrics."""
        app = create_app(make_settings(METRICS_PREFIX="svc"))

        with TestClient(app) as test_client:
            test_client.get("/healthcheck")
            response = test_client.get("/metrics")

        assert "svc_http_requests_total" in response.text
        assert "app_http_requests_total" not in response.text

    def test_counts_and_errors_recorded(self):
        """Test counters for success and client errors."""
        metrics = create_http_metrics(prefix="t")
        app = create_app(make_settings(), metrics=metrics)

        with TestClient(app) as test_client:
            test_client.get("/healthcheck")
            test_client.get("/missing")

        registry = metrics.registry
        assert (
            registry.get_sample_value(
                "t_http_requests_total",
                {"method": "GET", "endpoint": "/healthcheck", "status": "200"},
            )
            == 1.0
        )
        assert (
            registry.get_sample_value(
                "t_http_errors_total",
                {"method": "GET", "endpoint": "/missing", "error_type": "client_error"},
            )
            == 1.0
        )
        assert (
            registry.get_sample_value(
                "t_http_requests_pending",
                {"method": "GET", "endpoint": "/healthcheck"},
            )
            == 0.0
        )

    def test_metrics_disabled(self):
        """Test /metrics is absent when disabled."""
        app = create_app(make_settings(METRICS_ENABLED=False))

        with TestClient(app) as test_client:
            assert test_client.get("/metrics").status_code == 404
            assert test_client.get("/healthcheck").status_code == 200


class TestDocs:
    """Tests for API documentation routes."""

    def test_openapi_document(self, client):
        """Test the OpenAPI document lists the liveness route only."""
        response = client.get("/api-docs/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/healthcheck" in paths
        assert "/metrics" not in paths

    def test_swagger_ui(self, client):
        """Test Swagger UI is served and points at the document."""
        response = client.get("/swagger-ui")

        assert response.status_code == 200
        assert "/api-docs/openapi.json" in response.text

    def test_docs_disabled(self):
        """Test docs routes are absent when disabled."""
        app = create_app(make_settings(DOCS_ENABLED=False))

        with TestClient(app) as test_client:
            assert test_client.get("/swagger-ui").status_code == 404
            assert test_client.get("/api-docs/openapi.json").status_code == 404
