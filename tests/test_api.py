"""
Tests for the outcomes report HTTP API.
"""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from factories import OUTCOME_SET_ID, ORGANISATION_ID, WINDOW_END, WINDOW_START
from impact_outcomes.api import router, set_dependencies

HEADERS = {"X-User-ID": "u1", "X-Organisation-ID": ORGANISATION_ID}
PARAMS = {"start": WINDOW_START.isoformat(), "end": WINDOW_END.isoformat()}
URL = f"/api/v1/outcomes/reports/{OUTCOME_SET_ID}"


@pytest.fixture
def client(report_service):
    """Test client with the report service wired in."""
    app = FastAPI()
    app.include_router(router)
    set_dependencies(report_service)
    yield TestClient(app)
    set_dependencies(None)


class TestReportEndpoint:
    """Tests for GET /api/v1/outcomes/reports/{outcome_set_id}."""

    def test_report(self, client):
        response = client.get(URL, params=PARAMS, headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["outcome_set_id"] == OUTCOME_SET_ID
        assert body["beneficiary_ids"] == ["B1", "B2", "B3"]
        assert [a["question_id"] for a in body["question_aggregates"]["delta"]] == ["Q1", "Q2", "Q3", "Q4"]
        assert body["question_aggregates"]["delta"][1]["value"] == pytest.approx(2.0)
        assert body["excluded"] == {"question_ids": [], "category_ids": []}

    def test_no_data_in_range(self, client):
        params = {"start": "2020-01-01T00:00:00+00:00", "end": "2020-01-02T00:00:00+00:00"}

        response = client.get(URL, params=params, headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NO_DATA_IN_RANGE"

    def test_unknown_outcome_set(self, client):
        response = client.get("/api/v1/outcomes/reports/missing", params=PARAMS, headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ENTITY_NOT_FOUND"

    def test_other_organisation(self, client):
        headers = {"X-User-ID": "u9", "X-Organisation-ID": "org2"}

        response = client.get(URL, params=PARAMS, headers=headers)

        assert response.status_code == 403

    def test_inverted_window(self, client):
        params = {"start": PARAMS["end"], "end": PARAMS["start"]}

        response = client.get(URL, params=params, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_WINDOW"

    def test_missing_identity(self, client):
        response = client.get(URL, params=PARAMS)

        assert response.status_code == 422

    def test_missing_window(self, client):
        response = client.get(URL, headers=HEADERS)

        assert response.status_code == 422

    def test_window_without_timezone(self, client):
        """Test a window given without an offset is rejected before computing."""
        params = {"start": "2026-02-28T12:00:00", "end": "2026-03-01T12:00:00"}

        response = client.get(URL, params=params, headers=HEADERS)

        assert response.status_code == 422

    def test_correlation_id_echoed_in_errors(self, client):
        headers = {**HEADERS, "X-Correlation-ID": "corr-42"}

        response = client.get("/api/v1/outcomes/reports/missing", params=PARAMS, headers=headers)

        assert response.status_code == 404
        assert response.json()["detail"]["correlation_id"] == "corr-42"


class TestServiceWiring:
    """Tests for dependency wiring and statistics."""

    def test_uninitialised_service(self):
        app = FastAPI()
        app.include_router(router)
        set_dependencies(None)

        response = TestClient(app).get(URL, params=PARAMS, headers=HEADERS)

        assert response.status_code == 503

    def test_stats(self, client):
        client.get(URL, params=PARAMS, headers=HEADERS)

        response = client.get("/api/v1/outcomes/stats")

        assert response.status_code == 200
        assert response.json()["report_service"] == {"reports_generated": 1, "reports_failed": 0}


class TestApplication:
    """Tests for the assembled application."""

    def test_health(self):
        from impact_outcomes.main import create_app

        with TestClient(create_app()) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "outcomes-service"}
