"""Tests for the HTTP API."""

import base64
import io

import openpyxl
import pytest
from fastapi.testclient import TestClient

from api.main import app


@pytest.fixture
def client():
    return TestClient(app)


def _make_payload(**kwargs) -> dict:
    payload = {
        "entries": [
            {
                "id": "e1",
                "userId": "u1",
                "timeInterval": {"start": "2024-01-15T09:00:00Z", "duration": "PT10H"},
                "earnedRate": 5000,
                "costRate": 3000,
            },
            {
                "id": "e2",
                "userId": "u1",
                "type": "BREAK",
                "timeInterval": {"start": "2024-01-15T12:00:00Z", "duration": "PT1H"},
            },
        ],
        "config": {
            "users": [{"id": "u1", "name": "Alice"}, {"id": "u2", "name": "Bob"}],
            "overrides": {"u2": {"mode": "global", "capacity": "6"}},
        },
        "dateRange": {"start": "2024-01-15", "end": "2024-01-16"},
    }
    payload.update(kwargs)
    return payload


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/v1/health"


class TestAnalyze:
    def test_success(self, client):
        resp = client.post("/api/v1/analyze", json=_make_payload())
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["excel_base64"] is None
        assert body["summary"]["total_users"] == 2
        assert body["summary"]["amount_display"] == "earned"
        alice, bob = body["users"]
        assert alice["user_name"] == "Alice"
        assert alice["overtime_hours"] == 2.0
        assert alice["break_hours"] == 1.0
        assert alice["amount"] == 550.0
        assert bob["expected_capacity"] == 12.0
        assert body["audit"]["summary"]["total_users"] == 2

    def test_include_excel(self, client):
        resp = client.post("/api/v1/analyze", json=_make_payload(includeExcel=True))
        body = resp.json()
        assert body["success"] is True
        wb = openpyxl.load_workbook(io.BytesIO(base64.b64decode(body["excel_base64"])))
        assert wb.sheetnames == ["Summary", "Detailed"]

    def test_validation_error(self, client):
        resp = client.post(
            "/api/v1/analyze",
            json=_make_payload(dateRange={"start": "2024-02-01", "end": "2024-01-01"}),
        )
        body = resp.json()
        assert body["success"] is False
        assert body["error_type"] == "validation_error"
        assert any("after" in e for e in body["errors"])

    def test_bad_config_reported(self, client):
        payload = _make_payload(config={"calcParams": {"overtimeMultiplier": "lots"}})
        body = client.post("/api/v1/analyze", json=payload).json()
        assert body["success"] is False
        assert body["error_type"] == "validation_error"

    def test_missing_date_range_rejected(self, client):
        payload = _make_payload()
        del payload["dateRange"]
        assert client.post("/api/v1/analyze", json=payload).status_code == 422
