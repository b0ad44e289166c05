"""
test_api.py — HTTP surface of the climatology service.

Run with:
    pytest tests/test_api.py -v
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app

BUILD = "/api/v1/climatology/build"
FORECAST = "/api/v1/climatology/forecast"


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


class TestRoot:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["service"] == "Climatology Regression Engine"
        assert "ols-climatology" in body["modules"]

    def test_liveness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_request_id_echoed(self, client):
        resp = client.get("/", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"
        assert resp.headers["X-Process-Time"].endswith("ms")

    def test_request_id_generated(self, client):
        assert len(client.get("/").headers["X-Request-ID"]) == 16


class TestBuild:
    def test_full_year(self, client, power_text):
        resp = client.post(BUILD, json={"text": power_text})
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["climatology"]) == 366
        assert [d["day_of_year"] for d in body["climatology"]] == list(range(1, 367))
        assert body["summary"]["days"] == 366
        assert body["summary"]["used_fallback"] is False

    def test_relocated_with_seed(self, client, power_text):
        payload = {"text": power_text, "target_latitude": 28.6139, "seed": 11}
        first = client.post(BUILD, json=payload).json()
        second = client.post(BUILD, json=payload).json()
        assert first["climatology"] == second["climatology"]

    def test_no_sentinel(self, client):
        resp = client.post(BUILD, json={"text": "2001,1,25.0,0.0\n2001,2,25.0,0.0\n"})
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "NO_VALID_RECORDS"
        assert error["path"] == BUILD

    def test_too_few_records(self, client, power_header):
        text = power_header + "\n" + "\n".join(f"2001,{d},25.0,0.0" for d in range(1, 6))
        resp = client.post(BUILD, json={"text": text})
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "INSUFFICIENT_DATA"
        assert error["details"]["count"] == 5
        assert error["details"]["required"] == 8

    def test_blank_text_rejected(self, client):
        assert client.post(BUILD, json={"text": "   "}).status_code == 422

    def test_latitude_out_of_range(self, client, power_text):
        resp = client.post(BUILD, json={"text": power_text, "target_latitude": 95})
        assert resp.status_code == 422


class TestForecast:
    def test_window_wraps(self, client, power_text):
        resp = client.post(FORECAST, json={
            "text": power_text,
            "start_day": 364,
            "start_date": "2024-01-01",
            "num_days": 5,
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["start_day"] == 364
        assert [d["day_of_year"] for d in body["window"]] == [364, 365, 366, 1, 2]
        assert body["days"][0]["date"] == "2024-12-29"
        assert body["days"][3]["label"] == "Wed, Jan 1"

    def test_start_date_only(self, client, power_text):
        body = client.post(FORECAST, json={"text": power_text, "start_date": "2023-03-01"}).json()
        assert body["start_day"] == 60
        assert len(body["window"]) == 7
        assert body["days"][0]["label"] == "Wed, Mar 1"

    def test_day_366_start_in_non_leap_year(self, client, power_text):
        body = client.post(FORECAST, json={
            "text": power_text,
            "start_day": 366,
            "start_date": "2026-03-01",
            "num_days": 3,
        }).json()
        assert [d["day_of_year"] for d in body["window"]] == [366, 1, 2]
        assert [d["date"] for d in body["days"]] == ["2027-01-01", "2027-01-02"]
        assert [d["day_of_year"] for d in body["days"]] == [1, 2]

    def test_dated_rows_follow_window(self, client, power_text):
        body = client.post(FORECAST, json={
            "text": power_text,
            "start_day": 100,
            "start_date": "2025-06-15",
            "num_days": 4,
        }).json()
        window_days = [d["day_of_year"] for d in body["window"]]
        assert window_days == [100, 101, 102, 103]
        assert [d["day_of_year"] for d in body["days"]] == window_days
        assert body["days"][0]["date"] == "2025-04-10"


class TestMissionAndCompare:
    def test_mission_no_go(self, client):
        resp = client.post("/api/v1/climatology/mission", json={
            "profile": "drone",
            "temperature_c": 30,
            "wind_speed_kmh": 32,
            "precip_mm": 0,
            "humidity_pct": 40,
        })
        assert resp.status_code == 200
        assert resp.json()["verdict"] == "NO-GO"

    def test_unknown_profile(self, client):
        resp = client.post("/api/v1/climatology/mission", json={
            "profile": "balloon", "temperature_c": 20, "wind_speed_kmh": 0,
            "precip_mm": 0, "humidity_pct": 10,
        })
        assert resp.status_code == 422

    def test_compare_with_diurnal(self, client):
        resp = client.post(
            "/api/v1/climatology/compare?hour=14",
            json={"model_temp": 30.0, "observed_temp": 31.5},
        )
        body = resp.json()
        assert body["comparison"]["score"] == 95
        assert len(body["diurnal"]) == 9
        assert all(p["actual"] is not None for p in body["diurnal"])

    def test_day_of_year(self, client):
        body = client.get("/api/v1/climatology/day-of-year", params={"on": "2024-12-31"}).json()
        assert body == {"date": "2024-12-31", "day_of_year": 366}
