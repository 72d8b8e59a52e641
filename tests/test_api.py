import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient

from groundwater_engine.main import app, main, run_analyze_job
from groundwater_engine.schemas.analysis_models import Reading, StationContext
from groundwater_engine.extract.station_adapter import StationAdapter

WET_SITE_PAYLOAD = {
    "readings": [
        {"timestamp": f"2024-06-{day:02d}T00:00:00Z", "water_level": 8.0} for day in range(1, 11)
    ],
    "environment": {
        "annual_rainfall_mm": 1000,
        "seasonal_rainfall": {"monsoon": 700},
        "nearest_river_distance_km": 5,
        "soil_permeability": "high"
    },
    "station": {"station_id": "DWLR-B", "distance_km": 5, "latest_water_level_m": 8.0},
    "extraction_rate_l_per_day": 1000,
    "recharge_rate_l_per_day": 300
}

class TestAnalysisAPI(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "active")

    def test_analyze_payload(self):
        response = self.client.post("/api/v1/analysis", json=WET_SITE_PAYLOAD)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["station_id"], "DWLR-B")
        self.assertEqual(body["availability"]["score"], 84)
        self.assertEqual(body["availability"]["status"], "excellent")
        self.assertEqual(body["model_version"], "ensemble-v1.0")
        self.assertEqual([r["kind"] for r in body["recommendations"]], ["recharge", "infrastructure"])

    def test_invalid_payload_rejected(self):
        payload = dict(WET_SITE_PAYLOAD, extraction_rate_l_per_day=-5)
        response = self.client.post("/api/v1/analysis", json=payload)
        self.assertEqual(response.status_code, 422)

    def test_station_analysis_uses_recharge_proxy(self):
        adapter = MagicMock(spec=StationAdapter)
        adapter.load_readings.return_value = [
            Reading(timestamp=f"2024-06-{day:02d}T00:00:00Z", water_level=8.0) for day in range(1, 11)
        ]
        adapter.load_station_context.return_value = StationContext(
            station_id="DWLR-B", distance_km=5, latest_water_level_m=8.0
        )

        with patch("groundwater_engine.api.analysis.get_station_adapter", return_value=adapter):
            response = self.client.post(
                "/api/v1/analysis/stations/DWLR-B",
                json={
                    "distance_km": 5,
                    "environment": WET_SITE_PAYLOAD["environment"],
                    "extraction_rate_l_per_day": 1000
                }
            )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        # 1000 mm * 0.3
        self.assertAlmostEqual(body["sustainability"]["recharge_rate_l_per_day"], 300.0)
        adapter.load_readings.assert_called_once_with("DWLR-B")
        adapter.load_station_context.assert_called_once_with("DWLR-B", 5.0)

    def test_station_without_data_is_404(self):
        adapter = MagicMock(spec=StationAdapter)
        adapter.load_readings.return_value = []
        adapter.load_station_context.return_value = StationContext(station_id="ghost", distance_km=2)

        with patch("groundwater_engine.api.analysis.get_station_adapter", return_value=adapter):
            response = self.client.post(
                "/api/v1/analysis/stations/ghost",
                json={"distance_km": 2, "extraction_rate_l_per_day": 100}
            )

        self.assertEqual(response.status_code, 404)

    def test_store_failure_is_500(self):
        with patch(
            "groundwater_engine.api.analysis.get_station_adapter",
            side_effect=ValueError("MONGO_URI environment variable is not set.")
        ):
            response = self.client.post(
                "/api/v1/analysis/stations/DWLR-1",
                json={"distance_km": 2, "extraction_rate_l_per_day": 100}
            )

        self.assertEqual(response.status_code, 500)

    def test_projection(self):
        readings = [
            {"timestamp": f"2024-06-{day:02d}T00:00:00Z", "water_level": 10 + day * 0.1} for day in range(1, 13)
        ]
        response = self.client.post("/api/v1/analysis/projection", json={"readings": readings, "horizon_days": 7})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "success")
        self.assertEqual(len(body["data"]), 7)

    def test_projection_insufficient_data(self):
        readings = WET_SITE_PAYLOAD["readings"][:5]
        response = self.client.post("/api/v1/analysis/projection", json={"readings": readings})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "insufficient_data", "data": []})

class TestCLI(unittest.TestCase):

    def test_run_analyze_job(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "payload.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump(WET_SITE_PAYLOAD, f)

            output = json.loads(run_analyze_job(path))

        self.assertEqual(output["availability"]["score"], 84)

    def test_missing_job_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            main([])
        self.assertEqual(ctx.exception.code, 1)

    def test_failing_job_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            main(["analyze", "/nonexistent/payload.json"])
        self.assertEqual(ctx.exception.code, 1)

    def test_unknown_job_is_ignored(self):
        main(["reindex"])

if __name__ == '__main__':
    unittest.main()
