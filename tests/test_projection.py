import unittest
from datetime import datetime, timedelta, timezone

from groundwater_engine.schemas.analysis_models import Reading
from groundwater_engine.inference.projection import project_levels

START = datetime(2024, 1, 1, tzinfo=timezone.utc)

def daily_readings(levels, start=START):
    return [Reading(timestamp=start + timedelta(days=i), water_level=v) for i, v in enumerate(levels)]

class TestLevelProjection(unittest.TestCase):

    def test_linear_extrapolation(self):
        readings = daily_readings([10 + 0.1 * i for i in range(20)])
        points = project_levels(readings, horizon_days=30)

        self.assertEqual(len(points), 30)
        self.assertAlmostEqual(points[0].predicted_level_m, 12.0, places=4)
        self.assertAlmostEqual(points[9].predicted_level_m, 12.9, places=4)

        # Anchored at the latest reading, one point per day
        last_ts = readings[-1].timestamp
        self.assertEqual(points[0].date, last_ts)
        self.assertEqual(points[1].date - points[0].date, timedelta(days=1))

    def test_confidence_decays_to_floor(self):
        points = project_levels(daily_readings([10.0 + i for i in range(12)]), horizon_days=40)

        self.assertEqual(points[0].confidence, 100)
        self.assertEqual(points[10].confidence, 80)
        self.assertEqual(points[25].confidence, 50)
        self.assertEqual(points[-1].confidence, 50)

    def test_predictions_clipped_at_zero(self):
        points = project_levels(daily_readings([1.0 - 0.1 * i for i in range(10)]), horizon_days=5)

        for point in points:
            self.assertGreaterEqual(point.predicted_level_m, 0.0)
        self.assertEqual(points[-1].predicted_level_m, 0.0)

    def test_insufficient_readings(self):
        self.assertIsNone(project_levels(daily_readings([5.0] * 9)))
        self.assertIsNone(project_levels([]))

    def test_old_readings_outside_lookback(self):
        # 6 readings ~200 days back, 9 recent ones
        old = daily_readings([5.0] * 6, start=START - timedelta(days=200))
        recent = daily_readings([5.0] * 9)
        self.assertIsNone(project_levels(old + recent))

        self.assertIsNotNone(project_levels(old + recent, lookback_days=365))

if __name__ == '__main__':
    unittest.main()
