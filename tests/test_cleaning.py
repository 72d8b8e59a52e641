import unittest
from datetime import datetime, timedelta, timezone

from groundwater_engine.schemas.analysis_models import Reading
from groundwater_engine.transform.cleaning import (
    clean_reading_row,
    clean_readings,
    normalize_utc,
    safe_cast_float,
    sort_readings,
    to_series,
)

class TestCleaning(unittest.TestCase):

    def test_normalize_utc(self):
        # Case 1: String ISO with Z suffix
        res = normalize_utc("2024-01-01T15:30:00Z")
        self.assertEqual(res, datetime(2024, 1, 1, 15, 30, tzinfo=timezone.utc))

        # Case 2: Naive datetime is taken as UTC
        res = normalize_utc(datetime(2024, 1, 1, 12, 0, 0))
        self.assertEqual(res, datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))

        # Case 3: Offset is converted
        res = normalize_utc("2024-01-01T05:30:00+05:30")
        self.assertEqual(res, datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc))

        # Case 4: None / garbage
        self.assertIsNone(normalize_utc(None))
        self.assertIsNone(normalize_utc("yesterday"))
        self.assertIsNone(normalize_utc(12345))

    def test_safe_cast_float(self):
        self.assertEqual(safe_cast_float("12.5"), 12.5)
        self.assertEqual(safe_cast_float(0), 0.0)
        self.assertIsNone(safe_cast_float("n/a"))
        self.assertIsNone(safe_cast_float(None))
        self.assertIsNone(safe_cast_float(-1, min_val=0))
        self.assertIsNone(safe_cast_float(101, max_val=100))
        self.assertEqual(safe_cast_float(100, min_val=0, max_val=100), 100.0)

    def test_clean_reading_row(self):
        # Valid Row
        raw = {"station_id": "s1", "timestamp": "2024-01-01T10:00:00Z", "water_level": "15.5"}
        clean = clean_reading_row(raw)
        self.assertIsNotNone(clean)
        self.assertEqual(clean.water_level, 15.5)
        self.assertEqual(clean.timestamp.tzinfo, timezone.utc)

        # Zero depth is a valid reading
        self.assertIsNotNone(clean_reading_row({"timestamp": "2024-01-01", "water_level": 0}))

        # Invalid Rows
        self.assertIsNone(clean_reading_row({"timestamp": "2024-01-01", "water_level": -3.0}))
        self.assertIsNone(clean_reading_row({"water_level": 4.0}))
        self.assertIsNone(clean_reading_row({"timestamp": "2024-01-01"}))

    def test_clean_readings_drops_invalid(self):
        rows = [
            {"timestamp": "2024-01-01T00:00:00Z", "water_level": 10.0},
            {"timestamp": None, "water_level": 11.0},
            {"timestamp": "2024-01-03T00:00:00Z", "water_level": "bad"},
            {"timestamp": "2024-01-04T00:00:00Z", "water_level": 12.0},
        ]
        readings = clean_readings(rows)
        self.assertEqual([r.water_level for r in readings], [10.0, 12.0])

    def test_sorting_and_series(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        readings = [
            Reading(timestamp=start + timedelta(days=2), water_level=3.0),
            Reading(timestamp=start, water_level=1.0),
            Reading(timestamp=start + timedelta(days=1), water_level=2.0),
        ]

        self.assertEqual([r.water_level for r in sort_readings(readings)], [1.0, 2.0, 3.0])

        values, timestamps = to_series(readings)
        self.assertEqual(values, [1.0, 2.0, 3.0])
        self.assertEqual(timestamps[0], start)

if __name__ == '__main__':
    unittest.main()
