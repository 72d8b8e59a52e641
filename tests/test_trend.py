import unittest
from datetime import datetime, timedelta, timezone

from groundwater_engine.schemas.analysis_models import Reading
from groundwater_engine.stats.trend import (
    analyze_trend,
    classify_significance,
    erf,
    mann_kendall_statistic,
    mann_kendall_trend,
    sens_slope,
)

START = datetime(2024, 1, 1, tzinfo=timezone.utc)

def daily(n):
    return [START + timedelta(days=i) for i in range(n)]

class TestMannKendall(unittest.TestCase):

    def test_increasing_series_is_rising(self):
        values = [1.0, 2.0, 3.5, 4.0, 6.0, 7.5]
        result = mann_kendall_trend(values, daily(len(values)))

        self.assertEqual(result.direction, 'rising')
        self.assertEqual(result.s_statistic, 15)  # n(n-1)/2 positive pairs
        self.assertGreater(result.slope_per_day, 0)

    def test_decreasing_series_is_falling(self):
        values = [25.0 - i * (20.0 / 11) for i in range(12)]
        result = mann_kendall_trend(values, daily(12))

        self.assertEqual(result.direction, 'falling')
        self.assertEqual(result.s_statistic, -66)
        self.assertEqual(result.significance, 'highly_significant')
        self.assertLess(result.p_value, 0.001)

    def test_constant_series_is_stable(self):
        values = [8.0] * 10
        result = mann_kendall_trend(values, daily(10))

        self.assertEqual(result.direction, 'stable')
        self.assertEqual(result.s_statistic, 0)
        self.assertEqual(result.z_score, 0.0)
        self.assertEqual(result.significance, 'not_significant')
        # erf(0) from the polynomial is not exactly 0; p must stay in [0, 1]
        self.assertLessEqual(result.p_value, 1.0)
        self.assertAlmostEqual(result.p_value, 1.0, places=6)
        self.assertEqual(result.slope_per_day, 0.0)

    def test_tie_corrected_variance(self):
        # n=4 constant: 6 tied pairs -> (4*3*13 - 6) / 18
        result = mann_kendall_trend([5.0] * 4, daily(4))
        self.assertAlmostEqual(result.variance, 150 / 18)

    def test_short_series_is_insufficient(self):
        for values in ([3.0], [3.0, 9.0], [9.0, 1.0]):
            result = mann_kendall_trend(values, daily(len(values)))
            self.assertEqual(result.significance, 'insufficient_data')
            self.assertEqual(result.direction, 'stable')
            self.assertEqual(result.p_value, 1.0)
            self.assertEqual(result.slope_per_day, 0.0)
            self.assertEqual(result.sample_size, len(values))
            self.assertIsNone(result.s_statistic)

    def test_three_points_small_sample(self):
        result = mann_kendall_trend([1.0, 2.0, 3.0], daily(3))
        self.assertEqual(result.direction, 'rising')
        # z = 2 / sqrt(66/18) ~ 1.04 -> p ~ 0.30
        self.assertEqual(result.significance, 'not_significant')

    def test_statistic_counts_ties(self):
        s, ties = mann_kendall_statistic([1.0, 1.0, 2.0])
        self.assertEqual(s, 2)
        self.assertEqual(ties, 1)

    def test_deterministic(self):
        values = [4.2, 3.9, 4.4, 4.1, 3.7, 3.8, 3.5]
        ts = daily(len(values))
        self.assertEqual(mann_kendall_trend(values, ts), mann_kendall_trend(values, ts))

class TestSensSlope(unittest.TestCase):

    def test_recovers_linear_slope(self):
        # Irregular spacing: value = 12 + 0.25 * days
        offsets = [0, 3, 7, 8, 20, 31, 45]
        timestamps = [START + timedelta(days=d) for d in offsets]
        values = [12 + 0.25 * d for d in offsets]

        self.assertAlmostEqual(sens_slope(values, timestamps), 0.25, places=9)

    def test_even_count_median(self):
        # Pair (0,1) shares a timestamp and is skipped; slopes 1.5 and 1.0 remain
        timestamps = [START, START, START + timedelta(days=2)]
        self.assertAlmostEqual(sens_slope([0.0, 1.0, 3.0], timestamps), 1.25)

    def test_sub_day_deltas(self):
        timestamps = [START, START + timedelta(hours=12)]
        self.assertAlmostEqual(sens_slope([10.0, 11.0], timestamps), 2.0)

    def test_no_valid_pairs(self):
        self.assertEqual(sens_slope([1.0, 2.0, 3.0], [START] * 3), 0.0)

class TestHelpers(unittest.TestCase):

    def test_erf_approximation(self):
        self.assertAlmostEqual(erf(0.0), 0.0, places=7)
        self.assertAlmostEqual(erf(1.0), 0.8427007929, places=6)
        self.assertAlmostEqual(erf(-1.0), -erf(1.0))
        self.assertAlmostEqual(erf(3.0), 0.9999779095, places=6)

    def test_significance_buckets(self):
        self.assertEqual(classify_significance(0.0005), 'highly_significant')
        self.assertEqual(classify_significance(0.001), 'very_significant')
        self.assertEqual(classify_significance(0.02), 'significant')
        self.assertEqual(classify_significance(0.05), 'marginally_significant')
        self.assertEqual(classify_significance(0.1), 'not_significant')
        self.assertEqual(classify_significance(1.0), 'not_significant')

    def test_analyze_trend_sorts_readings(self):
        ordered = [Reading(timestamp=ts, water_level=v) for ts, v in zip(daily(5), [1, 2, 3, 4, 5])]
        shuffled = [ordered[3], ordered[0], ordered[4], ordered[1], ordered[2]]

        result = analyze_trend(shuffled)
        self.assertEqual(result.direction, 'rising')
        self.assertAlmostEqual(result.slope_per_day, 1.0)

if __name__ == '__main__':
    unittest.main()
