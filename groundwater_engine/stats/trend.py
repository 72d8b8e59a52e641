import math
import logging
import numpy as np
from datetime import datetime
from typing import Sequence

from groundwater_engine.schemas.analysis_models import TrendResult
from groundwater_engine.transform.cleaning import to_series

logger = logging.getLogger(__name__)

# --- Configuration ---
MIN_TREND_POINTS = 3
SECONDS_PER_DAY = 60 * 60 * 24

# Abramowitz & Stegun 7.1.26 coefficients (max abs error ~1.5e-7)
ERF_A1 = 0.254829592
ERF_A2 = -0.284496736
ERF_A3 = 1.421413741
ERF_A4 = -1.453152027
ERF_A5 = 1.061405429
ERF_P = 0.3275911

# Upper p-value bound (exclusive) -> label, checked in order
SIGNIFICANCE_LEVELS = [
    (0.001, 'highly_significant'),
    (0.01, 'very_significant'),
    (0.05, 'significant'),
    (0.1, 'marginally_significant'),
]

def erf(x: float) -> float:
    """Error function via the five-term Abramowitz-Stegun polynomial."""
    sign = 1.0 if x >= 0 else -1.0
    x = abs(x)

    t = 1.0 / (1.0 + ERF_P * x)
    y = 1.0 - (((((ERF_A5 * t + ERF_A4) * t) + ERF_A3) * t + ERF_A2) * t + ERF_A1) * t * math.exp(-x * x)

    return sign * y

def normal_cdf(x: float) -> float:
    """Standard normal CDF."""
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))

def classify_significance(p_value: float) -> str:
    for threshold, label in SIGNIFICANCE_LEVELS:
        if p_value < threshold:
            return label
    return 'not_significant'

def _upper_pairs(n: int):
    """Index arrays (i, j) for every pair i < j."""
    return np.triu_indices(n, k=1)

def mann_kendall_statistic(values: Sequence[float]):
    """
    Computes the Mann-Kendall S statistic and the tie count.

    Returns:
        (S, ties) where S = sum(sign(x_j - x_i)) over all i < j.
    """
    data = np.asarray(values, dtype=float)
    i_idx, j_idx = _upper_pairs(len(data))
    diffs = data[j_idx] - data[i_idx]

    s = int(np.sign(diffs).sum())
    ties = int(np.count_nonzero(diffs == 0))
    return s, ties

def sens_slope(values: Sequence[float], timestamps: Sequence[datetime]) -> float:
    """
    Sen's slope estimator: median of all pairwise slopes (units/day).
    Pairs with a zero or negative time delta are skipped.
    """
    n = len(values)
    if n < 2:
        return 0.0

    data = np.asarray(values, dtype=float)
    seconds = np.array([ts.timestamp() for ts in timestamps], dtype=float)

    i_idx, j_idx = _upper_pairs(n)
    delta_days = (seconds[j_idx] - seconds[i_idx]) / SECONDS_PER_DAY
    valid = delta_days > 0

    if not valid.any():
        return 0.0

    slopes = (data[j_idx][valid] - data[i_idx][valid]) / delta_days[valid]
    # np.median averages the two central values for even counts
    return float(np.median(slopes))

def mann_kendall_trend(values: Sequence[float], timestamps: Sequence[datetime]) -> TrendResult:
    """
    Mann-Kendall trend test with Sen's slope magnitude.

    Args:
        values: Water levels, already in chronological order.
        timestamps: Matching observation times (timezone-aware).

    Returns:
        TrendResult. Fewer than 3 points yields the insufficient_data branch.
    """
    n = len(values)
    if n < MIN_TREND_POINTS:
        return TrendResult(
            slope_per_day=0.0,
            direction='stable',
            significance='insufficient_data',
            p_value=1.0,
            sample_size=n
        )

    # 1. S statistic with tie-corrected variance
    s, ties = mann_kendall_statistic(values)
    variance = (n * (n - 1) * (2 * n + 5) - ties) / 18.0
    std_dev = math.sqrt(variance)

    # 2. Continuity-corrected Z
    if s > 0:
        z = (s - 1) / std_dev
    elif s < 0:
        z = (s + 1) / std_dev
    else:
        z = 0.0

    # 3. Two-sided p-value, clipped since the erf polynomial is not exact at 0
    p_value = 2.0 * (1.0 - normal_cdf(abs(z)))
    p_value = min(1.0, max(0.0, p_value))

    if s > 0:
        direction = 'rising'
    elif s < 0:
        direction = 'falling'
    else:
        direction = 'stable'

    return TrendResult(
        slope_per_day=sens_slope(values, timestamps),
        direction=direction,
        significance=classify_significance(p_value),
        p_value=p_value,
        sample_size=n,
        s_statistic=s,
        z_score=z,
        variance=variance
    )

def analyze_trend(readings) -> TrendResult:
    """Convenience wrapper: sorts readings and runs the trend test."""
    values, timestamps = to_series(readings)
    result = mann_kendall_trend(values, timestamps)
    logger.debug(
        f"Trend: n={result.sample_size} direction={result.direction} "
        f"significance={result.significance} slope={result.slope_per_day:.5f}/day"
    )
    return result
