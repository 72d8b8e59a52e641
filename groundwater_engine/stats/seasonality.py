import numpy as np
import pandas as pd
from datetime import datetime
from typing import Optional, Sequence

from groundwater_engine.schemas.analysis_models import SeasonalityResult

# --- Configuration ---
MIN_SEASONALITY_POINTS = 12
SEASONAL_CV_THRESHOLD = 0.1
MIN_AUTOCORRELATION_POINTS = 3

def detect_seasonality(
    values: Sequence[float],
    timestamps: Sequence[datetime]
) -> Optional[SeasonalityResult]:
    """
    Groups levels by calendar month and measures how much the monthly
    means vary (coefficient of variation).

    Returns:
        SeasonalityResult, or None (no verdict) with fewer than 12 points.
    """
    if len(values) < MIN_SEASONALITY_POINTS:
        return None

    df = pd.DataFrame({
        'month': pd.to_datetime(list(timestamps), utc=True).month,
        'level': np.asarray(values, dtype=float)
    })

    # groupby sorts keys, so idxmax/idxmin return the lowest month on ties
    monthly_means = df.groupby('month')['level'].mean()

    overall_mean = float(monthly_means.mean())
    overall_std = float(monthly_means.std(ddof=0))
    cv = overall_std / overall_mean if overall_mean != 0 else 0.0

    return SeasonalityResult(
        coefficient_of_variation=cv,
        seasonal=cv > SEASONAL_CV_THRESHOLD,
        monthly_means={int(m): float(v) for m, v in monthly_means.items()},
        peak_month=int(monthly_means.idxmax()),
        low_month=int(monthly_means.idxmin())
    )

def lag_autocorrelation(values: Sequence[float], lag: int = 1) -> float:
    """
    Normalised autocovariance of the series against itself shifted by `lag`,
    using the population variance.

    Returns 0 for short series or a zero-variance (flat) series.
    """
    if lag < 1:
        raise ValueError(f"lag must be >= 1, got {lag}")

    if len(values) < lag + 2 or len(values) < MIN_AUTOCORRELATION_POINTS:
        return 0.0

    data = np.asarray(values, dtype=float)
    mean = data.mean()
    variance = data.var()  # ddof=0

    if variance == 0:
        return 0.0

    numerator = float(np.sum((data[:-lag] - mean) * (data[lag:] - mean)))
    return numerator / ((len(data) - lag) * variance)
