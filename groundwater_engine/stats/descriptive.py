import pandas as pd
from datetime import datetime
from typing import Iterable, List, Optional

from groundwater_engine.schemas.analysis_models import (
    Reading,
    SeasonalityResult,
    TrendResult,
    WaterLevelStats,
)
from groundwater_engine.transform.cleaning import to_series
from groundwater_engine.stats.trend import mann_kendall_trend
from groundwater_engine.stats.seasonality import detect_seasonality, lag_autocorrelation

def describe_series(
    values: List[float],
    timestamps: List[datetime],
    trend: Optional[TrendResult] = None,
    seasonality: Optional[SeasonalityResult] = None,
    autocorrelation: Optional[float] = None
) -> Optional[WaterLevelStats]:
    """
    Descriptive statistics for a chronologically sorted series.

    Trend, seasonality and autocorrelation already computed by the caller are
    reused as-is; missing ones are computed here.
    """
    if not values:
        return None

    if trend is None:
        trend = mann_kendall_trend(values, timestamps)
    if seasonality is None:
        seasonality = detect_seasonality(values, timestamps)
    if autocorrelation is None:
        autocorrelation = lag_autocorrelation(values, 1)

    series = pd.Series(values, dtype=float)
    q1 = float(series.quantile(0.25))
    q3 = float(series.quantile(0.75))

    return WaterLevelStats(
        count=len(series),
        mean=float(series.mean()),
        median=float(series.median()),
        mode=float(series.mode().iloc[0]),
        standard_deviation=float(series.std(ddof=0)),
        min=float(series.min()),
        max=float(series.max()),
        range=float(series.max() - series.min()),
        q1=q1,
        q3=q3,
        iqr=q3 - q1,
        trend=trend,
        seasonality=seasonality,
        autocorrelation=autocorrelation
    )

def calculate_water_level_stats(readings: Iterable[Reading]) -> Optional[WaterLevelStats]:
    """
    Descriptive statistics for a station's reading window, bundled with the
    trend, seasonality and lag-1 autocorrelation of the same series.
    """
    values, timestamps = to_series(readings)
    return describe_series(values, timestamps)
