import logging
import numpy as np
import pandas as pd
from datetime import timedelta
from typing import Iterable, List, Optional
from sklearn.linear_model import LinearRegression

from groundwater_engine.config.settings import PROJECTION_HORIZON_DAYS
from groundwater_engine.schemas.analysis_models import LevelProjectionPoint, Reading
from groundwater_engine.transform.cleaning import to_series

logger = logging.getLogger(__name__)

# --- Configuration ---
LOOKBACK_DAYS = 90
MIN_PROJECTION_READINGS = 10
MIN_CONFIDENCE = 50
CONFIDENCE_DECAY_PER_DAY = 2

def project_levels(
    readings: Iterable[Reading],
    horizon_days: int = PROJECTION_HORIZON_DAYS,
    lookback_days: int = LOOKBACK_DAYS,
    min_readings: int = MIN_PROJECTION_READINGS
) -> Optional[List[LevelProjectionPoint]]:
    """
    Linear trend extrapolation of future water levels.

    Steps:
    1. Keep readings inside the lookback window ending at the latest reading
    2. Fit level ~ reading index (OLS)
    3. Predict one step per day for the horizon, anchored at the latest reading

    Returns:
        Projection points, or None when the window holds too few readings.
    """
    values, timestamps = to_series(readings)
    if not values:
        return None

    # 1. Lookback Window
    last_ts = timestamps[-1]
    window_start = last_ts - timedelta(days=lookback_days)

    df = pd.DataFrame({'timestamp': timestamps, 'level': values})
    df = df[df['timestamp'] >= window_start].reset_index(drop=True)

    if len(df) < min_readings:
        logger.warning(f"⚠️ Projection skipped: {len(df)} readings in window (need {min_readings})")
        return None

    # 2. Fit (index as the regressor, as readings are periodic)
    X = np.arange(len(df), dtype=float).reshape(-1, 1)
    model = LinearRegression()
    model.fit(X, df['level'].to_numpy())

    # 3. Predict Horizon
    future_idx = np.arange(len(df), len(df) + horizon_days, dtype=float).reshape(-1, 1)
    predictions = model.predict(future_idx) if horizon_days > 0 else []

    points = []
    for i, predicted in enumerate(predictions):
        points.append(LevelProjectionPoint(
            date=last_ts + timedelta(days=i),
            predicted_level_m=round(max(0.0, float(predicted)), 4),
            confidence=max(MIN_CONFIDENCE, 100 - i * CONFIDENCE_DECAY_PER_DAY)
        ))

    logger.info(f"📈 Projected {len(points)} days (slope {model.coef_[0]:.4f} m/reading)")
    return points
