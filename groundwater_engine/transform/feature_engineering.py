from typing import Dict, Optional

from groundwater_engine.schemas.analysis_models import (
    EnvironmentalContext,
    FeatureVector,
    StationContext,
    TrendResult,
)

# --- Defaults (used when the source data is absent) ---
DEFAULT_WATER_LEVEL_M = 15.0
DEFAULT_ANNUAL_RAINFALL_MM = 800.0
DEFAULT_MONSOON_RAINFALL_MM = 600.0
DEFAULT_RIVER_DISTANCE_KM = 50.0
DEFAULT_WATER_BODY_DISTANCE_KM = 50.0
DEFAULT_AQUIFER_DEPTH_M = 20.0
DEFAULT_WELL_DEPTH_M = 30.0

# --- Categorical Encodings ---
# Orderings feed signed linear weights downstream; do not reorder.
STATUS_ENCODING = {'critical': 0, 'low': 1, 'moderate': 2, 'good': 3, 'excellent': 4}
TREND_ENCODING = {'falling': -1, 'stable': 0, 'rising': 1}
SIGNIFICANCE_ENCODING = {
    'not_significant': 0,
    'marginally_significant': 1,
    'significant': 2,
    'very_significant': 3,
    'highly_significant': 4
}
INFLUENCE_ENCODING = {'low': 1, 'medium': 2, 'high': 3}
PERMEABILITY_ENCODING = {'low': 1, 'medium': 2, 'high': 3}
AQUIFER_TYPE_ENCODING = {'unconfined': 1, 'confined': 2, 'semi-confined': 3, 'leaky': 4}

def _encode(mapping: Dict[str, int], label: Optional[str], default: int) -> int:
    if label is None:
        return default
    return mapping.get(label, default)

def encode_status(status: Optional[str]) -> int:
    return _encode(STATUS_ENCODING, status, 2)

def encode_trend(direction: Optional[str]) -> int:
    return _encode(TREND_ENCODING, direction, 0)

def encode_significance(significance: Optional[str]) -> int:
    # insufficient_data is not in the table and encodes as 0
    return _encode(SIGNIFICANCE_ENCODING, significance, 0)

def encode_influence(influence: Optional[str]) -> int:
    return _encode(INFLUENCE_ENCODING, influence, 1)

def encode_permeability(permeability: Optional[str]) -> int:
    return _encode(PERMEABILITY_ENCODING, permeability, 2)

def encode_aquifer_type(aquifer_type: Optional[str]) -> int:
    return _encode(AQUIFER_TYPE_ENCODING, aquifer_type, 1)

def _or_default(value: Optional[float], default: float) -> float:
    return float(default if value is None else value)

def extract_features(
    station: StationContext,
    environment: Optional[EnvironmentalContext],
    trend: TrendResult
) -> FeatureVector:
    """
    Assembles the flat numeric feature vector consumed by the scoring models.
    Every feature resolves to a number; missing inputs take fixed defaults.
    """
    env = environment or EnvironmentalContext()
    features: FeatureVector = {}

    # 1. Station Proximity
    features['distance_to_station'] = float(station.distance_km)

    # 2. Latest Water Level
    if station.has_latest_reading:
        features['current_water_level'] = float(station.latest_water_level_m)
    else:
        features['current_water_level'] = DEFAULT_WATER_LEVEL_M
    features['water_level_status'] = float(encode_status(station.latest_water_level_status))

    # 3. Trend
    features['trend_direction'] = float(encode_trend(trend.direction))
    features['trend_significance'] = float(encode_significance(trend.significance))
    features['trend_magnitude'] = abs(trend.slope_per_day or 0.0)

    # 4. Rainfall
    # A rainfall block that is present but partial resolves the missing part to 0
    if env.has_rainfall():
        seasonal = env.seasonal_rainfall
        features['annual_rainfall'] = _or_default(env.annual_rainfall_mm, 0.0)
        features['monsoon_rainfall'] = _or_default(seasonal.monsoon if seasonal else None, 0.0)
    else:
        features['annual_rainfall'] = DEFAULT_ANNUAL_RAINFALL_MM
        features['monsoon_rainfall'] = DEFAULT_MONSOON_RAINFALL_MM
    features['rainfall_trend'] = float(encode_trend(env.rainfall_trend))

    # 5. Surface Water Proximity
    features['nearest_river_distance'] = _or_default(env.nearest_river_distance_km, DEFAULT_RIVER_DISTANCE_KM)
    features['nearest_waterbody_distance'] = _or_default(
        env.nearest_water_body_distance_km, DEFAULT_WATER_BODY_DISTANCE_KM
    )
    features['river_influence'] = float(encode_influence(env.river_influence))

    # 6. Geology
    features['soil_permeability'] = float(encode_permeability(env.soil_permeability))
    features['aquifer_depth'] = _or_default(env.aquifer_depth_m, DEFAULT_AQUIFER_DEPTH_M)

    # 7. Station Technical Details
    features['well_depth'] = _or_default(station.well_depth_m, DEFAULT_WELL_DEPTH_M)
    features['aquifer_type'] = float(encode_aquifer_type(station.aquifer_type or env.aquifer_type))

    return features
