import logging
from typing import Optional

from groundwater_engine.schemas.analysis_models import (
    AvailabilityEstimate,
    EnsemblePrediction,
    EnvironmentalContext,
    FeatureVector,
    ModelDetails,
    StationContext,
    TrendResult,
)
from groundwater_engine.transform.feature_engineering import extract_features
from groundwater_engine.utils.rounding import clamp, round_half_up

logger = logging.getLogger(__name__)

# --- Linear Model ---
LINEAR_BASE_SCORE = 50.0
LINEAR_WEIGHTS = {
    'current_water_level': -2.5,   # Deeper water table = lower availability
    'annual_rainfall': 0.05,
    'monsoon_rainfall': 0.08,
    'nearest_river_distance': -0.3,
    'soil_permeability': 15.0,
    'trend_direction': 10.0,
    'trend_significance': 5.0
}

# --- Weighted Composite Model (weights sum to 1.0) ---
COMPOSITE_WEIGHTS = {
    'water_level': 0.40,
    'rainfall': 0.25,
    'proximity': 0.20,
    'permeability': 0.15
}

# --- Trend Model ---
TREND_BASE_SCORE = 50.0
TREND_DIRECTION_BONUS = 20.0
TREND_SIGNIFICANCE_STEP = 10.0
TREND_MAGNITUDE_THRESHOLD = 0.5   # units/day
TREND_MAGNITUDE_BONUS = 15.0

# --- Ensemble ---
# Product-tuned weights; candidates for calibration, keep as-is.
ENSEMBLE_WEIGHTS = {'linear': 0.4, 'weighted': 0.4, 'trend': 0.2}

# Lower bound (inclusive) -> status, checked from the top
STATUS_THRESHOLDS = [
    (80, 'excellent'),
    (60, 'good'),
    (40, 'moderate'),
    (20, 'low'),
]

# Presentation table shown next to each prediction.
# Static by product decision; not derived from the models above.
FEATURE_IMPORTANCE = {
    'current_water_level': 0.25,
    'annual_rainfall': 0.20,
    'trend_direction': 0.15,
    'nearest_river_distance': 0.15,
    'soil_permeability': 0.10,
    'monsoon_rainfall': 0.10,
    'trend_significance': 0.05
}

# --- Confidence ---
CONFIDENCE_BASE = 50
CONFIDENCE_CAP = 100

def fallback_prediction() -> EnsemblePrediction:
    """Fixed neutral result used when the ensemble cannot score."""
    return EnsemblePrediction(
        availability=AvailabilityEstimate(score=50, status='moderate', confidence=30),
        features=('fallback',),
        feature_importance={'fallback': 1.0},
        model_details=None,
        is_fallback=True
    )

# =====================================================================
# SUB-MODELS
# =====================================================================

def calculate_linear_availability(features: FeatureVector) -> float:
    """Base score plus fixed per-feature linear weights."""
    score = LINEAR_BASE_SCORE
    for feature, weight in LINEAR_WEIGHTS.items():
        score += weight * features[feature]
    return clamp(score)

def calculate_weighted_availability(features: FeatureVector) -> float:
    """
    Weighted average of four independently normalised sub-scores:
    water level, rainfall, river proximity, soil permeability.
    """
    sub_scores = {
        'water_level': max(0.0, 100 - features['current_water_level'] * 3),
        'rainfall': min(100.0, features['annual_rainfall'] / 10 + features['monsoon_rainfall'] / 8),
        'proximity': max(0.0, 100 - features['nearest_river_distance'] * 2),
        'permeability': features['soil_permeability'] * 25
    }

    score = sum(sub_scores[name] * weight for name, weight in COMPOSITE_WEIGHTS.items())
    return clamp(score)

def calculate_trend_availability(features: FeatureVector) -> float:
    """Scores direction, significance and steepness of the level trend."""
    score = TREND_BASE_SCORE
    direction = features['trend_direction']

    if direction == 1:
        score += TREND_DIRECTION_BONUS
    elif direction == -1:
        score -= TREND_DIRECTION_BONUS

    score += features['trend_significance'] * TREND_SIGNIFICANCE_STEP

    if features['trend_magnitude'] > TREND_MAGNITUDE_THRESHOLD:
        score += direction * TREND_MAGNITUDE_BONUS

    return clamp(score)

# =====================================================================
# ENSEMBLE
# =====================================================================

def classify_availability(score: float) -> str:
    """Maps a (rounded) 0-100 score onto the five status buckets."""
    for lower_bound, status in STATUS_THRESHOLDS:
        if score >= lower_bound:
            return status
    return 'critical'

def calculate_prediction_confidence(features: FeatureVector, station: StationContext) -> int:
    """
    Confidence grows with each corroborating signal; it is not part of the
    ensemble weighting.
    """
    confidence = CONFIDENCE_BASE

    # Data availability
    if station.has_latest_reading:
        confidence += 20
    if features['annual_rainfall'] > 0:
        confidence += 10
    if features['nearest_river_distance'] < 20:
        confidence += 10
    if features['trend_significance'] > 2:
        confidence += 10

    # Data quality
    if station.distance_km < 10:
        confidence += 10
    if (
        station.has_latest_reading
        and station.latest_reading_confidence is not None
        and station.latest_reading_confidence > 80
    ):
        confidence += 10

    return min(CONFIDENCE_CAP, confidence)

def score_features(features: FeatureVector) -> ModelDetails:
    """Runs the three sub-models and combines them with the fixed weights."""
    linear = calculate_linear_availability(features)
    weighted = calculate_weighted_availability(features)
    trend = calculate_trend_availability(features)

    ensemble = (
        linear * ENSEMBLE_WEIGHTS['linear']
        + weighted * ENSEMBLE_WEIGHTS['weighted']
        + trend * ENSEMBLE_WEIGHTS['trend']
    )

    return ModelDetails(
        linear_score=linear,
        weighted_score=weighted,
        trend_score=trend,
        ensemble_score=clamp(ensemble)
    )

def predict_from_features(features: FeatureVector, station: StationContext) -> EnsemblePrediction:
    details = score_features(features)
    score = round_half_up(details.ensemble_score)

    return EnsemblePrediction(
        availability=AvailabilityEstimate(
            score=score,
            status=classify_availability(score),
            confidence=calculate_prediction_confidence(features, station)
        ),
        features=tuple(features.keys()),
        feature_importance=dict(FEATURE_IMPORTANCE),
        model_details=details
    )

def predict_availability(
    station: StationContext,
    environment: Optional[EnvironmentalContext],
    trend: TrendResult,
    features: Optional[FeatureVector] = None
) -> EnsemblePrediction:
    """
    Ensemble availability estimate for the query location.

    Any failure during feature extraction or scoring is logged and replaced
    by the neutral fallback; availability is never left undefined.
    """
    try:
        if features is None:
            features = extract_features(station, environment, trend)
        prediction = predict_from_features(features, station)

        logger.info(
            f"🔮 Availability {prediction.availability.score} ({prediction.availability.status}), "
            f"confidence {prediction.availability.confidence}"
        )
        return prediction

    except Exception:
        logger.exception("❌ Ensemble prediction failed, using neutral fallback")
        return fallback_prediction()
