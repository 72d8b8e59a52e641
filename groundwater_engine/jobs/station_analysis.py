import logging
from typing import Optional

from groundwater_engine.schemas.analysis_models import (
    AnalysisRequest,
    AnalysisResult,
    DepthEstimate,
)
from groundwater_engine.transform.cleaning import to_series
from groundwater_engine.stats.trend import mann_kendall_trend
from groundwater_engine.stats.seasonality import detect_seasonality, lag_autocorrelation
from groundwater_engine.stats.descriptive import describe_series
from groundwater_engine.transform.feature_engineering import DEFAULT_WATER_LEVEL_M
from groundwater_engine.modelling.ensemble import predict_availability
from groundwater_engine.services.sustainability import calculate_sustainability
from groundwater_engine.services.suitability import calculate_usage_suitability
from groundwater_engine.services.recommendations import generate_recommendations

logger = logging.getLogger(__name__)

DEPTH_RANGE_M = 5.0

def estimate_depth(latest_level: Optional[float]) -> DepthEstimate:
    """Depth band around the latest level (default 15 m when unknown)."""
    estimated = DEFAULT_WATER_LEVEL_M if latest_level is None else latest_level
    return DepthEstimate(
        estimated_m=estimated,
        min_m=max(0.0, estimated - DEPTH_RANGE_M),
        max_m=estimated + DEPTH_RANGE_M
    )

def run_analysis(request: AnalysisRequest) -> AnalysisResult:
    """
    Runs the full trend & availability analysis for one station.

    Pure computation: no I/O, no shared state. The caller owns the result
    (persistence, reporting and notification happen elsewhere).
    """
    station = request.station
    environment = request.environment
    latest_level = station.latest_water_level_m

    logger.info(
        f"🚀 Starting analysis | station={station.station_id or 'n/a'} "
        f"readings={len(request.readings)} extraction={request.extraction_rate_l_per_day} L/day"
    )

    # 1. Series Statistics
    values, timestamps = to_series(request.readings)
    trend = mann_kendall_trend(values, timestamps)
    seasonality = detect_seasonality(values, timestamps)
    autocorrelation = lag_autocorrelation(values, 1)
    water_level_stats = describe_series(values, timestamps, trend, seasonality, autocorrelation)

    logger.info(
        f"📉 [Step 1] Trend: {trend.direction} ({trend.significance}, p={trend.p_value:.4f}, "
        f"slope={trend.slope_per_day:.5f} m/day)"
    )
    if seasonality is None:
        logger.info("📅 [Step 1] Seasonality: no verdict (fewer than 12 readings)")

    # 2. Ensemble Availability
    prediction = predict_availability(station, environment, trend)

    # 3. Sustainability & Usage
    sustainability = calculate_sustainability(
        current_level=latest_level,
        extraction_rate=request.extraction_rate_l_per_day,
        recharge_rate=request.recharge_rate_l_per_day
    )
    usage = calculate_usage_suitability(latest_level, station.water_quality)
    logger.info(
        f"💧 [Step 3] Sustainability: {sustainability.balance}, "
        f"{sustainability.years_remaining} years remaining"
    )

    # 4. Recommendations
    recommendations = generate_recommendations(
        availability=prediction.availability,
        sustainability=sustainability,
        environment=environment,
        trend=trend
    )
    logger.info(f"📝 [Step 4] {len(recommendations)} recommendation(s) generated")

    return AnalysisResult(
        station_id=station.station_id,
        availability=prediction.availability,
        depth=estimate_depth(latest_level),
        sustainability=sustainability,
        recommendations=recommendations,
        usage_suitability=usage,
        features=prediction.features,
        feature_importance=prediction.feature_importance,
        model_details=prediction.model_details,
        trend=trend,
        seasonality=seasonality,
        autocorrelation=autocorrelation,
        water_level_stats=water_level_stats
    )
