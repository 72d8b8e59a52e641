from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Tuple

# --- Shared Labels ---
Direction = Literal['rising', 'falling', 'stable']
Significance = Literal[
    'not_significant',
    'marginally_significant',
    'significant',
    'very_significant',
    'highly_significant',
    'insufficient_data'
]
AvailabilityStatus = Literal['critical', 'low', 'moderate', 'good', 'excellent']
Level3 = Literal['low', 'medium', 'high']
AquiferType = Literal['unconfined', 'confined', 'semi-confined', 'leaky']
Balance = Literal['deficit', 'balanced', 'surplus', 'unknown']
SuitabilityStatus = Literal['suitable', 'moderate', 'unsuitable']
RecommendationKind = Literal['conservation', 'recharge', 'monitoring', 'restriction', 'infrastructure']
Priority = Literal['low', 'medium', 'high', 'critical']

# Flat numeric feature mapping handed to the scoring models
FeatureVector = Dict[str, float]


class AnalyticsBaseModel(BaseModel):
    """
    Base configuration for immutable analysis outputs.
    Sequences are tuples; dict fields are protected from reassignment only.
    """
    model_config = ConfigDict(frozen=True)


# =====================================================================
# INPUTS
# =====================================================================

class Reading(AnalyticsBaseModel):
    """A single DWLR observation for one station."""
    timestamp: datetime
    water_level: float = Field(..., ge=0, description="Water level in meters")


class SeasonalRainfall(BaseModel):
    monsoon: Optional[float] = Field(None, ge=0)
    post_monsoon: Optional[float] = Field(None, ge=0)
    winter: Optional[float] = Field(None, ge=0)
    summer: Optional[float] = Field(None, ge=0)


class EnvironmentalContext(BaseModel):
    """
    Environmental factors around the query location.
    Every field is optional; the feature extractor fills the gaps.
    """
    annual_rainfall_mm: Optional[float] = Field(None, ge=0)
    seasonal_rainfall: Optional[SeasonalRainfall] = None
    rainfall_trend: Optional[Direction] = None

    nearest_river_distance_km: Optional[float] = Field(None, ge=0)
    river_influence: Optional[Level3] = None
    nearest_water_body_distance_km: Optional[float] = Field(None, ge=0)

    soil_permeability: Optional[Level3] = None
    aquifer_type: Optional[AquiferType] = None
    aquifer_depth_m: Optional[float] = None

    def has_rainfall(self) -> bool:
        return self.annual_rainfall_mm is not None or self.seasonal_rainfall is not None


class WaterQuality(BaseModel):
    ph: Optional[float] = None
    tds: Optional[float] = Field(None, description="Total Dissolved Solids (mg/L)")


class StationContext(BaseModel):
    """Nearest station as resolved by the geolocation lookup."""
    station_id: Optional[str] = None
    distance_km: float = Field(..., ge=0)
    well_depth_m: Optional[float] = None
    aquifer_type: Optional[AquiferType] = None

    # Latest reading (absent when the station has not reported)
    latest_water_level_m: Optional[float] = Field(None, ge=0)
    latest_water_level_status: Optional[AvailabilityStatus] = None
    latest_reading_confidence: Optional[int] = Field(None, ge=0, le=100)
    latest_reading_at: Optional[datetime] = None

    water_quality: Optional[WaterQuality] = None

    @property
    def has_latest_reading(self) -> bool:
        return self.latest_water_level_m is not None


class AnalysisRequest(BaseModel):
    readings: List[Reading] = Field(default_factory=list)
    environment: Optional[EnvironmentalContext] = None
    station: StationContext
    extraction_rate_l_per_day: float = Field(..., ge=0)
    recharge_rate_l_per_day: float = Field(..., ge=0, description="Caller-supplied recharge estimate")

    model_config = {
        "json_schema_extra": {
            "example": {
                "readings": [
                    {"timestamp": "2024-01-01T00:00:00Z", "water_level": 12.4},
                    {"timestamp": "2024-02-01T00:00:00Z", "water_level": 12.9},
                    {"timestamp": "2024-03-01T00:00:00Z", "water_level": 13.3}
                ],
                "environment": {
                    "annual_rainfall_mm": 850,
                    "seasonal_rainfall": {"monsoon": 620},
                    "nearest_river_distance_km": 12,
                    "soil_permeability": "medium"
                },
                "station": {"station_id": "DWLR-001", "distance_km": 4.2, "latest_water_level_m": 13.3},
                "extraction_rate_l_per_day": 2000,
                "recharge_rate_l_per_day": 255
            }
        }
    }


# =====================================================================
# STATISTICAL OUTPUTS
# =====================================================================

class TrendResult(AnalyticsBaseModel):
    """Mann-Kendall verdict plus Sen's slope magnitude."""
    slope_per_day: float = 0.0
    direction: Direction = 'stable'
    significance: Significance = 'insufficient_data'
    p_value: float = Field(1.0, ge=0, le=1)
    sample_size: int = 0

    # Test internals (absent on the insufficient-data branch)
    s_statistic: Optional[int] = None
    z_score: Optional[float] = None
    variance: Optional[float] = None


class SeasonalityResult(AnalyticsBaseModel):
    coefficient_of_variation: float
    seasonal: bool
    monthly_means: Dict[int, float] = Field(..., description="Calendar month (1-12) -> mean level")
    peak_month: int
    low_month: int


class WaterLevelStats(AnalyticsBaseModel):
    count: int
    mean: float
    median: float
    mode: float
    standard_deviation: float
    min: float
    max: float
    range: float
    q1: float
    q3: float
    iqr: float

    trend: TrendResult
    seasonality: Optional[SeasonalityResult] = None
    autocorrelation: float = 0.0


# =====================================================================
# MODEL OUTPUTS
# =====================================================================

class AvailabilityEstimate(AnalyticsBaseModel):
    score: int = Field(..., ge=0, le=100)
    status: AvailabilityStatus
    confidence: int = Field(..., ge=0, le=100)


class ModelDetails(AnalyticsBaseModel):
    linear_score: float
    weighted_score: float
    trend_score: float
    ensemble_score: float


class EnsemblePrediction(AnalyticsBaseModel):
    availability: AvailabilityEstimate
    features: Tuple[str, ...]
    feature_importance: Dict[str, float]
    model_details: Optional[ModelDetails] = None
    is_fallback: bool = False


class SustainabilityEstimate(AnalyticsBaseModel):
    years_remaining: int = Field(..., ge=0)
    extraction_rate_l_per_day: float
    recharge_rate_l_per_day: float
    balance: Balance


class UseSuitability(AnalyticsBaseModel):
    score: float = Field(..., ge=0, le=100)
    status: SuitabilityStatus
    recommendations: Tuple[str, ...] = ()


class UsageSuitability(AnalyticsBaseModel):
    agriculture: UseSuitability
    domestic: UseSuitability
    industrial: UseSuitability


class Recommendation(AnalyticsBaseModel):
    kind: RecommendationKind
    priority: Priority
    title: str
    description: str
    impact: Optional[str] = None
    cost: Optional[str] = None
    timeline: Optional[str] = None


class DepthEstimate(AnalyticsBaseModel):
    estimated_m: float
    min_m: float
    max_m: float


class LevelProjectionPoint(AnalyticsBaseModel):
    date: datetime
    predicted_level_m: float
    confidence: int = Field(..., ge=0, le=100)


class AnalysisResult(AnalyticsBaseModel):
    """
    Composite output of one analysis request.
    Embedded verbatim into persisted analysis records / generated reports.
    """
    station_id: Optional[str] = None

    availability: AvailabilityEstimate
    depth: DepthEstimate
    sustainability: SustainabilityEstimate
    recommendations: Tuple[Recommendation, ...]
    usage_suitability: UsageSuitability

    # Model transparency
    features: Tuple[str, ...]
    feature_importance: Dict[str, float]
    model_details: Optional[ModelDetails] = None

    # Statistical context
    trend: TrendResult
    seasonality: Optional[SeasonalityResult] = None
    autocorrelation: float = 0.0
    water_level_stats: Optional[WaterLevelStats] = None

    model_version: str = "ensemble-v1.0"
    analysed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
