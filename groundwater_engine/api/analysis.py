import logging
from fastapi import APIRouter, HTTPException
from typing import List, Optional
from pydantic import BaseModel, Field

from groundwater_engine.config.mongo_client import mongo_client
from groundwater_engine.config.settings import PROJECTION_HORIZON_DAYS
from groundwater_engine.extract.base_extractor import MongoExtractor
from groundwater_engine.extract.station_adapter import StationAdapter
from groundwater_engine.inference.projection import project_levels
from groundwater_engine.jobs.station_analysis import run_analysis
from groundwater_engine.schemas.analysis_models import (
    AnalysisRequest,
    AnalysisResult,
    EnvironmentalContext,
    LevelProjectionPoint,
    Reading,
)
from groundwater_engine.utils.hydrology import estimate_recharge_rate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analysis", tags=["Analysis"])

# --- Request/Response Schemas ---
class StationAnalysisRequest(BaseModel):
    distance_km: float = Field(..., ge=0, description="Distance from query location to the station")
    environment: Optional[EnvironmentalContext] = None
    extraction_rate_l_per_day: float = Field(..., ge=0)
    # Falls back to the rainfall proxy when omitted
    recharge_rate_l_per_day: Optional[float] = Field(None, ge=0)

class ProjectionRequest(BaseModel):
    readings: List[Reading]
    horizon_days: int = Field(PROJECTION_HORIZON_DAYS, ge=1, le=365)

class ProjectionResponse(BaseModel):
    status: str
    data: List[LevelProjectionPoint]

def get_station_adapter() -> StationAdapter:
    return StationAdapter(MongoExtractor(mongo_client.get_readings_db()))

# --- Routes ---

@router.post("", response_model=AnalysisResult)
def analyze(payload: AnalysisRequest):
    """
    Runs the analysis on caller-supplied readings and context.
    """
    try:
        return run_analysis(payload)
    except Exception as e:
        logger.exception("❌ Analysis failed")
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/stations/{station_id}", response_model=AnalysisResult)
def analyze_station(station_id: str, payload: StationAnalysisRequest):
    """
    Loads the station's reading window and latest reading from the store,
    then runs the analysis.
    """
    try:
        adapter = get_station_adapter()
        readings = adapter.load_readings(station_id)
        station = adapter.load_station_context(station_id, payload.distance_km)
    except Exception as e:
        logger.exception(f"❌ Failed to load data for {station_id}")
        raise HTTPException(status_code=500, detail=str(e))

    if not readings and not station.has_latest_reading:
        raise HTTPException(status_code=404, detail=f"No readings found for station {station_id}")

    recharge = payload.recharge_rate_l_per_day
    if recharge is None:
        annual = payload.environment.annual_rainfall_mm if payload.environment else None
        recharge = estimate_recharge_rate(annual)

    request = AnalysisRequest(
        readings=readings,
        environment=payload.environment,
        station=station,
        extraction_rate_l_per_day=payload.extraction_rate_l_per_day,
        recharge_rate_l_per_day=recharge
    )
    return analyze(request)

@router.post("/projection", response_model=ProjectionResponse)
def project(payload: ProjectionRequest):
    """
    Linear projection of future levels. Returns an empty list when the
    lookback window holds too few readings.
    """
    points = project_levels(payload.readings, horizon_days=payload.horizon_days)
    if points is None:
        return {"status": "insufficient_data", "data": []}

    return {"status": "success", "data": points}
