import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional
from pymongo import ASCENDING, DESCENDING

from groundwater_engine.config.settings import (
    READINGS_COLLECTION,
    STATIONS_COLLECTION,
    READINGS_WINDOW_DAYS,
)
from groundwater_engine.extract.base_extractor import BaseExtractor
from groundwater_engine.schemas.analysis_models import Reading, StationContext, WaterQuality
from groundwater_engine.transform.cleaning import clean_readings, normalize_utc, safe_cast_float
from groundwater_engine.transform.feature_engineering import AQUIFER_TYPE_ENCODING, STATUS_ENCODING

logger = logging.getLogger(__name__)

READING_PROJECTION = {
    "_id": 0,
    "station_id": 1,
    "timestamp": 1,
    "water_level": 1,
    "water_level_status": 1,
    "confidence": 1
}

STATION_PROJECTION = {
    "_id": 0,
    "station_id": 1,
    "name": 1,
    "status": 1,
    "well_depth": 1,
    "aquifer_type": 1,
    "ph": 1,
    "tds": 1
}

class StationAdapter:
    """
    Domain-specific adapter for the operational station store.
    Wraps the generic extractor with the queries the analysis needs.
    """

    def __init__(self, extractor: BaseExtractor):
        self.extractor = extractor

    def fetch_readings(self, station_id: str, start_date: datetime, end_date: datetime) -> Iterator[Dict[str, Any]]:
        """
        Fetches raw readings for one station within [start_date, end_date).

        Reflects Schema:
        - station_id, timestamp, water_level, water_level_status, confidence
        """
        query = {
            "station_id": station_id,
            "timestamp": {
                "$gte": start_date,
                "$lt": end_date
            }
        }
        return self.extractor.fetch_batch(
            READINGS_COLLECTION, query, READING_PROJECTION, sort=[("timestamp", ASCENDING)]
        )

    def fetch_latest_reading(self, station_id: str) -> Optional[Dict[str, Any]]:
        docs = self.extractor.fetch_batch(
            READINGS_COLLECTION,
            {"station_id": station_id},
            READING_PROJECTION,
            sort=[("timestamp", DESCENDING)],
            batch_size=1
        )
        return next(iter(docs), None)

    def fetch_station(self, station_id: str) -> Optional[Dict[str, Any]]:
        return self.extractor.fetch_one(STATIONS_COLLECTION, {"station_id": station_id}, STATION_PROJECTION)

    def load_readings(
        self,
        station_id: str,
        end_date: Optional[datetime] = None,
        window_days: int = READINGS_WINDOW_DAYS
    ) -> List[Reading]:
        """Cleaned readings for the historical window ending at end_date (default: now)."""
        end_date = end_date or datetime.now(timezone.utc)
        start_date = end_date - timedelta(days=window_days)

        readings = clean_readings(self.fetch_readings(station_id, start_date, end_date))
        logger.info(f"🔍 Loaded {len(readings)} readings for {station_id} ({start_date.date()} -> {end_date.date()})")
        return readings

    def load_station_context(self, station_id: str, distance_km: float) -> StationContext:
        """
        Builds the StationContext from the station document and its latest
        reading. Missing fields stay None and are defaulted downstream.
        """
        station = self.fetch_station(station_id) or {}
        latest = self.fetch_latest_reading(station_id) or {}

        quality = None
        if station.get("ph") is not None or station.get("tds") is not None:
            quality = WaterQuality(
                ph=safe_cast_float(station.get("ph")),
                tds=safe_cast_float(station.get("tds"))
            )

        confidence = safe_cast_float(latest.get("confidence"), min_val=0, max_val=100)

        # Unknown labels are dropped rather than failing validation
        aquifer_type = station.get("aquifer_type")
        status = latest.get("water_level_status")

        return StationContext(
            station_id=station_id,
            distance_km=distance_km,
            well_depth_m=safe_cast_float(station.get("well_depth")),
            aquifer_type=aquifer_type if aquifer_type in AQUIFER_TYPE_ENCODING else None,
            latest_water_level_m=safe_cast_float(latest.get("water_level"), min_val=0.0),
            latest_water_level_status=status if status in STATUS_ENCODING else None,
            latest_reading_confidence=int(confidence) if confidence is not None else None,
            latest_reading_at=normalize_utc(latest.get("timestamp")),
            water_quality=quality
        )
