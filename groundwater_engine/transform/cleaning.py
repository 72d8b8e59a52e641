import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from groundwater_engine.schemas.analysis_models import Reading

# Configure logger for data quality alerts
logger = logging.getLogger(__name__)

def normalize_utc(dt_input: Any) -> Optional[datetime]:
    """
    Normalizes a timestamp to a timezone-aware UTC datetime.
    Naive datetimes are assumed to already be UTC.

    Args:
        dt_input: A datetime object, ISO string, or None.

    Returns:
        datetime: UTC datetime, or None if invalid.
    """
    if dt_input is None:
        return None

    # Handle Strings (JSON payloads / CSV exports)
    if isinstance(dt_input, str):
        try:
            dt_input = datetime.fromisoformat(dt_input.replace('Z', '+00:00'))
        except ValueError:
            return None

    if isinstance(dt_input, datetime):
        if dt_input.tzinfo is None:
            return dt_input.replace(tzinfo=timezone.utc)
        return dt_input.astimezone(timezone.utc)

    return None

def safe_cast_float(
    value: Any,
    min_val: Optional[float] = None,
    max_val: Optional[float] = None
) -> Optional[float]:
    """
    Safely casts input to float with optional range validation.

    Args:
        value: Input value (number or string).
        min_val: Optional lower bound (inclusive).
        max_val: Optional upper bound (inclusive).

    Returns:
        float: Casted value, or None if invalid/out of bounds.
    """
    if value is None:
        return None

    try:
        f_val = float(value)

        if min_val is not None and f_val < min_val:
            return None
        if max_val is not None and f_val > max_val:
            return None

        return f_val
    except (ValueError, TypeError):
        return None

def clean_reading_row(row: Dict[str, Any]) -> Optional[Reading]:
    """
    Validates and cleans a raw reading document.

    Validations:
    - timestamp must be valid
    - water_level must be a number >= 0 (depth below ground)
    """
    timestamp = normalize_utc(row.get("timestamp"))
    if not timestamp:
        return None

    level = safe_cast_float(row.get("water_level"), min_val=0.0)
    if level is None:
        return None

    return Reading(timestamp=timestamp, water_level=level)

def clean_readings(rows: Iterable[Dict[str, Any]]) -> List[Reading]:
    """Cleans a batch of raw documents, dropping the invalid ones."""
    cleaned = []
    dropped = 0

    for row in rows:
        reading = clean_reading_row(row)
        if reading is None:
            dropped += 1
            continue
        cleaned.append(reading)

    if dropped:
        logger.debug(f"Dropped {dropped} invalid reading rows")

    return cleaned

def sort_readings(readings: Iterable[Reading]) -> List[Reading]:
    """
    Orders readings chronologically (stable for equal timestamps).
    Slope estimation needs time deltas, so callers may pass unsorted input.
    """
    return sorted(readings, key=lambda r: normalize_utc(r.timestamp))

def to_series(readings: Iterable[Reading]) -> Tuple[List[float], List[datetime]]:
    """Splits sorted readings into parallel (values, timestamps) lists."""
    ordered = sort_readings(readings)
    values = [r.water_level for r in ordered]
    timestamps = [normalize_utc(r.timestamp) for r in ordered]
    return values, timestamps
