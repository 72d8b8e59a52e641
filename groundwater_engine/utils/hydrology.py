from typing import Optional

from groundwater_engine.config.settings import RECHARGE_RAINFALL_FACTOR

def estimate_recharge_rate(
    annual_rainfall_mm: Optional[float],
    factor: float = RECHARGE_RAINFALL_FACTOR
) -> float:
    """
    Rough recharge proxy (litres/day) derived from annual rainfall.

    Note: This is not a calibrated recharge model. Real recharge depends on
    soil infiltration, land cover and evapotranspiration; here we only scale
    rainfall by a regional factor so the sustainability step has an input.
    """
    if annual_rainfall_mm is None:
        return 0.0

    return max(0.0, annual_rainfall_mm * factor)
