import math
from typing import Optional

from groundwater_engine.schemas.analysis_models import SustainabilityEstimate
from groundwater_engine.utils.rounding import round_half_up

# --- Configuration ---
# Crude proxy: 1 m of water column ~ 1000 L available to the well.
# Not an aquifer-volume model.
LITRES_PER_METER = 1000.0
DAYS_PER_YEAR = 365
UNLIMITED_YEARS = 999

DEFICIT_MARGIN = 0.1   # net extraction above 10% of recharge
SURPLUS_MARGIN = 1.1   # recharge above 110% of extraction

def calculate_sustainability(
    current_level: Optional[float],
    extraction_rate: float,
    recharge_rate: float
) -> SustainabilityEstimate:
    """
    Projects how long the current water column lasts under the requested
    extraction, net of the caller-supplied recharge estimate (both L/day).

    Without a current level nothing is guessed: 0 years, balance 'unknown'.
    """
    if current_level is None:
        return SustainabilityEstimate(
            years_remaining=0,
            extraction_rate_l_per_day=extraction_rate,
            recharge_rate_l_per_day=recharge_rate,
            balance='unknown'
        )

    net_extraction = extraction_rate - recharge_rate
    available_water_l = current_level * LITRES_PER_METER

    if net_extraction > 0:
        years_remaining = max(0.0, available_water_l / (net_extraction * DAYS_PER_YEAR))
        # A vanishing net extraction overflows to inf
        if not math.isfinite(years_remaining):
            years_remaining = UNLIMITED_YEARS
    else:
        years_remaining = UNLIMITED_YEARS

    if net_extraction > recharge_rate * DEFICIT_MARGIN:
        balance = 'deficit'
    elif recharge_rate > extraction_rate * SURPLUS_MARGIN:
        balance = 'surplus'
    else:
        balance = 'balanced'

    return SustainabilityEstimate(
        years_remaining=round_half_up(years_remaining),
        extraction_rate_l_per_day=extraction_rate,
        recharge_rate_l_per_day=recharge_rate,
        balance=balance
    )
