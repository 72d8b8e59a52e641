from typing import Optional

from groundwater_engine.schemas.analysis_models import (
    UsageSuitability,
    UseSuitability,
    WaterQuality,
)

DEFAULT_LEVEL_M = 20.0

# Per use: (suitable above, moderate above, suggestions below, suggestions)
AGRICULTURE_BANDS = (70, 40, 50, ['Consider water-efficient crops', 'Implement drip irrigation'])
DOMESTIC_BANDS = (60, 30, 40, ['Install water treatment', 'Regular water testing'])
INDUSTRIAL_BANDS = (50, 25, 30, ['Water recycling systems', 'Alternative water sources'])

PH_RANGE = (6.5, 8.5)          # exclusive bounds
DOMESTIC_TDS_LIMIT = 500.0     # mg/L
INDUSTRIAL_TDS_LIMIT = 1000.0  # mg/L

def _status(base_score: float, suitable_above: float, moderate_above: float) -> str:
    if base_score > suitable_above:
        return 'suitable'
    if base_score > moderate_above:
        return 'moderate'
    return 'unsuitable'

def _score_use(base_score: float, quality_bonus: float, bands) -> UseSuitability:
    suitable_above, moderate_above, suggest_below, suggestions = bands
    recommendations = tuple(suggestions) if base_score < suggest_below else ()

    return UseSuitability(
        score=min(100.0, base_score + quality_bonus),
        status=_status(base_score, suitable_above, moderate_above),
        recommendations=recommendations
    )

def calculate_usage_suitability(
    water_level: Optional[float],
    quality: Optional[WaterQuality] = None
) -> UsageSuitability:
    """
    Fitness of the groundwater for agriculture, domestic and industrial use.
    Shallower water scores higher; quality parameters add fixed bonuses.
    Status bands are read off the level-only base score.
    """
    level = DEFAULT_LEVEL_M if water_level is None else water_level
    base_score = max(0.0, 100 - level * 2)

    ph = quality.ph if quality else None
    tds = quality.tds if quality else None

    ph_ok = ph is not None and PH_RANGE[0] < ph < PH_RANGE[1]

    return UsageSuitability(
        agriculture=_score_use(base_score, 20 if ph_ok else 0, AGRICULTURE_BANDS),
        domestic=_score_use(
            base_score, 15 if tds is not None and tds < DOMESTIC_TDS_LIMIT else 0, DOMESTIC_BANDS
        ),
        industrial=_score_use(
            base_score, 10 if tds is not None and tds < INDUSTRIAL_TDS_LIMIT else 0, INDUSTRIAL_BANDS
        )
    )
