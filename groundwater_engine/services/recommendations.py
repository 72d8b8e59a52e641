from typing import Callable, List, Optional

from groundwater_engine.schemas.analysis_models import (
    AnalyticsBaseModel,
    AvailabilityEstimate,
    EnvironmentalContext,
    Recommendation,
    SustainabilityEstimate,
    TrendResult,
)

# Exact label match; very/highly significant falls do not trigger monitoring
MONITORING_SIGNIFICANCE = 'significant'

class RecommendationContext(AnalyticsBaseModel):
    """Everything the rules look at, resolved once."""
    availability_score: float
    balance: str
    annual_rainfall_mm: float
    trend_direction: str
    trend_significance: str

# --- Rules ---
# Each rule returns at most one recommendation. They are evaluated in
# RULES order and several can fire for the same analysis.

def conservation_rule(ctx: RecommendationContext) -> Optional[Recommendation]:
    if ctx.availability_score < 30:
        return Recommendation(
            kind='conservation',
            priority='critical',
            title='Immediate Water Conservation Required',
            description='Groundwater levels are critically low. Implement immediate water conservation measures.',
            impact='High water savings potential',
            cost='Low to Medium',
            timeline='Immediate'
        )
    if ctx.availability_score < 50:
        return Recommendation(
            kind='conservation',
            priority='high',
            title='Water Conservation Measures',
            description='Groundwater levels are low. Implement water conservation practices.',
            impact='Moderate water savings',
            cost='Low',
            timeline='1-3 months'
        )
    return None

def rainwater_harvesting_rule(ctx: RecommendationContext) -> Optional[Recommendation]:
    if ctx.balance == 'deficit' and ctx.annual_rainfall_mm > 500:
        return Recommendation(
            kind='recharge',
            priority='high',
            title='Install Rainwater Harvesting',
            description=(
                'Set up rooftop rainwater collection systems to improve groundwater '
                'recharge during monsoon seasons.'
            ),
            impact='Can increase local water table by 15-20%',
            cost='Medium',
            timeline='3-6 months'
        )
    return None

def enhanced_monitoring_rule(ctx: RecommendationContext) -> Optional[Recommendation]:
    if ctx.trend_direction == 'falling' and ctx.trend_significance == MONITORING_SIGNIFICANCE:
        return Recommendation(
            kind='monitoring',
            priority='medium',
            title='Enhanced Monitoring Required',
            description=(
                'Water levels are declining significantly. Increase monitoring frequency '
                'and consider extraction limits.'
            ),
            impact='Better decision making',
            cost='Low',
            timeline='1-2 months'
        )
    return None

def efficient_irrigation_rule(ctx: RecommendationContext) -> Optional[Recommendation]:
    if ctx.availability_score > 70 and ctx.annual_rainfall_mm > 800:
        return Recommendation(
            kind='infrastructure',
            priority='low',
            title='Water-Efficient Irrigation',
            description=(
                'Switch to drip irrigation systems for agricultural activities. This reduces '
                'water usage by 40% while maintaining crop yields.'
            ),
            impact='40% water usage reduction',
            cost='Medium',
            timeline='6-12 months'
        )
    return None

RULES: List[Callable[[RecommendationContext], Optional[Recommendation]]] = [
    conservation_rule,
    rainwater_harvesting_rule,
    enhanced_monitoring_rule,
    efficient_irrigation_rule,
]

def generate_recommendations(
    availability: AvailabilityEstimate,
    sustainability: SustainabilityEstimate,
    environment: Optional[EnvironmentalContext],
    trend: TrendResult
) -> List[Recommendation]:
    """
    Evaluates the rule list in order. Output keeps rule order; sorting by
    priority is left to the presentation layer.
    """
    annual_rainfall = environment.annual_rainfall_mm if environment else None

    ctx = RecommendationContext(
        availability_score=availability.score,
        balance=sustainability.balance,
        annual_rainfall_mm=annual_rainfall or 0.0,
        trend_direction=trend.direction,
        trend_significance=trend.significance
    )

    recommendations = []
    for rule in RULES:
        recommendation = rule(ctx)
        if recommendation is not None:
            recommendations.append(recommendation)

    return recommendations
