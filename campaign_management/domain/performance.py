"""
Performance Scoring

Pure functions turning campaign KPIs into a 0-100 score, a letter grade and
a list of optimization recommendations. They take plain KPI values so any
combination can be evaluated, not only ones reachable from integer counters.
"""

from typing import List, Tuple

PERFORMING_WELL_SCORE = 60
NEEDS_ATTENTION_SCORE = 40

# (threshold, points), highest threshold first
_CTR_POINTS: Tuple[Tuple[float, int], ...] = ((5.0, 30), (2.0, 20), (1.0, 10))
_CONVERSION_POINTS: Tuple[Tuple[float, int], ...] = ((10.0, 30), (5.0, 20), (2.0, 10))
_ROI_POINTS: Tuple[Tuple[float, int], ...] = ((200.0, 40), (100.0, 30), (50.0, 20), (0.0, 10))

_GRADES: Tuple[Tuple[int, str], ...] = (
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C+"),
    (40, "C"),
    (30, "D"),
)

LOW_CTR_RECOMMENDATION = "Improve ad creative and targeting to increase click-through rate"
LOW_CONVERSION_RECOMMENDATION = (
    "Optimize landing page and user experience to improve conversion rate"
)
LOW_ROI_RECOMMENDATION = "Review campaign costs and optimize bidding strategy"
LOW_REACH_RECOMMENDATION = "Increase campaign reach and budget to generate more impressions"
HIGH_CPC_RECOMMENDATION = "Optimize targeting and ad quality to reduce cost per click"


def _points(value: float, table: Tuple[Tuple[float, int], ...]) -> int:
    for threshold, points in table:
        if value >= threshold:
            return points
    return 0


def calculate_performance_score(ctr: float, conversion_rate: float, roi: float) -> float:
    """Score a campaign from 0 to 100 using CTR (30), conversion rate (30) and ROI (40)."""
    score = (
        _points(ctr, _CTR_POINTS)
        + _points(conversion_rate, _CONVERSION_POINTS)
        + _points(roi, _ROI_POINTS)
    )
    return float(score)


def performance_grade(score: float) -> str:
    """Map a performance score to its letter grade."""
    for threshold, grade in _GRADES:
        if score >= threshold:
            return grade
    return "F"


def is_performing_well(score: float) -> bool:
    return score >= PERFORMING_WELL_SCORE


def needs_attention(score: float) -> bool:
    return score < NEEDS_ATTENTION_SCORE


def optimization_recommendations(
    ctr: float,
    conversion_rate: float,
    roi: float,
    impressions: int,
    cpc: float,
    cost_is_zero: bool = False,
) -> List[str]:
    """
    Return every matching recommendation in a fixed order.

    The order is CTR, conversion rate, ROI, reach, then cost per click. The
    cost-per-click tip only applies when some cost has been recorded.
    """
    recommendations = []

    if ctr < 1.0:
        recommendations.append(LOW_CTR_RECOMMENDATION)
    if conversion_rate < 2.0:
        recommendations.append(LOW_CONVERSION_RECOMMENDATION)
    if roi < 50.0:
        recommendations.append(LOW_ROI_RECOMMENDATION)
    if impressions < 1000:
        recommendations.append(LOW_REACH_RECOMMENDATION)
    if not cost_is_zero and cpc > 2.0:
        recommendations.append(HIGH_CPC_RECOMMENDATION)

    return recommendations
