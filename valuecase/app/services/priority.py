"""
Priority scoring for a scenario's use-case set.

Value is normalized across the whole set, then blended 50/50 with readiness.
Tier and quadrant come from a 2x2 grid at the 5.5 midpoint; phase comes from
a threshold ladder on the blended score.

Time-to-value has its own display score but does not enter the priority
blend.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from valuecase.app.models.calculation import PriorityInputs, PriorityResult


PRIORITY_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "readiness": 0.50,
    "value": 0.50,
})

# Value/readiness midpoint for the 2x2 grid (inclusive on the high side)
GRID_MIDPOINT = 5.5

# Lower bounds of each phase, highest first
PHASE_THRESHOLDS = (
    (7.0, "Q1"),
    (5.5, "Q2"),
    (4.0, "Q3"),
)
FALLBACK_PHASE = "Q4"

TTV_HORIZON_MONTHS = 18
TTV_FAST_MONTHS = 10
TTV_FAST_BONUS = 0.25

TIER_CHAMPIONS = "Tier 1 — Champions"
TIER_QUICK_WINS = "Tier 2 — Quick Wins"
TIER_STRATEGIC = "Tier 3 — Strategic"
TIER_FOUNDATION = "Tier 4 — Foundation"


def calculate_value_ratio(expected_value: float, friction_annual_cost: float) -> float:
    """Expected value generated per dollar of friction cost (0 without friction cost)."""
    if friction_annual_cost > 0:
        return expected_value / friction_annual_cost
    return 0.0


def calculate_value_score(expected_value: float, all_expected_values: Sequence[float]) -> float:
    """
    Normalize expected value to 0-10 against the largest value in the set.

    Returns 0 when the set is empty or its maximum is not positive.
    """
    if not all_expected_values:
        return 0.0
    max_value = max(all_expected_values)
    if max_value <= 0:
        return 0.0
    return (expected_value / max_value) * 10


def calculate_ratio_value_score(
    expected_value: float,
    friction_annual_cost: float,
    all_ratios: Sequence[float],
) -> float:
    """
    Min-max scale a use case's value ratio into 1-10 across the set.

    When every ratio is the same (including a single use case) the score is
    the 5.5 midpoint.
    """
    ratio = calculate_value_ratio(expected_value, friction_annual_cost)
    if not all_ratios:
        return GRID_MIDPOINT

    min_ratio = min(all_ratios)
    max_ratio = max(all_ratios)
    if max_ratio == min_ratio:
        return GRID_MIDPOINT

    return 1 + ((ratio - min_ratio) / (max_ratio - min_ratio)) * 9


def calculate_ttv_score(time_to_value: float) -> float:
    """Display-only time-to-value score in [0, 1]."""
    base = max(0.0, (TTV_HORIZON_MONTHS - time_to_value) / TTV_HORIZON_MONTHS)
    bonus = TTV_FAST_BONUS if time_to_value < TTV_FAST_MONTHS else 0.0
    return min(1.0, base + bonus)


def calculate_priority_score(
    value_score: float,
    readiness_score: float,
    ttv_score: Optional[float] = None,
) -> float:
    """
    Blend readiness and value 50/50.

    ttv_score is accepted for call-site symmetry and ignored.
    """
    return readiness_score * PRIORITY_WEIGHTS["readiness"] + value_score * PRIORITY_WEIGHTS["value"]


def determine_priority_tier(value_score: float, readiness_score: float) -> str:
    if value_score >= GRID_MIDPOINT and readiness_score >= GRID_MIDPOINT:
        return TIER_CHAMPIONS
    if value_score < GRID_MIDPOINT and readiness_score >= GRID_MIDPOINT:
        return TIER_QUICK_WINS
    if value_score >= GRID_MIDPOINT and readiness_score < GRID_MIDPOINT:
        return TIER_STRATEGIC
    return TIER_FOUNDATION


def determine_quadrant(value_score: float, readiness_score: float) -> str:
    if value_score >= GRID_MIDPOINT and readiness_score >= GRID_MIDPOINT:
        return "champions"
    if value_score >= GRID_MIDPOINT and readiness_score < GRID_MIDPOINT:
        return "strategic"
    if value_score < GRID_MIDPOINT and readiness_score >= GRID_MIDPOINT:
        return "quick_wins"
    return "foundation"


def determine_phase(priority_score: float) -> str:
    for threshold, phase in PHASE_THRESHOLDS:
        if priority_score >= threshold:
            return phase
    return FALLBACK_PHASE


def score_priority(inputs: PriorityInputs) -> PriorityResult:
    """
    Score one use case against its scenario set.

    Ratio-based value scoring is used when friction cost data is present;
    otherwise expected value is normalized against the set maximum.
    """
    if inputs.friction_annual_cost is not None and inputs.all_ratios is not None:
        value_score = calculate_ratio_value_score(
            inputs.expected_value, inputs.friction_annual_cost, inputs.all_ratios
        )
    else:
        value_score = calculate_value_score(inputs.expected_value, inputs.all_expected_values)

    ttv_score = calculate_ttv_score(inputs.time_to_value)
    priority = calculate_priority_score(value_score, inputs.readiness_score, ttv_score)

    return PriorityResult(
        value_score=value_score,
        readiness_score=inputs.readiness_score,
        ttv_score=ttv_score,
        priority_score=priority,
        priority_tier=determine_priority_tier(value_score, inputs.readiness_score),
        quadrant=determine_quadrant(value_score, inputs.readiness_score),
        recommended_phase=determine_phase(priority),
    )
