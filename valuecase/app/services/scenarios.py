"""
Scenario multipliers (conservative / base / optimistic).

A scenario scales benefit magnitudes and, separately, the probability of
success that feeds expected value. Readiness is never scaled. The "custom"
scenario is user-edited raw values and resolves to the base (identity)
multipliers.
"""

import logging
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


logger = logging.getLogger(__name__)


class ScenarioMultipliers(BaseModel):
    """Multiplier pair for one named scenario."""

    model_config = ConfigDict(frozen=True)

    benefit_multiplier: float = Field(..., ge=0, description="Applied to each benefit category")
    probability_multiplier: float = Field(..., ge=0, description="Applied to probability of success")


BASE_SCENARIO = "base"
CUSTOM_SCENARIO = "custom"

SCENARIO_MULTIPLIERS: Mapping[str, ScenarioMultipliers] = MappingProxyType({
    "base": ScenarioMultipliers(benefit_multiplier=1.0, probability_multiplier=1.0),
    "conservative": ScenarioMultipliers(benefit_multiplier=0.6, probability_multiplier=0.85),
    "optimistic": ScenarioMultipliers(benefit_multiplier=1.3, probability_multiplier=1.0),
})


def get_scenario_multipliers(name: str) -> ScenarioMultipliers:
    """
    Resolve a scenario name to its multipliers.

    "custom" and unrecognized names resolve to the base multipliers.
    """
    multipliers = SCENARIO_MULTIPLIERS.get(name)
    if multipliers is None:
        if name != CUSTOM_SCENARIO:
            logger.debug("Unknown scenario %r, using base multipliers", name)
        return SCENARIO_MULTIPLIERS[BASE_SCENARIO]
    return multipliers


def apply_scenario_multiplier(value: float, multipliers: ScenarioMultipliers) -> float:
    """Scale a benefit magnitude. Probability is adjusted separately."""
    return value * multipliers.benefit_multiplier


def adjust_probability(probability: float, multipliers: ScenarioMultipliers) -> float:
    """Scale probability of success, capped at 1."""
    return min(1.0, probability * multipliers.probability_multiplier)
