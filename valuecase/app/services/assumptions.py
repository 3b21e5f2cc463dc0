"""
Reference assumptions for the calculation engine.

Input bounds used to clamp consultant-entered values before they reach a
formula, plus the default multipliers applied when a benefit formula is
missing one of its components. Tables are read-only once the module loads.
"""

from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


class InputBound(BaseModel):
    """Allowed range for a single named input field."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Input field name")
    label: str = Field(..., description="Human-readable label")
    min_value: float = Field(..., description="Inclusive lower bound")
    max_value: float = Field(..., description="Inclusive upper bound")


def _bounds(*entries) -> Mapping[str, InputBound]:
    table = {}
    for field, label, min_value, max_value in entries:
        table[field] = InputBound(field=field, label=label, min_value=min_value, max_value=max_value)
    return MappingProxyType(table)


INPUT_BOUNDS: Mapping[str, InputBound] = _bounds(
    ("hoursSaved", "Hours Saved", 0, 500_000),
    ("loadedHourlyRate", "Loaded Hourly Rate", 25, 500),
    ("upliftPct", "Revenue Uplift %", 0, 0.5),
    ("baselineRevenueAtRisk", "Baseline Revenue at Risk", 0, 500_000_000_000),
    ("daysImprovement", "Days Improvement", 0, 365),
    ("annualRevenue", "Annual Revenue", 0, 500_000_000_000),
    ("costOfCapital", "Cost of Capital", 0.01, 0.25),
    ("probBefore", "Probability Before", 0, 1),
    ("impactBefore", "Impact Before", 0, 10_000_000_000),
    ("probAfter", "Probability After", 0, 1),
    ("impactAfter", "Impact After", 0, 10_000_000_000),
    ("runsPerMonth", "Runs per Month", 0, 10_000_000),
    ("annualHours", "Annual Hours", 0, 500_000),
)


# Fallbacks for formula components the user left blank (or at zero)
BENEFIT_DEFAULTS: Mapping[str, float] = MappingProxyType({
    "benefits_loading": 1.35,
    "adoption_rate": 0.90,
    "data_maturity": 0.75,
    "revenue_realization": 0.95,
    "risk_realization": 0.80,
    "cash_flow_realization": 0.85,
    "cost_of_capital": 0.08,
})


def clamp_input(field: str, value: float) -> float:
    """
    Clamp a value into the allowed range for a named field.

    Unknown field names pass through unchanged.
    """
    bound = INPUT_BOUNDS.get(field)
    if bound is None:
        return value
    return max(bound.min_value, min(bound.max_value, value))
