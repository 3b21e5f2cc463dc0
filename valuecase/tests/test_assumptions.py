"""
Tests for input bounds, clamping and benefit defaults.
"""

import pytest
from pydantic import ValidationError

from valuecase.app.services.assumptions import (
    BENEFIT_DEFAULTS,
    INPUT_BOUNDS,
    clamp_input,
)


def test_clamp_input_within_range_is_unchanged():
    assert clamp_input("hoursSaved", 34_000) == 34_000
    assert clamp_input("loadedHourlyRate", 150) == 150


def test_clamp_input_below_minimum():
    assert clamp_input("loadedHourlyRate", 10) == 25
    assert clamp_input("costOfCapital", 0) == 0.01
    assert clamp_input("hoursSaved", -5) == 0


def test_clamp_input_above_maximum():
    assert clamp_input("hoursSaved", 10_000_000) == 500_000
    assert clamp_input("upliftPct", 0.9) == 0.5
    assert clamp_input("daysImprovement", 400) == 365


def test_clamp_input_unknown_field_passes_through():
    assert clamp_input("notAField", -123.0) == -123.0


def test_input_bounds_cover_every_clamped_field():
    expected = {
        "hoursSaved", "loadedHourlyRate", "upliftPct", "baselineRevenueAtRisk",
        "daysImprovement", "annualRevenue", "costOfCapital", "probBefore",
        "impactBefore", "probAfter", "impactAfter", "runsPerMonth", "annualHours",
    }
    assert set(INPUT_BOUNDS) == expected
    for field, bound in INPUT_BOUNDS.items():
        assert bound.field == field
        assert bound.min_value <= bound.max_value


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        INPUT_BOUNDS["hoursSaved"] = None
    with pytest.raises(TypeError):
        BENEFIT_DEFAULTS["adoption_rate"] = 1.0


def test_input_bound_is_frozen():
    with pytest.raises(ValidationError):
        INPUT_BOUNDS["hoursSaved"].max_value = 1


def test_benefit_defaults():
    assert BENEFIT_DEFAULTS["benefits_loading"] == 1.35
    assert BENEFIT_DEFAULTS["adoption_rate"] == 0.90
    assert BENEFIT_DEFAULTS["data_maturity"] == 0.75
    assert BENEFIT_DEFAULTS["revenue_realization"] == 0.95
    assert BENEFIT_DEFAULTS["risk_realization"] == 0.80
    assert BENEFIT_DEFAULTS["cash_flow_realization"] == 0.85
    assert BENEFIT_DEFAULTS["cost_of_capital"] == 0.08
