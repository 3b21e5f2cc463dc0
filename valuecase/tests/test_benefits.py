"""
Tests for the benefit formulas, their traced variants and whole-record evaluation.
"""

import pytest
from pydantic import ValidationError

from valuecase.app.models.calculation import BenefitInputs
from valuecase.app.services.benefits import (
    COST_FORMULA,
    calculate_benefits,
    calculate_cash_flow_benefit,
    calculate_cash_flow_benefit_with_trace,
    calculate_cost_benefit,
    calculate_cost_benefit_with_trace,
    calculate_expected_value,
    calculate_revenue_benefit,
    calculate_revenue_benefit_with_trace,
    calculate_risk_benefit,
    calculate_risk_benefit_from_probabilities,
    calculate_risk_benefit_from_probabilities_with_trace,
    calculate_risk_benefit_with_trace,
    calculate_total_annual_value,
)


@pytest.fixture
def cost_args():
    """Hours saved, loaded rate, benefits loading, adoption, data maturity."""
    return (34_000, 150, 1.35, 0.90, 0.75)


# ============================================================================
# Formula values
# ============================================================================

def test_cost_benefit_reference_case(cost_args):
    # 34,000 x 150 x 1.35 x 0.90 x 0.75
    assert calculate_cost_benefit(*cost_args) == pytest.approx(4_647_375.0)


def test_revenue_benefit():
    # 2% of $100M at risk x 0.95 x 0.75
    assert calculate_revenue_benefit(0.02, 100_000_000, 0.95, 0.75) == pytest.approx(1_425_000.0)


def test_risk_benefit():
    assert calculate_risk_benefit(0.10, 5_000_000, 0.80, 0.75) == pytest.approx(300_000.0)


def test_risk_benefit_from_probabilities():
    # (0.2 x 10M - 0.1 x 10M) x 0.8 x 0.75
    value = calculate_risk_benefit_from_probabilities(0.2, 10_000_000, 0.1, 10_000_000, 0.8, 0.75)
    assert value == pytest.approx(600_000.0)


def test_cash_flow_benefit():
    # $365M x 10/365 days x 8% x 0.85 x 0.75
    value = calculate_cash_flow_benefit(365_000_000, 10, 0.08, 0.85, 0.75)
    assert value == pytest.approx(510_000.0)


def test_zero_amounts_give_zero_benefit():
    assert calculate_cost_benefit(0, 150, 1.35, 0.9, 0.75) == 0
    assert calculate_revenue_benefit(0.02, 0, 0.95, 0.75) == 0
    assert calculate_risk_benefit(0, 5_000_000, 0.8, 0.75) == 0
    assert calculate_cash_flow_benefit(365_000_000, 0, 0.08, 0.85, 0.75) == 0


def test_total_is_sum_of_categories():
    assert calculate_total_annual_value(1.5, 2.25, 3.0, 4.0) == 10.75


def test_expected_value_at_probability_bounds():
    assert calculate_expected_value(1_000_000, 1.0) == 1_000_000
    assert calculate_expected_value(1_000_000, 0.0) == 0
    assert calculate_expected_value(1_000_000, 0.75) == pytest.approx(750_000)


# ============================================================================
# Monotonicity
# ============================================================================

@pytest.mark.parametrize("position", range(5))
def test_cost_benefit_increases_with_each_input(cost_args, position):
    bumped = list(cost_args)
    bumped[position] = bumped[position] * 1.1
    assert calculate_cost_benefit(*bumped) > calculate_cost_benefit(*cost_args)


def test_other_formulas_increase_with_amounts():
    assert calculate_revenue_benefit(0.03, 1e8, 0.95, 0.75) > calculate_revenue_benefit(0.02, 1e8, 0.95, 0.75)
    assert calculate_risk_benefit(0.1, 6e6, 0.8, 0.75) > calculate_risk_benefit(0.1, 5e6, 0.8, 0.75)
    assert calculate_cash_flow_benefit(1e8, 20, 0.08, 0.85, 0.75) > calculate_cash_flow_benefit(1e8, 10, 0.08, 0.85, 0.75)


# ============================================================================
# Traced variants
# ============================================================================

def test_traced_cost_matches_plain(cost_args):
    result = calculate_cost_benefit_with_trace(*cost_args)
    assert result.value == calculate_cost_benefit(*cost_args)
    assert result.trace.output == result.value
    assert result.trace.formula == COST_FORMULA
    assert result.trace.inputs == {
        "hours_saved": 34_000,
        "loaded_rate": 150,
        "benefits_loading": 1.35,
        "adoption_rate": 0.90,
        "data_maturity": 0.75,
    }
    assert result.trace.intermediates is None


def test_traced_variants_match_plain():
    args = (0.02, 100_000_000, 0.95, 0.75)
    assert calculate_revenue_benefit_with_trace(*args).value == calculate_revenue_benefit(*args)

    args = (0.10, 5_000_000, 0.80, 0.75)
    assert calculate_risk_benefit_with_trace(*args).value == calculate_risk_benefit(*args)

    args = (0.2, 10_000_000, 0.1, 8_000_000, 0.8, 0.75)
    traced = calculate_risk_benefit_from_probabilities_with_trace(*args)
    assert traced.value == calculate_risk_benefit_from_probabilities(*args)
    assert traced.trace.intermediates["expected_loss_before"] == pytest.approx(2_000_000)
    assert traced.trace.intermediates["expected_loss_after"] == pytest.approx(800_000)

    args = (365_000_000, 10, 0.08, 0.85, 0.75)
    traced = calculate_cash_flow_benefit_with_trace(*args)
    assert traced.value == calculate_cash_flow_benefit(*args)
    assert traced.trace.intermediates["working_capital_freed"] == pytest.approx(10_000_000)


# ============================================================================
# Whole-record evaluation
# ============================================================================

def test_calculate_benefits_cost_only():
    result = calculate_benefits(BenefitInputs(
        hours_saved=34_000,
        loaded_hourly_rate=150,
        probability_of_success=0.75,
    ))

    assert result.cost == pytest.approx(4_647_375.0)
    assert result.revenue == 0
    assert result.risk == 0
    assert result.cash_flow == 0
    assert result.total_annual_value == pytest.approx(4_647_375.0)
    assert result.expected_value == pytest.approx(3_485_531.25)
    assert set(result.traces) == {"cost", "revenue", "risk", "cash_flow"}


def test_calculate_benefits_realization_override():
    inputs = BenefitInputs(
        revenue_uplift_pct=0.02,
        revenue_at_risk=100_000_000,
        risk_reduction_pct=0.10,
        risk_exposure=5_000_000,
        realization_factor=0.5,
    )
    result = calculate_benefits(inputs)

    assert result.traces["revenue"].inputs["realization_factor"] == 0.5
    assert result.traces["risk"].inputs["realization_factor"] == 0.5
    assert result.revenue == pytest.approx(0.02 * 100_000_000 * 0.5 * 0.75)


def test_calculate_benefits_total_is_sum():
    result = calculate_benefits(BenefitInputs(
        hours_saved=1_000,
        loaded_hourly_rate=100,
        revenue_uplift_pct=0.01,
        revenue_at_risk=10_000_000,
        risk_reduction_pct=0.05,
        risk_exposure=1_000_000,
        annual_revenue=50_000_000,
        days_improved=5,
    ))
    assert result.total_annual_value == pytest.approx(
        result.cost + result.revenue + result.risk + result.cash_flow
    )
    assert result.expected_value == result.total_annual_value


@pytest.mark.parametrize("field,value", [
    ("hours_saved", -1),
    ("adoption_rate", 1.5),
    ("data_maturity_multiplier", -0.1),
    ("probability_of_success", 1.01),
])
def test_benefit_inputs_reject_out_of_range(field, value):
    with pytest.raises(ValidationError):
        BenefitInputs(**{field: value})
