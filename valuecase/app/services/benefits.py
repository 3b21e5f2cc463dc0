"""
Benefit calculation service.

Four benefit categories for an AI use case, each a product of an amount and
one or more dimensionless multipliers:

    Cost      = HoursSaved x LoadedRate x BenefitsLoading x AdoptionRate x DataMaturity
    Revenue   = UpliftPct x RevenueAtRisk x RealizationFactor x DataMaturity
    Risk      = RiskReductionPct x RiskExposure x RealizationFactor x DataMaturity
    Cash flow = AnnualRevenue x (DaysImproved / 365) x CostOfCapital x RealizationFactor x DataMaturity

Every formula has a traced variant that returns the same value together with
a FormulaTrace for the audit view. Traced variants call the plain function,
so the two never disagree.

Pure computation: no storage, no I/O, fully deterministic.
"""

from typing import Dict, Optional

from valuecase.app.models.calculation import (
    BenefitInputs,
    BenefitResult,
    CalculationResult,
    FormulaTrace,
)


DAYS_PER_YEAR = 365

COST_FORMULA = "HoursSaved × LoadedRate × BenefitsLoading × AdoptionRate × DataMaturity"
REVENUE_FORMULA = "UpliftPct × RevenueAtRisk × RealizationFactor × DataMaturity"
RISK_FORMULA = "RiskReductionPct × RiskExposure × RealizationFactor × DataMaturity"
RISK_PROBABILITY_FORMULA = (
    "(ProbBefore × ImpactBefore − ProbAfter × ImpactAfter) × RealizationFactor × DataMaturity"
)
CASH_FLOW_FORMULA = (
    "AnnualRevenue × (DaysImproved / 365) × CostOfCapital × RealizationFactor × DataMaturity"
)


def _traced(
    value: float,
    formula: str,
    inputs: Dict[str, float],
    intermediates: Optional[Dict[str, float]] = None,
) -> CalculationResult:
    return CalculationResult(
        value=value,
        trace=FormulaTrace(
            formula=formula,
            inputs=inputs,
            intermediates=intermediates,
            output=value,
        ),
    )


# ============================================================================
# Benefit formulas
# ============================================================================

def calculate_cost_benefit(
    hours_saved: float,
    loaded_rate: float,
    benefits_loading: float,
    adoption_rate: float,
    data_maturity: float,
) -> float:
    """Annual labor cost avoided."""
    return hours_saved * loaded_rate * benefits_loading * adoption_rate * data_maturity


def calculate_revenue_benefit(
    uplift_pct: float,
    revenue_at_risk: float,
    realization_factor: float,
    data_maturity: float,
) -> float:
    """Annual revenue uplift."""
    return uplift_pct * revenue_at_risk * realization_factor * data_maturity


def calculate_risk_benefit(
    risk_reduction_pct: float,
    risk_exposure: float,
    realization_factor: float,
    data_maturity: float,
) -> float:
    """Annual risk reduction from a reduction percentage applied to exposure."""
    return risk_reduction_pct * risk_exposure * realization_factor * data_maturity


def calculate_risk_benefit_from_probabilities(
    prob_before: float,
    impact_before: float,
    prob_after: float,
    impact_after: float,
    realization_factor: float,
    data_maturity: float,
) -> float:
    """Annual risk reduction as the drop in expected loss."""
    return (prob_before * impact_before - prob_after * impact_after) * realization_factor * data_maturity


def calculate_cash_flow_benefit(
    annual_revenue: float,
    days_improved: float,
    cost_of_capital: float,
    realization_factor: float,
    data_maturity: float,
) -> float:
    """Annual carrying cost saved on working capital freed by a shorter cycle."""
    return (
        annual_revenue
        * (days_improved / DAYS_PER_YEAR)
        * cost_of_capital
        * realization_factor
        * data_maturity
    )


def calculate_total_annual_value(cost: float, revenue: float, risk: float, cash_flow: float) -> float:
    return cost + revenue + risk + cash_flow


def calculate_expected_value(total_annual: float, probability_of_success: float) -> float:
    return total_annual * probability_of_success


# ============================================================================
# Traced variants
# ============================================================================

def calculate_cost_benefit_with_trace(
    hours_saved: float,
    loaded_rate: float,
    benefits_loading: float,
    adoption_rate: float,
    data_maturity: float,
) -> CalculationResult:
    value = calculate_cost_benefit(hours_saved, loaded_rate, benefits_loading, adoption_rate, data_maturity)
    return _traced(value, COST_FORMULA, {
        "hours_saved": hours_saved,
        "loaded_rate": loaded_rate,
        "benefits_loading": benefits_loading,
        "adoption_rate": adoption_rate,
        "data_maturity": data_maturity,
    })


def calculate_revenue_benefit_with_trace(
    uplift_pct: float,
    revenue_at_risk: float,
    realization_factor: float,
    data_maturity: float,
) -> CalculationResult:
    value = calculate_revenue_benefit(uplift_pct, revenue_at_risk, realization_factor, data_maturity)
    return _traced(value, REVENUE_FORMULA, {
        "uplift_pct": uplift_pct,
        "revenue_at_risk": revenue_at_risk,
        "realization_factor": realization_factor,
        "data_maturity": data_maturity,
    })


def calculate_risk_benefit_with_trace(
    risk_reduction_pct: float,
    risk_exposure: float,
    realization_factor: float,
    data_maturity: float,
) -> CalculationResult:
    value = calculate_risk_benefit(risk_reduction_pct, risk_exposure, realization_factor, data_maturity)
    return _traced(value, RISK_FORMULA, {
        "risk_reduction_pct": risk_reduction_pct,
        "risk_exposure": risk_exposure,
        "realization_factor": realization_factor,
        "data_maturity": data_maturity,
    })


def calculate_risk_benefit_from_probabilities_with_trace(
    prob_before: float,
    impact_before: float,
    prob_after: float,
    impact_after: float,
    realization_factor: float,
    data_maturity: float,
) -> CalculationResult:
    value = calculate_risk_benefit_from_probabilities(
        prob_before, impact_before, prob_after, impact_after, realization_factor, data_maturity
    )
    return _traced(
        value,
        RISK_PROBABILITY_FORMULA,
        {
            "prob_before": prob_before,
            "impact_before": impact_before,
            "prob_after": prob_after,
            "impact_after": impact_after,
            "realization_factor": realization_factor,
            "data_maturity": data_maturity,
        },
        {
            "expected_loss_before": prob_before * impact_before,
            "expected_loss_after": prob_after * impact_after,
        },
    )


def calculate_cash_flow_benefit_with_trace(
    annual_revenue: float,
    days_improved: float,
    cost_of_capital: float,
    realization_factor: float,
    data_maturity: float,
) -> CalculationResult:
    value = calculate_cash_flow_benefit(
        annual_revenue, days_improved, cost_of_capital, realization_factor, data_maturity
    )
    return _traced(
        value,
        CASH_FLOW_FORMULA,
        {
            "annual_revenue": annual_revenue,
            "days_improved": days_improved,
            "cost_of_capital": cost_of_capital,
            "realization_factor": realization_factor,
            "data_maturity": data_maturity,
        },
        {"working_capital_freed": annual_revenue * (days_improved / DAYS_PER_YEAR)},
    )


# ============================================================================
# Whole-record evaluation
# ============================================================================

def calculate_benefits(inputs: BenefitInputs) -> BenefitResult:
    """
    Evaluate all four benefit categories for one use case.

    Args:
        inputs: BenefitInputs for the use case

    Returns:
        BenefitResult with category totals, total annual value, expected
        value and a trace per category
    """
    maturity = inputs.data_maturity_multiplier
    override = inputs.realization_factor

    cost = calculate_cost_benefit_with_trace(
        inputs.hours_saved,
        inputs.loaded_hourly_rate,
        inputs.benefits_loading_factor,
        inputs.adoption_rate,
        maturity,
    )
    revenue = calculate_revenue_benefit_with_trace(
        inputs.revenue_uplift_pct,
        inputs.revenue_at_risk,
        override if override is not None else inputs.revenue_realization_factor,
        maturity,
    )
    risk = calculate_risk_benefit_with_trace(
        inputs.risk_reduction_pct,
        inputs.risk_exposure,
        override if override is not None else inputs.risk_realization_factor,
        maturity,
    )
    cash_flow = calculate_cash_flow_benefit_with_trace(
        inputs.annual_revenue,
        inputs.days_improved,
        inputs.cost_of_capital,
        override if override is not None else inputs.cash_flow_realization_factor,
        maturity,
    )

    total = calculate_total_annual_value(cost.value, revenue.value, risk.value, cash_flow.value)

    return BenefitResult(
        cost=cost.value,
        revenue=revenue.value,
        risk=risk.value,
        cash_flow=cash_flow.value,
        total_annual_value=total,
        expected_value=calculate_expected_value(total, inputs.probability_of_success),
        probability_of_success=inputs.probability_of_success,
        traces={
            "cost": cost.trace,
            "revenue": revenue.trace,
            "risk": risk.trace,
            "cash_flow": cash_flow.trace,
        },
    )
