"""
Scenario recalculation pipeline.

Recomputes every derived figure of a scenario from the user-editable inputs:

    readiness  -> scores, monthly tokens, annual token cost
    benefits   -> category benefits (scenario-adjusted), totals, expected value
    priorities -> value / readiness / priority scores, tier, quadrant, phase
    scenarios  -> conservative / moderate / aggressive NPV and payback
    multi-year -> NPV, IRR, payback over three years
    dashboard  -> ranked use cases and portfolio totals
    guardrails -> plausibility checks against company revenue and headcount

Priority scoring and guardrails normalize against the whole use-case set, so
every function here takes the complete scenario snapshot. Inputs are never
mutated; updated records are returned as copies.
"""

import logging
import math
from typing import List, Optional, Sequence

from valuecase.app.models.calculation import GuardrailReport, UseCaseBenefitBreakdown
from valuecase.app.models.pipeline import (
    BenefitQuantification,
    DashboardUseCase,
    ExecutiveDashboard,
    FrictionPoint,
    MultiYearProjection,
    PriorityScore,
    ReadinessModel,
    RecalculationRequest,
    RecalculationResult,
    ScenarioAnalysis,
    ScenarioProjection,
    UseCase,
)
from valuecase.app.services.assumptions import BENEFIT_DEFAULTS, clamp_input
from valuecase.app.services.benefits import (
    calculate_cash_flow_benefit_with_trace,
    calculate_cost_benefit_with_trace,
    calculate_expected_value,
    calculate_revenue_benefit_with_trace,
    calculate_risk_benefit_with_trace,
    calculate_total_annual_value,
)
from valuecase.app.services.formatting import format_currency, format_percent, parse_currency_string
from valuecase.app.services.guardrails import cross_validate_use_cases
from valuecase.app.services.priority import (
    calculate_priority_score,
    calculate_ratio_value_score,
    calculate_ttv_score,
    calculate_value_ratio,
    calculate_value_score,
    determine_phase,
    determine_priority_tier,
    determine_quadrant,
)
from valuecase.app.services.projections import (
    calculate_irr,
    calculate_npv,
    calculate_payback_months,
)
from valuecase.app.services.readiness import (
    calculate_annual_token_cost,
    calculate_monthly_tokens,
    calculate_readiness_score,
)
from valuecase.app.services.scenarios import (
    SCENARIO_MULTIPLIERS,
    ScenarioMultipliers,
    adjust_probability,
    apply_scenario_multiplier,
    get_scenario_multipliers,
)


logger = logging.getLogger(__name__)


# Upfront investment estimated as a share of the base-case annual benefit
INVESTMENT_PCT_OF_ANNUAL = 0.20

PROJECTION_YEARS = 3
PROJECTION_DISCOUNT_RATE = 0.10

# Used when a use case has no readiness record
DEFAULT_READINESS_SCORE = 5.0
DEFAULT_TIME_TO_VALUE = 12.0

# A benefit category needs at least this many components to be computed
MIN_FORMULA_COMPONENTS = 2


def _component(value: Optional[float], default: float) -> float:
    # Blank and zero components both fall back to the default
    return value or default


# ============================================================================
# Benefits
# ============================================================================

def recalculate_benefits(
    benefits: Sequence[BenefitQuantification],
    multipliers: ScenarioMultipliers = SCENARIO_MULTIPLIERS["base"],
) -> List[BenefitQuantification]:
    """
    Recompute each use case's benefits from its formula components.

    Bounded inputs are clamped, missing multipliers fall back to
    BENEFIT_DEFAULTS, and the scenario's benefit multiplier scales every
    category while its probability multiplier adjusts probability of success.
    """
    results = []
    for b in benefits:
        traces = {}

        cost = 0.0
        labels = b.cost_formula_labels
        if len(labels.components) >= MIN_FORMULA_COMPONENTS:
            result = calculate_cost_benefit_with_trace(
                clamp_input("hoursSaved", _component(labels.find("Hours Saved"), 0)),
                clamp_input("loadedHourlyRate", _component(labels.find("Loaded Hourly Rate"), 0)),
                _component(labels.find("Benefits Loading"), BENEFIT_DEFAULTS["benefits_loading"]),
                _component(labels.find("Adoption Rate"), BENEFIT_DEFAULTS["adoption_rate"]),
                _component(labels.find("Data Maturity"), BENEFIT_DEFAULTS["data_maturity"]),
            )
            cost = result.value
            traces["cost"] = result.trace

        revenue = 0.0
        labels = b.revenue_formula_labels
        if len(labels.components) >= MIN_FORMULA_COMPONENTS:
            result = calculate_revenue_benefit_with_trace(
                clamp_input("upliftPct", _component(labels.find("Revenue Uplift %"), 0)),
                clamp_input("baselineRevenueAtRisk", _component(labels.find("Revenue at Risk"), 0)),
                _component(labels.find("Realization Factor"), BENEFIT_DEFAULTS["revenue_realization"]),
                _component(labels.find("Data Maturity"), BENEFIT_DEFAULTS["data_maturity"]),
            )
            revenue = result.value
            traces["revenue"] = result.trace

        risk = 0.0
        labels = b.risk_formula_labels
        if len(labels.components) >= MIN_FORMULA_COMPONENTS:
            result = calculate_risk_benefit_with_trace(
                _component(labels.find("Risk Reduction %"), 0),
                _component(labels.find("Risk Exposure"), 0),
                _component(labels.find("Realization Factor"), BENEFIT_DEFAULTS["risk_realization"]),
                _component(labels.find("Data Maturity"), BENEFIT_DEFAULTS["data_maturity"]),
            )
            risk = result.value
            traces["risk"] = result.trace

        cash_flow = 0.0
        labels = b.cash_flow_formula_labels
        if len(labels.components) >= MIN_FORMULA_COMPONENTS:
            result = calculate_cash_flow_benefit_with_trace(
                clamp_input("annualRevenue", _component(labels.find("Annual Revenue"), 0)),
                clamp_input("daysImprovement", _component(labels.find("Days Improved"), 0)),
                clamp_input(
                    "costOfCapital",
                    _component(labels.find("Cost of Capital"), BENEFIT_DEFAULTS["cost_of_capital"]),
                ),
                _component(labels.find("Realization Factor"), BENEFIT_DEFAULTS["cash_flow_realization"]),
                _component(labels.find("Data Maturity"), BENEFIT_DEFAULTS["data_maturity"]),
            )
            cash_flow = result.value
            traces["cash_flow"] = result.trace

        cost = apply_scenario_multiplier(cost, multipliers)
        revenue = apply_scenario_multiplier(revenue, multipliers)
        risk = apply_scenario_multiplier(risk, multipliers)
        cash_flow = apply_scenario_multiplier(cash_flow, multipliers)

        total = calculate_total_annual_value(cost, revenue, risk, cash_flow)
        probability = adjust_probability(b.probability_of_success, multipliers)
        expected = calculate_expected_value(total, probability)

        results.append(b.model_copy(update={
            "cost_benefit": cost,
            "revenue_benefit": revenue,
            "risk_benefit": risk,
            "cash_flow_benefit": cash_flow,
            "total_annual_value": total,
            "expected_value": expected,
            "probability_of_success": probability,
            "display": {
                "cost_benefit": format_currency(cost),
                "revenue_benefit": format_currency(revenue),
                "risk_benefit": format_currency(risk),
                "cash_flow_benefit": format_currency(cash_flow),
                "total_annual_value": format_currency(total),
                "expected_value": format_currency(expected),
            },
            "traces": traces,
        }))

    logger.debug("Recalculated benefits for %d use case(s)", len(results))
    return results


# ============================================================================
# Readiness
# ============================================================================

def recalculate_readiness(readiness: Sequence[ReadinessModel]) -> List[ReadinessModel]:
    results = []
    for r in readiness:
        score = calculate_readiness_score(
            r.data_availability,
            r.technical_infrastructure,
            r.organizational_capacity,
            r.governance,
        )
        annual_cost = calculate_annual_token_cost(
            r.runs_per_month, r.input_tokens_per_run, r.output_tokens_per_run
        )
        results.append(r.model_copy(update={
            "readiness_score": round(score, 1),
            "monthly_tokens": calculate_monthly_tokens(
                r.runs_per_month, r.input_tokens_per_run, r.output_tokens_per_run
            ),
            "annual_token_cost": annual_cost,
            "annual_token_cost_display": format_currency(annual_cost),
        }))
    return results


# ============================================================================
# Priorities
# ============================================================================

def friction_annual_cost(friction_point: FrictionPoint) -> float:
    """
    Annual cost of a friction point.

    Uses the stored estimate; when that is blank or unparseable, falls back
    to annual hours x loaded hourly rate.
    """
    cost = parse_currency_string(friction_point.estimated_annual_cost)
    if cost > 0:
        return cost
    return clamp_input("annualHours", friction_point.annual_hours) * friction_point.loaded_hourly_rate


def find_friction_cost_for_benefit(
    benefit: BenefitQuantification,
    use_cases: Sequence[UseCase],
    friction_points: Sequence[FrictionPoint],
) -> float:
    """Resolve benefit -> use case -> targeted friction point -> annual cost (0 if unresolved)."""
    use_case = next((u for u in use_cases if u.id == benefit.use_case_id), None)
    if use_case is None:
        return 0.0

    friction_point = next(
        (
            f for f in friction_points
            if f.friction_point == use_case.target_friction or f.id == use_case.id
        ),
        None,
    )
    if friction_point is None:
        return 0.0

    return friction_annual_cost(friction_point)


def recalculate_priorities(
    benefits: Sequence[BenefitQuantification],
    readiness: Sequence[ReadinessModel],
    friction_points: Optional[Sequence[FrictionPoint]] = None,
    use_cases: Optional[Sequence[UseCase]] = None,
) -> List[PriorityScore]:
    """
    Score every use case in the scenario.

    Uses ratio-based value scoring when friction points and use cases are
    both supplied, otherwise normalizes expected value against the set max.
    """
    expected_values = [b.expected_value for b in benefits]
    has_friction_data = bool(friction_points) and bool(use_cases)

    friction_costs: List[float] = []
    all_ratios: List[float] = []
    if has_friction_data:
        friction_costs = [
            find_friction_cost_for_benefit(b, use_cases, friction_points) for b in benefits
        ]
        all_ratios = [
            calculate_value_ratio(ev, cost) for ev, cost in zip(expected_values, friction_costs)
        ]

    readiness_by_use_case = {}
    for r in readiness:
        readiness_by_use_case.setdefault(r.use_case_id, r)

    priorities = []
    for idx, b in enumerate(benefits):
        r = readiness_by_use_case.get(b.use_case_id)
        readiness_score = (r.readiness_score if r else 0) or DEFAULT_READINESS_SCORE
        time_to_value = (r.time_to_value if r else 0) or DEFAULT_TIME_TO_VALUE
        ev = expected_values[idx]

        if has_friction_data:
            value_score = calculate_ratio_value_score(ev, friction_costs[idx], all_ratios)
        else:
            value_score = calculate_value_score(ev, expected_values)

        ttv_score = calculate_ttv_score(time_to_value)
        priority = calculate_priority_score(value_score, readiness_score, ttv_score)

        priorities.append(PriorityScore(
            id=b.use_case_id,
            use_case_id=b.use_case_id,
            use_case_name=b.use_case_name,
            strategic_theme=b.strategic_theme,
            value_score=round(value_score, 2),
            readiness_score=round(readiness_score, 2),
            ttv_score=round(ttv_score, 2),
            priority_score=round(priority, 2),
            priority_tier=determine_priority_tier(value_score, readiness_score),
            quadrant=determine_quadrant(value_score, readiness_score),
            recommended_phase=determine_phase(priority),
        ))

    return priorities


# ============================================================================
# Scenario analysis and projections
# ============================================================================

def _total_expected_value(benefits: Sequence[BenefitQuantification]) -> float:
    return sum(b.expected_value for b in benefits)


def _scenario_projection(annual_benefit: float, initial_investment: float) -> ScenarioProjection:
    npv = calculate_npv(annual_benefit, PROJECTION_YEARS, PROJECTION_DISCOUNT_RATE, initial_investment)
    return ScenarioProjection(
        npv=npv,
        annual_benefit=annual_benefit,
        payback_months=calculate_payback_months(annual_benefit, initial_investment),
        npv_display=format_currency(npv),
        annual_benefit_display=format_currency(annual_benefit),
    )


def generate_scenario_analysis(benefits: Sequence[BenefitQuantification]) -> ScenarioAnalysis:
    """
    Portfolio expected value under each preset, with NPV and payback.

    All three scenarios share one investment estimate taken from the base case.
    """
    conservative = _total_expected_value(
        recalculate_benefits(benefits, SCENARIO_MULTIPLIERS["conservative"])
    )
    moderate = _total_expected_value(recalculate_benefits(benefits, SCENARIO_MULTIPLIERS["base"]))
    aggressive = _total_expected_value(
        recalculate_benefits(benefits, SCENARIO_MULTIPLIERS["optimistic"])
    )

    initial_investment = moderate * INVESTMENT_PCT_OF_ANNUAL

    return ScenarioAnalysis(
        conservative=_scenario_projection(conservative, initial_investment),
        moderate=_scenario_projection(moderate, initial_investment),
        aggressive=_scenario_projection(aggressive, initial_investment),
    )


def generate_multi_year_projection(benefits: Sequence[BenefitQuantification]) -> MultiYearProjection:
    total_annual = _total_expected_value(benefits)
    initial_investment = total_annual * INVESTMENT_PCT_OF_ANNUAL

    npv = calculate_npv(total_annual, PROJECTION_YEARS, PROJECTION_DISCOUNT_RATE, initial_investment)
    irr = calculate_irr(total_annual, PROJECTION_YEARS, initial_investment)
    total_benefit = total_annual * PROJECTION_YEARS

    return MultiYearProjection(
        irr=irr,
        npv=npv,
        payback_months=calculate_payback_months(total_annual, initial_investment),
        total_benefit_over_period=total_benefit,
        irr_display=format_percent(irr),
        npv_display=format_currency(npv),
        total_benefit_over_period_display=format_currency(total_benefit),
    )


# ============================================================================
# Dashboard and guardrails
# ============================================================================

def generate_executive_dashboard(
    benefits: Sequence[BenefitQuantification],
    readiness: Sequence[ReadinessModel],
    priorities: Sequence[PriorityScore],
) -> ExecutiveDashboard:
    benefits_by_use_case = {b.use_case_id: b for b in reversed(benefits)}
    readiness_by_use_case = {r.use_case_id: r for r in reversed(readiness)}

    ranked = sorted(priorities, key=lambda p: p.priority_score, reverse=True)
    top_use_cases = []
    for rank, p in enumerate(ranked, start=1):
        b = benefits_by_use_case.get(p.use_case_id)
        r = readiness_by_use_case.get(p.use_case_id)
        top_use_cases.append(DashboardUseCase(
            rank=rank,
            use_case=p.use_case_name,
            use_case_id=p.use_case_id,
            annual_value=b.total_annual_value if b else 0.0,
            monthly_tokens=r.monthly_tokens if r else 0.0,
            priority_score=p.priority_score,
        ))

    total_annual_value = sum(u.annual_value for u in top_use_cases)
    total_monthly_tokens = sum(r.monthly_tokens for r in readiness)

    value_per_million_tokens = 0
    if total_monthly_tokens > 0:
        value_per_million_tokens = math.floor(total_annual_value / (total_monthly_tokens / 1_000_000) + 0.5)

    return ExecutiveDashboard(
        top_use_cases=top_use_cases,
        total_annual_value=total_annual_value,
        total_cost_benefit=sum(b.cost_benefit for b in benefits),
        total_revenue_benefit=sum(b.revenue_benefit for b in benefits),
        total_risk_benefit=sum(b.risk_benefit for b in benefits),
        total_cash_flow_benefit=sum(b.cash_flow_benefit for b in benefits),
        total_monthly_tokens=total_monthly_tokens,
        value_per_million_tokens=value_per_million_tokens,
    )


def validate_benefits(
    benefits: Sequence[BenefitQuantification],
    annual_revenue: float,
    total_employees: float,
) -> GuardrailReport:
    """Run the guardrail checks over recalculated benefits."""
    breakdowns = [
        UseCaseBenefitBreakdown(
            cost_benefit=b.cost_benefit,
            revenue_benefit=b.revenue_benefit,
            risk_benefit=b.risk_benefit,
            cash_flow_benefit=b.cash_flow_benefit,
            hours_saved=clamp_input("hoursSaved", b.cost_formula_labels.find("Hours Saved") or 0),
        )
        for b in benefits
    ]
    return cross_validate_use_cases(breakdowns, annual_revenue, total_employees)


def run_full_recalculation(request: RecalculationRequest) -> RecalculationResult:
    """
    Recompute every derived figure for one scenario snapshot.

    Args:
        request: Complete scenario inputs plus company context

    Returns:
        RecalculationResult with updated records, projections, dashboard and
        guardrail report
    """
    multipliers = get_scenario_multipliers(request.scenario)

    readiness = recalculate_readiness(request.readiness)
    benefits = recalculate_benefits(request.benefits, multipliers)
    priorities = recalculate_priorities(
        benefits, readiness, request.friction_points, request.use_cases
    )
    guardrails = validate_benefits(benefits, request.annual_revenue, request.total_employees)

    logger.info(
        "Recalculated scenario %s: %d use case(s), %d guardrail warning(s)",
        request.scenario, len(benefits), len(guardrails.warnings),
    )

    return RecalculationResult(
        benefits=benefits,
        readiness=readiness,
        priorities=priorities,
        # Presets apply their own multipliers to the unadjusted records
        scenario_analysis=generate_scenario_analysis(request.benefits),
        multi_year=generate_multi_year_projection(benefits),
        executive_dashboard=generate_executive_dashboard(benefits, readiness, priorities),
        guardrails=guardrails,
    )
