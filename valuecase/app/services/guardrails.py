"""
Cross-validation guardrails for a scenario's benefit estimates.

Aggregates per-use-case benefits and checks them against company context:

1. Total benefits above 50% of annual revenue (computes a scale factor)
2. Revenue benefits above 30% of annual revenue (likely double-counting)
3. Hours saved implying more FTEs than 20% of headcount

Checks are independent and only produce advisory warnings; scaling the
estimates is left to the caller. A check whose denominator is zero is skipped.
"""

import logging
from types import MappingProxyType
from typing import List, Mapping, Sequence

from valuecase.app.models.calculation import (
    GuardrailMetrics,
    GuardrailReport,
    UseCaseBenefitBreakdown,
)
from valuecase.app.services.formatting import format_currency


logger = logging.getLogger(__name__)


GUARDRAIL_LIMITS: Mapping[str, float] = MappingProxyType({
    "benefits_cap_pct": 0.50,       # total benefits cap, share of annual revenue
    "per_use_case_cap_pct": 0.15,   # single use case cap, share of annual revenue
    "revenue_warning_pct": 0.30,    # revenue benefits warning, share of annual revenue
    "fte_warning_pct": 0.20,        # FTE savings warning, share of headcount
    "annual_hours_per_fte": 2080,   # 40 hrs x 52 weeks
})


def _pct(limit: float) -> str:
    return f"{limit * 100:.0f}%"


def cross_validate_use_cases(
    use_case_benefits: Sequence[UseCaseBenefitBreakdown],
    annual_revenue: float,
    total_employees: float,
) -> GuardrailReport:
    """
    Check a complete use-case set against company revenue and headcount.

    Args:
        use_case_benefits: Benefit breakdown for every use case in the scenario
        annual_revenue: Company annual revenue in USD (0 skips revenue checks)
        total_employees: Company headcount (0 skips the FTE check)

    Returns:
        GuardrailReport with warnings in check order and the computed ratios
    """
    warnings: List[str] = []
    total_cost = total_revenue = total_risk = total_cash_flow = total_hours = 0.0

    for uc in use_case_benefits:
        total_cost += uc.cost_benefit
        total_revenue += uc.revenue_benefit
        total_risk += uc.risk_benefit
        total_cash_flow += uc.cash_flow_benefit
        total_hours += uc.hours_saved or 0

    total_benefits = total_cost + total_revenue + total_risk + total_cash_flow
    benefits_ratio = total_benefits / annual_revenue if annual_revenue > 0 else 0.0
    revenue_ratio = total_revenue / annual_revenue if annual_revenue > 0 else 0.0
    fte_equivalent = total_hours / GUARDRAIL_LIMITS["annual_hours_per_fte"]
    fte_ratio = fte_equivalent / total_employees if total_employees > 0 else 0.0

    benefits_cap_pct = GUARDRAIL_LIMITS["benefits_cap_pct"]
    revenue_warning_pct = GUARDRAIL_LIMITS["revenue_warning_pct"]
    fte_warning_pct = GUARDRAIL_LIMITS["fte_warning_pct"]

    if annual_revenue > 0 and benefits_ratio > benefits_cap_pct:
        warnings.append(
            f"Total benefits ({format_currency(total_benefits)}) exceed {_pct(benefits_cap_pct)} "
            f"of annual revenue. Benefits may be proportionally scaled."
        )

    if annual_revenue > 0 and revenue_ratio > revenue_warning_pct:
        warnings.append(
            f"Revenue benefits ({format_currency(total_revenue)}) exceed {_pct(revenue_warning_pct)} "
            f"of annual revenue. Possible double-counting across use cases."
        )

    if total_employees > 0 and fte_ratio > fte_warning_pct:
        warnings.append(
            f"Hours saved ({total_hours:,.0f}) implies {fte_equivalent:.0f} FTEs, more than "
            f"{_pct(fte_warning_pct)} of {total_employees:,.0f} employees. Verify for double-counting."
        )

    scale_factor = 1.0
    if annual_revenue > 0:
        cap = annual_revenue * benefits_cap_pct
        if total_benefits > cap:
            scale_factor = cap / total_benefits

    oversized: List[int] = []
    if annual_revenue > 0:
        per_use_case_cap = annual_revenue * GUARDRAIL_LIMITS["per_use_case_cap_pct"]
        for index, uc in enumerate(use_case_benefits):
            uc_total = uc.cost_benefit + uc.revenue_benefit + uc.risk_benefit + uc.cash_flow_benefit
            if uc_total > per_use_case_cap:
                oversized.append(index)

    if warnings:
        logger.warning(
            "Guardrails raised %d warning(s): benefits_ratio=%.3f revenue_ratio=%.3f fte_ratio=%.3f",
            len(warnings), benefits_ratio, revenue_ratio, fte_ratio,
        )

    return GuardrailReport(
        warnings=warnings,
        metrics=GuardrailMetrics(
            total_benefits_vs_revenue=benefits_ratio,
            revenue_ratio=revenue_ratio,
            fte_ratio=fte_ratio,
            benefits_capped=scale_factor < 1.0,
            scale_factor=scale_factor,
        ),
        oversized_use_cases=oversized,
    )
