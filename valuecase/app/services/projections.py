"""
Multi-year financial projections: NPV, IRR and payback period.

The benefit stream is a level annual amount received at the end of each year
for a fixed number of years, against a single upfront investment.
"""

import math

from valuecase.app.models.calculation import ProjectionInputs, ProjectionResult


DEFAULT_YEARS = 3
DEFAULT_DISCOUNT_RATE = 0.10

IRR_INITIAL_GUESS = 0.5
IRR_TOLERANCE = 0.0001
IRR_MAX_ITERATIONS = 100


def calculate_npv(
    annual_benefit: float,
    years: int = DEFAULT_YEARS,
    discount_rate: float = DEFAULT_DISCOUNT_RATE,
    initial_investment: float = 0,
) -> float:
    """Net present value: -investment + sum of benefit / (1 + rate)^t for t = 1..years."""
    npv = -initial_investment
    for t in range(1, years + 1):
        npv += annual_benefit / (1 + discount_rate) ** t
    return npv


def calculate_irr(
    annual_benefit: float,
    years: int = DEFAULT_YEARS,
    initial_investment: float = 0,
    tolerance: float = IRR_TOLERANCE,
    max_iterations: int = IRR_MAX_ITERATIONS,
) -> float:
    """
    Internal rate of return by Newton-Raphson on NPV(rate).

    Starts from 0.5 and stops once |NPV| < tolerance, after max_iterations,
    or when the derivative vanishes. A step that would leave the domain
    (rate <= -1, overflow, non-finite values) also stops the search; the last
    valid estimate is returned. Without an investment there is nothing to
    recover and the result is 0.
    """
    if initial_investment <= 0:
        return 0.0

    rate = IRR_INITIAL_GUESS
    for _ in range(max_iterations):
        growth = 1 + rate
        if growth <= 0:
            break

        npv = -initial_investment
        dnpv = 0.0
        try:
            for t in range(1, years + 1):
                factor = growth ** t
                npv += annual_benefit / factor
                dnpv -= t * annual_benefit / (factor * growth)
        except (OverflowError, ZeroDivisionError):
            break

        if not math.isfinite(npv):
            break
        if abs(npv) < tolerance:
            break
        if dnpv == 0 or not math.isfinite(dnpv):
            break

        next_rate = rate - npv / dnpv
        # Rates at or below -100% have no meaning for a discount factor
        if not math.isfinite(next_rate) or next_rate <= -1:
            break
        rate = next_rate

    return rate


def calculate_payback_months(annual_benefit: float, initial_investment: float = 0) -> int:
    """Months to recover the investment, rounded up. 0 when either side is not positive."""
    if annual_benefit <= 0:
        return 0
    if initial_investment <= 0:
        return 0
    return math.ceil((initial_investment / annual_benefit) * 12)


def project_financials(inputs: ProjectionInputs) -> ProjectionResult:
    return ProjectionResult(
        npv=calculate_npv(
            inputs.annual_benefit, inputs.years, inputs.discount_rate, inputs.initial_investment
        ),
        irr=calculate_irr(inputs.annual_benefit, inputs.years, inputs.initial_investment),
        payback_months=calculate_payback_months(inputs.annual_benefit, inputs.initial_investment),
    )
