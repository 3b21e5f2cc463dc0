"""
Calculation endpoints for AI value case scenarios.

Stateless computation only: every request carries the complete inputs it
needs and nothing is stored. Single-formula endpoints take one use case;
the pipeline endpoints take a whole scenario snapshot because priority
scoring and guardrails normalize across every use case in it.
"""

import logging
import os
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field, ValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address

from valuecase.app.models.calculation import (
    BenefitInputs,
    BenefitResult,
    GuardrailReport,
    PriorityInputs,
    PriorityResult,
    ProjectionInputs,
    ProjectionResult,
    ReadinessInputs,
    ReadinessResult,
    UseCaseBenefitBreakdown,
)
from valuecase.app.models.pipeline import (
    BenefitQuantification,
    ExecutiveDashboard,
    FrictionPoint,
    MultiYearProjection,
    PriorityScore,
    ReadinessModel,
    RecalculationRequest,
    RecalculationResult,
    ScenarioAnalysis,
    UseCase,
)
from valuecase.app.services.assumptions import INPUT_BOUNDS, InputBound
from valuecase.app.services.benefits import calculate_benefits
from valuecase.app.services.calculation_engine import (
    generate_executive_dashboard,
    generate_multi_year_projection,
    generate_scenario_analysis,
    recalculate_benefits,
    recalculate_priorities,
    recalculate_readiness,
    run_full_recalculation,
)
from valuecase.app.services.guardrails import cross_validate_use_cases
from valuecase.app.services.priority import score_priority
from valuecase.app.services.projections import project_financials
from valuecase.app.services.readiness import estimate_readiness
from valuecase.app.services.scenarios import get_scenario_multipliers


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/calculate", tags=["calculate"])

CALC_RATE_LIMIT = os.environ.get("CALC_RATE_LIMIT", "120/minute")


# Rate limiter instance (respects ENV=TEST for disabling in tests)
def get_calculate_limiter():
    """Create rate limiter that respects test mode environment variables."""
    disable_limits = (
        os.environ.get("ENV") == "TEST" or os.environ.get("DISABLE_RATE_LIMITS") == "1"
    )

    if disable_limits:
        return Limiter(key_func=get_remote_address, enabled=False)
    else:
        return Limiter(key_func=get_remote_address)


limiter = get_calculate_limiter()


# ============================================================================
# Request bodies
# ============================================================================

class GuardrailRequest(BaseModel):
    use_cases: List[UseCaseBenefitBreakdown] = Field(default_factory=list)
    annual_revenue: float = Field(0.0, ge=0, description="Company annual revenue in USD")
    total_employees: int = Field(0, ge=0, description="Company headcount")


class BenefitsRequest(BaseModel):
    scenario: str = Field("base", description="base | conservative | optimistic | custom")
    benefits: List[BenefitQuantification] = Field(default_factory=list)


class ReadinessRequest(BaseModel):
    readiness: List[ReadinessModel] = Field(default_factory=list)


class PrioritiesRequest(BaseModel):
    benefits: List[BenefitQuantification] = Field(default_factory=list)
    readiness: List[ReadinessModel] = Field(default_factory=list)
    friction_points: Optional[List[FrictionPoint]] = None
    use_cases: Optional[List[UseCase]] = None


class ScenarioBenefitsRequest(BaseModel):
    """Benefits that have already been recalculated for the base scenario."""
    benefits: List[BenefitQuantification] = Field(default_factory=list)


class DashboardRequest(BaseModel):
    benefits: List[BenefitQuantification] = Field(default_factory=list)
    readiness: List[ReadinessModel] = Field(default_factory=list)
    priorities: List[PriorityScore] = Field(default_factory=list)


def _calculation_failed(what: str, exc: Exception) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "validation_error",
                "message": "Invalid input parameters",
            }
        )
    logger.error("Failed to calculate %s: %s", what, type(exc).__name__)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "calculation_error",
            "message": f"Failed to calculate {what}"
        }
    )


# ============================================================================
# Single-formula endpoints
# ============================================================================

@router.get("/input-bounds", response_model=Dict[str, InputBound])
async def input_bounds() -> Dict[str, InputBound]:
    """Allowed range of every clamped input field, keyed by field name."""
    return dict(INPUT_BOUNDS)


@router.post("/benefit", response_model=BenefitResult)
async def benefit(inputs: BenefitInputs) -> BenefitResult:
    """
    Calculate the four benefit categories for one use case.

    Returns each category with its formula trace, the total annual value and
    the probability-weighted expected value.

    Example:
    ```json
    {
        "hours_saved": 34000,
        "loaded_hourly_rate": 150,
        "probability_of_success": 0.75
    }
    ```
    """
    try:
        return calculate_benefits(inputs)
    except Exception as e:
        raise _calculation_failed("benefits", e)


@router.post("/readiness-score", response_model=ReadinessResult)
async def readiness_score(inputs: ReadinessInputs) -> ReadinessResult:
    """Weighted readiness score (1-10) plus monthly tokens and annual token cost."""
    try:
        return estimate_readiness(inputs)
    except Exception as e:
        raise _calculation_failed("readiness", e)


@router.post("/priority", response_model=PriorityResult)
async def priority(inputs: PriorityInputs) -> PriorityResult:
    """
    Score one use case against the rest of its scenario.

    Supply friction_annual_cost and all_ratios for ratio-based value scoring;
    otherwise all_expected_values is used for max normalization.
    """
    try:
        return score_priority(inputs)
    except Exception as e:
        raise _calculation_failed("priority", e)


@router.post("/projection", response_model=ProjectionResult)
async def projection(inputs: ProjectionInputs) -> ProjectionResult:
    try:
        return project_financials(inputs)
    except Exception as e:
        raise _calculation_failed("projection", e)


@router.post("/guardrails", response_model=GuardrailReport)
async def guardrails(body: GuardrailRequest) -> GuardrailReport:
    """
    Cross-validate a complete use-case set against company revenue and headcount.

    Warnings are advisory; the returned scale_factor is not applied.
    """
    try:
        return cross_validate_use_cases(body.use_cases, body.annual_revenue, body.total_employees)
    except Exception as e:
        raise _calculation_failed("guardrails", e)


# ============================================================================
# Pipeline endpoints
# ============================================================================

@router.post("/benefits", response_model=List[BenefitQuantification])
async def benefits(body: BenefitsRequest) -> List[BenefitQuantification]:
    """Recalculate benefit records from their formula components under a scenario."""
    try:
        return recalculate_benefits(body.benefits, get_scenario_multipliers(body.scenario))
    except Exception as e:
        raise _calculation_failed("benefits", e)


@router.post("/readiness", response_model=List[ReadinessModel])
async def readiness(body: ReadinessRequest) -> List[ReadinessModel]:
    try:
        return recalculate_readiness(body.readiness)
    except Exception as e:
        raise _calculation_failed("readiness", e)


@router.post("/priorities", response_model=List[PriorityScore])
async def priorities(body: PrioritiesRequest) -> List[PriorityScore]:
    try:
        return recalculate_priorities(
            body.benefits, body.readiness, body.friction_points, body.use_cases
        )
    except Exception as e:
        raise _calculation_failed("priorities", e)


@router.post("/scenarios", response_model=ScenarioAnalysis)
async def scenarios(body: ScenarioBenefitsRequest) -> ScenarioAnalysis:
    """Conservative, moderate and aggressive NPV and payback for the portfolio."""
    try:
        return generate_scenario_analysis(body.benefits)
    except Exception as e:
        raise _calculation_failed("scenario analysis", e)


@router.post("/multi-year", response_model=MultiYearProjection)
async def multi_year(body: ScenarioBenefitsRequest) -> MultiYearProjection:
    try:
        return generate_multi_year_projection(body.benefits)
    except Exception as e:
        raise _calculation_failed("multi-year projection", e)


@router.post("/dashboard", response_model=ExecutiveDashboard)
async def dashboard(body: DashboardRequest) -> ExecutiveDashboard:
    try:
        return generate_executive_dashboard(body.benefits, body.readiness, body.priorities)
    except Exception as e:
        raise _calculation_failed("dashboard", e)


@router.post("/recalculate", response_model=RecalculationResult)
@limiter.limit(CALC_RATE_LIMIT)
async def recalculate(
    request: Request,  # Required for rate limiting
    body: RecalculationRequest,
) -> RecalculationResult:
    """
    Recompute every derived figure for a scenario.

    Runs readiness, benefits, priorities, scenario analysis, multi-year
    projection, dashboard and guardrails over the complete snapshot and
    returns updated copies of every record.
    """
    try:
        return run_full_recalculation(body)
    except Exception as e:
        raise _calculation_failed("recalculation", e)
