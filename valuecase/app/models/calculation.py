"""
Value records for the deterministic calculation engine.

Every record is built fresh from the caller's current form state and is
consumed by pure functions. Rates and percentages are fractions (0.08 is 8%).
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class FormulaTrace(BaseModel):
    """Audit trail for one traced calculation."""
    formula: str = Field(..., description="Human-readable formula expression")
    inputs: Dict[str, float] = Field(..., description="Named input values")
    intermediates: Optional[Dict[str, float]] = Field(
        default=None,
        description="Named intermediate values, when the formula has any"
    )
    output: float = Field(..., description="Calculated output (identical to the untraced result)")


class CalculationResult(BaseModel):
    """Value plus its audit trail."""
    value: float
    trace: FormulaTrace


class BenefitInputs(BaseModel):
    """
    Operational parameters for the four benefit categories of one use case.

    When realization_factor is set it overrides all three per-category
    realization factors.
    """
    hours_saved: float = Field(0.0, ge=0, description="Annual hours saved")
    loaded_hourly_rate: float = Field(0.0, ge=0, description="Loaded hourly labor rate in USD")
    benefits_loading_factor: float = Field(1.35, ge=0, description="Benefits loading multiplier")
    adoption_rate: float = Field(0.90, ge=0, le=1, description="Expected adoption (0.00 to 1.00)")
    data_maturity_multiplier: float = Field(0.75, ge=0, le=1, description="Data maturity multiplier (0.00 to 1.00)")
    revenue_uplift_pct: float = Field(0.0, ge=0, description="Revenue uplift as a fraction")
    revenue_at_risk: float = Field(0.0, ge=0, description="Baseline revenue at risk in USD")
    risk_reduction_pct: float = Field(0.0, ge=0, le=1, description="Risk reduction as a fraction")
    risk_exposure: float = Field(0.0, ge=0, description="Annual risk exposure in USD")
    annual_revenue: float = Field(0.0, ge=0, description="Annual revenue in USD")
    days_improved: float = Field(0.0, ge=0, description="Days of working-capital cycle improvement")
    cost_of_capital: float = Field(0.08, ge=0, description="Annual cost of capital")
    realization_factor: Optional[float] = Field(
        default=None, ge=0, le=1,
        description="Single realization factor for revenue, risk and cash flow"
    )
    revenue_realization_factor: float = Field(0.95, ge=0, le=1)
    risk_realization_factor: float = Field(0.80, ge=0, le=1)
    cash_flow_realization_factor: float = Field(0.85, ge=0, le=1)
    probability_of_success: float = Field(1.0, ge=0, le=1, description="Probability of success (0.00 to 1.00)")


class BenefitResult(BaseModel):
    """Benefit category totals with total and expected value."""
    cost: float
    revenue: float
    risk: float
    cash_flow: float
    total_annual_value: float
    expected_value: float
    probability_of_success: float
    traces: Dict[str, FormulaTrace] = Field(default_factory=dict)


class ReadinessInputs(BaseModel):
    """Readiness dimensions (1-10) and runtime token profile of one use case."""
    data_availability: int = Field(..., ge=1, le=10)
    technical_infrastructure: int = Field(..., ge=1, le=10)
    organizational_capacity: int = Field(..., ge=1, le=10)
    governance: int = Field(..., ge=1, le=10)
    runs_per_month: float = Field(0.0, ge=0)
    input_tokens_per_run: float = Field(0.0, ge=0)
    output_tokens_per_run: float = Field(0.0, ge=0)
    time_to_value: float = Field(12.0, gt=0, description="Months until value is realized")


class ReadinessResult(BaseModel):
    readiness_score: float
    monthly_tokens: float
    annual_token_cost: float
    trace: Optional[FormulaTrace] = None


class PriorityInputs(BaseModel):
    """
    One use case's value and readiness, plus the full scenario set for normalization.

    Supplying friction_annual_cost and all_ratios selects ratio-based value
    scoring; otherwise the expected value is normalized against the set maximum.
    """
    expected_value: float
    all_expected_values: List[float] = Field(default_factory=list)
    readiness_score: float = Field(..., ge=1, le=10, description="Readiness score (1-10)")
    friction_annual_cost: Optional[float] = Field(default=None, ge=0)
    all_ratios: Optional[List[float]] = None
    time_to_value: float = Field(12.0, gt=0)


class PriorityResult(BaseModel):
    value_score: float
    readiness_score: float
    ttv_score: float
    priority_score: float
    priority_tier: str
    quadrant: str
    recommended_phase: str


class ProjectionInputs(BaseModel):
    annual_benefit: float
    years: int = Field(3, ge=1, le=50)
    discount_rate: float = Field(0.10, gt=-1)
    initial_investment: float = Field(0.0, ge=0)


class ProjectionResult(BaseModel):
    npv: float
    irr: float
    payback_months: int


class UseCaseBenefitBreakdown(BaseModel):
    """Per-use-case benefit categories fed to the guardrail validator."""
    cost_benefit: float = 0.0
    revenue_benefit: float = 0.0
    risk_benefit: float = 0.0
    cash_flow_benefit: float = 0.0
    hours_saved: Optional[float] = None


class GuardrailMetrics(BaseModel):
    total_benefits_vs_revenue: float
    revenue_ratio: float
    fte_ratio: float
    benefits_capped: bool
    scale_factor: float


class GuardrailReport(BaseModel):
    """Guardrail findings for a complete use-case set. Warnings are advisory."""
    warnings: List[str] = Field(default_factory=list)
    metrics: GuardrailMetrics
    oversized_use_cases: List[int] = Field(
        default_factory=list,
        description="Indexes of use cases above the per-use-case revenue cap"
    )
