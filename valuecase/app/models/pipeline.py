"""
Scenario records recomputed by the recalculation pipeline.

These mirror what the surrounding application stores for a scenario (use
cases, friction points, benefit quantifications, readiness models) and what
the engine derives from them. Formula components are held in typed
containers; a missing component is an absent entry rather than a None value.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from valuecase.app.models.calculation import FormulaTrace, GuardrailReport


class FormulaComponent(BaseModel):
    """One labelled operand of a benefit formula (e.g. "Hours Saved")."""
    label: str
    value: float = 0.0


class FormulaLabels(BaseModel):
    components: List[FormulaComponent] = Field(default_factory=list)

    def find(self, label: str) -> Optional[float]:
        """Value of the first component with this label, or None when absent."""
        for component in self.components:
            if component.label == label:
                return component.value
        return None


class FrictionPoint(BaseModel):
    """A documented operational inefficiency with an annual labor cost."""
    id: str
    friction_point: str = Field("", description="Short description of the friction")
    role: str = ""
    function: str = ""
    sub_function: str = ""
    severity: str = ""
    annual_hours: float = Field(0.0, ge=0)
    loaded_hourly_rate: float = Field(0.0, ge=0)
    estimated_annual_cost: str = Field("", description="Formatted annual cost, e.g. '$1.2M'")
    strategic_theme: str = ""


class UseCase(BaseModel):
    """A proposed AI intervention targeting a friction point."""
    id: str
    name: str = ""
    description: str = ""
    function: str = ""
    sub_function: str = ""
    target_friction: str = Field("", description="friction_point text of the targeted friction")
    strategic_theme: str = ""


class BenefitQuantification(BaseModel):
    """Benefit figures for one use case, recomputed from its formula components."""
    id: str = ""
    use_case_id: str
    use_case_name: str = ""
    strategic_theme: str = ""
    cost_formula_labels: FormulaLabels = Field(default_factory=FormulaLabels)
    revenue_formula_labels: FormulaLabels = Field(default_factory=FormulaLabels)
    risk_formula_labels: FormulaLabels = Field(default_factory=FormulaLabels)
    cash_flow_formula_labels: FormulaLabels = Field(default_factory=FormulaLabels)
    probability_of_success: float = Field(0.75, ge=0, le=1)

    # Derived
    cost_benefit: float = 0.0
    revenue_benefit: float = 0.0
    risk_benefit: float = 0.0
    cash_flow_benefit: float = 0.0
    total_annual_value: float = 0.0
    expected_value: float = 0.0
    display: Dict[str, str] = Field(default_factory=dict, description="Formatted currency strings")
    traces: Dict[str, FormulaTrace] = Field(default_factory=dict)


class ReadinessModel(BaseModel):
    """Readiness dimensions and runtime token profile for one use case."""
    id: str = ""
    use_case_id: str
    use_case_name: str = ""
    strategic_theme: str = ""
    data_availability: int = Field(5, ge=1, le=10)
    technical_infrastructure: int = Field(5, ge=1, le=10)
    organizational_capacity: int = Field(5, ge=1, le=10)
    governance: int = Field(5, ge=1, le=10)
    time_to_value: float = Field(12.0, gt=0)
    runs_per_month: float = Field(0.0, ge=0)
    input_tokens_per_run: float = Field(0.0, ge=0)
    output_tokens_per_run: float = Field(0.0, ge=0)

    # Derived
    readiness_score: float = 0.0
    monthly_tokens: float = 0.0
    annual_token_cost: float = 0.0
    annual_token_cost_display: str = ""


class PriorityScore(BaseModel):
    id: str
    use_case_id: str
    use_case_name: str = ""
    strategic_theme: str = ""
    value_score: float
    readiness_score: float
    ttv_score: float
    priority_score: float
    priority_tier: str
    quadrant: str
    recommended_phase: str


class ScenarioProjection(BaseModel):
    npv: float
    annual_benefit: float
    payback_months: int
    npv_display: str
    annual_benefit_display: str


class ScenarioAnalysis(BaseModel):
    conservative: ScenarioProjection
    moderate: ScenarioProjection
    aggressive: ScenarioProjection


class MultiYearProjection(BaseModel):
    irr: float
    npv: float
    payback_months: int
    total_benefit_over_period: float
    irr_display: str
    npv_display: str
    total_benefit_over_period_display: str


class DashboardUseCase(BaseModel):
    rank: int
    use_case: str
    use_case_id: str
    annual_value: float
    monthly_tokens: float
    priority_score: float


class ExecutiveDashboard(BaseModel):
    top_use_cases: List[DashboardUseCase]
    total_annual_value: float
    total_cost_benefit: float
    total_revenue_benefit: float
    total_risk_benefit: float
    total_cash_flow_benefit: float
    total_monthly_tokens: float
    value_per_million_tokens: int


class RecalculationRequest(BaseModel):
    """Complete snapshot of one scenario's inputs."""
    scenario: str = Field("base", description="base | conservative | optimistic | custom")
    benefits: List[BenefitQuantification] = Field(default_factory=list)
    readiness: List[ReadinessModel] = Field(default_factory=list)
    friction_points: Optional[List[FrictionPoint]] = None
    use_cases: Optional[List[UseCase]] = None
    annual_revenue: float = Field(0.0, ge=0, description="Company annual revenue (0 skips revenue guardrails)")
    total_employees: int = Field(0, ge=0, description="Company headcount (0 skips the FTE guardrail)")


class RecalculationResult(BaseModel):
    benefits: List[BenefitQuantification]
    readiness: List[ReadinessModel]
    priorities: List[PriorityScore]
    scenario_analysis: ScenarioAnalysis
    multi_year: MultiYearProjection
    executive_dashboard: ExecutiveDashboard
    guardrails: GuardrailReport
