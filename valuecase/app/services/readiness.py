"""
Readiness scoring and token cost estimation.

Readiness is a weighted composite of four maturity dimensions scored 1-10:

    Readiness = Org x 0.30 + Data x 0.30 + Tech x 0.20 + Gov x 0.20

Token estimates use separate per-token prices for input and output; output
tokens cost five times as much as input tokens.
"""

from types import MappingProxyType
from typing import Mapping

from valuecase.app.models.calculation import (
    CalculationResult,
    FormulaTrace,
    ReadinessInputs,
    ReadinessResult,
)


READINESS_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "organizational": 0.30,
    "data": 0.30,
    "technical": 0.20,
    "governance": 0.20,
})

READINESS_FORMULA = "Org×0.30 + Data×0.30 + Tech×0.20 + Gov×0.20"

# USD per token: $3 per 1M input tokens, $15 per 1M output tokens
INPUT_PRICE_PER_TOKEN = 3 / 1_000_000
OUTPUT_PRICE_PER_TOKEN = 15 / 1_000_000

MONTHS_PER_YEAR = 12


def calculate_readiness_score(
    data: float,
    technical: float,
    organizational: float,
    governance: float,
) -> float:
    return (
        organizational * READINESS_WEIGHTS["organizational"]
        + data * READINESS_WEIGHTS["data"]
        + technical * READINESS_WEIGHTS["technical"]
        + governance * READINESS_WEIGHTS["governance"]
    )


def calculate_readiness_score_with_trace(
    data: float,
    technical: float,
    organizational: float,
    governance: float,
) -> CalculationResult:
    value = calculate_readiness_score(data, technical, organizational, governance)
    return CalculationResult(
        value=value,
        trace=FormulaTrace(
            formula=READINESS_FORMULA,
            inputs={
                "organizational": organizational,
                "data": data,
                "technical": technical,
                "governance": governance,
            },
            intermediates={
                "org_weighted": organizational * READINESS_WEIGHTS["organizational"],
                "data_weighted": data * READINESS_WEIGHTS["data"],
                "tech_weighted": technical * READINESS_WEIGHTS["technical"],
                "gov_weighted": governance * READINESS_WEIGHTS["governance"],
            },
            output=value,
        ),
    )


def calculate_monthly_tokens(
    runs_per_month: float,
    input_tokens_per_run: float,
    output_tokens_per_run: float,
) -> float:
    return runs_per_month * (input_tokens_per_run + output_tokens_per_run)


def calculate_annual_token_cost(
    runs_per_month: float,
    input_tokens_per_run: float,
    output_tokens_per_run: float,
) -> float:
    """Annual model spend in USD for a use case's runtime profile."""
    monthly_input_cost = runs_per_month * input_tokens_per_run * INPUT_PRICE_PER_TOKEN
    monthly_output_cost = runs_per_month * output_tokens_per_run * OUTPUT_PRICE_PER_TOKEN
    return (monthly_input_cost + monthly_output_cost) * MONTHS_PER_YEAR


def estimate_readiness(inputs: ReadinessInputs) -> ReadinessResult:
    """Readiness score, monthly token volume and annual token cost for one use case."""
    score = calculate_readiness_score_with_trace(
        inputs.data_availability,
        inputs.technical_infrastructure,
        inputs.organizational_capacity,
        inputs.governance,
    )
    return ReadinessResult(
        readiness_score=score.value,
        monthly_tokens=calculate_monthly_tokens(
            inputs.runs_per_month, inputs.input_tokens_per_run, inputs.output_tokens_per_run
        ),
        annual_token_cost=calculate_annual_token_cost(
            inputs.runs_per_month, inputs.input_tokens_per_run, inputs.output_tokens_per_run
        ),
        trace=score.trace,
    )
