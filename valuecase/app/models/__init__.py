"""
Pydantic models for the value case calculation engine.
"""

from valuecase.app.models.calculation import CalculationResult, FormulaTrace
from valuecase.app.models.pipeline import BenefitQuantification, ReadinessModel

__all__ = ["CalculationResult", "FormulaTrace", "BenefitQuantification", "ReadinessModel"]
