"""
Diet analysis engine
Pure, deterministic derivation of a nutrition assessment from personal metrics
"""

from .analyzer import analyze
from .types import (
    AnalysisResult,
    AssessmentInput,
    BmiCategory,
    Disease,
    Goal,
    MealTime,
    RestrictionType,
)

__all__ = [
    "analyze",
    "AnalysisResult",
    "AssessmentInput",
    "BmiCategory",
    "Disease",
    "Goal",
    "MealTime",
    "RestrictionType",
]
