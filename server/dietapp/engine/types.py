# dietapp/engine/types.py
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _normalize_key(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch.isalnum())


class _LookupEnum(str, Enum):
    """String enum that also accepts loosely spelled values ("asam_urat", "AsamUrat")."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = _normalize_key(value)
            for member in cls:
                if _normalize_key(member.value) == key or _normalize_key(member.name) == key:
                    return member
        return None


class Goal(_LookupEnum):
    HIDUP_SEHAT = "Hidup Sehat"
    DIET = "Diet"
    MASSA_OTOT = "Massa Otot"


class Disease(_LookupEnum):
    # Member order is the canonical iteration order for rules and restrictions
    DIABETES = "Diabetes"
    HIPERTENSI = "Hipertensi"
    KOLESTEROL = "Kolesterol"
    ASAM_URAT = "Asam Urat"


class BmiCategory(str, Enum):
    UNDERWEIGHT = "Underweight"
    NORMAL = "Normal"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"


class MealTime(str, Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"


class RestrictionType(str, Enum):
    AVOID = "Avoid"
    LIMIT = "Limit"
    RECOMMENDED = "Recommended"


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"


AGE_RANGE = (10, 100)
WEIGHT_RANGE = (30.0, 300.0)
HEIGHT_RANGE = (100.0, 250.0)


class AssessmentInput(BaseModel):
    """Validated personal metrics fed to the analysis engine."""

    model_config = ConfigDict(frozen=True)

    age: int = Field(ge=AGE_RANGE[0], le=AGE_RANGE[1])
    weight: float = Field(ge=WEIGHT_RANGE[0], le=WEIGHT_RANGE[1])  # kg
    height: float = Field(ge=HEIGHT_RANGE[0], le=HEIGHT_RANGE[1])  # cm
    goal: Goal
    diseases: List[Disease] = Field(default_factory=list)

    @field_validator("goal", mode="before")
    @classmethod
    def _coerce_goal(cls, v):
        return Goal(v) if isinstance(v, str) else v

    @field_validator("diseases", mode="before")
    @classmethod
    def _coerce_diseases(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple, set)):
            return [Disease(item) if isinstance(item, str) else item for item in v]
        return v

    @field_validator("diseases")
    @classmethod
    def _drop_duplicates(cls, v: List[Disease]) -> List[Disease]:
        seen = []
        for disease in v:
            if disease not in seen:
                seen.append(disease)
        return seen


# ---------- analysis output ----------

class _ResultModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Analysis(_ResultModel):
    bmi: float
    bmi_category: BmiCategory
    ideal_weight: float
    weight_difference: float
    daily_calories: int


class Recommendations(_ResultModel):
    primary: List[str] = Field(default_factory=list)
    dietary: List[str] = Field(default_factory=list)
    lifestyle: List[str] = Field(default_factory=list)


class Meal(_ResultModel):
    time: MealTime
    target_calories: int
    suggestions: List[str] = Field(default_factory=list)
    guidelines: List[str] = Field(default_factory=list)


class MealPlan(_ResultModel):
    total_calories: int
    meals: List[Meal] = Field(default_factory=list)


class Restriction(_ResultModel):
    type: RestrictionType
    items: List[str]
    reason: str


class AnalysisResult(_ResultModel):
    analysis: Analysis
    recommendations: Recommendations
    meal_plan: MealPlan
    restrictions: List[Restriction] = Field(default_factory=list)
    summary: str
    health_score: int = Field(ge=0, le=100)
    next_steps: List[str] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-ready dict using the public camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)
