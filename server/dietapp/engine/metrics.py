# dietapp/engine/metrics.py
"""
Body metric calculations: BMI, BMI category, ideal weight, BMR and the
daily calorie target.
"""

import math

from dietapp.engine.types import BmiCategory, Goal, Sex

# Sex is not collected by the assessment form, so BMR always uses the male
# Harris-Benedict coefficients. Known product gap.
DEFAULT_SEX = Sex.MALE

ACTIVITY_MULTIPLIER = 1.4  # sedentary to light activity

UNDERWEIGHT_MAX = 18.5
NORMAL_MAX = 25.0
OVERWEIGHT_MAX = 30.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from -inf, the way JavaScript's Math.round does."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """
    BMI = weight / height(m)^2, unrounded.

    Precondition: height_cm > 0 (the input validator enforces height >= 100).
    """
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def classify_bmi(bmi: float) -> BmiCategory:
    # Boundary values belong to the higher category
    if bmi < UNDERWEIGHT_MAX:
        return BmiCategory.UNDERWEIGHT
    if bmi < NORMAL_MAX:
        return BmiCategory.NORMAL
    if bmi < OVERWEIGHT_MAX:
        return BmiCategory.OVERWEIGHT
    return BmiCategory.OBESE


def ideal_weight(height_cm: float) -> float:
    """Broca formula."""
    return (height_cm - 100) * 0.9


def calculate_bmr(age: int, weight_kg: float, height_cm: float, sex: Sex = DEFAULT_SEX) -> float:
    """Harris-Benedict basal metabolic rate in kcal/day."""
    if sex == Sex.MALE:
        return 88.362 + (13.397 * weight_kg) + (4.799 * height_cm) - (5.677 * age)
    return 447.593 + (9.247 * weight_kg) + (3.098 * height_cm) - (4.330 * age)


def goal_adjustment(goal: Goal, bmi_category: BmiCategory) -> int:
    if goal == Goal.DIET:
        return -500 if bmi_category == BmiCategory.OBESE else -300
    if goal == Goal.MASSA_OTOT:
        return 500 if bmi_category == BmiCategory.UNDERWEIGHT else 300
    return 0


def daily_calories(bmr: float, goal: Goal, bmi_category: BmiCategory) -> int:
    return int(round_half_up(bmr * ACTIVITY_MULTIPLIER + goal_adjustment(goal, bmi_category)))
