# dietapp/engine/analyzer.py
import logging

from dietapp.engine import meal_plan, metrics, rules, scoring
from dietapp.engine.types import Analysis, AnalysisResult, AssessmentInput

logger = logging.getLogger(__name__)


def analyze(data: AssessmentInput) -> AnalysisResult:
    """
    Turn validated personal metrics into a full nutrition assessment.

    The input is assumed to be validated already (AssessmentInput enforces the
    ranges); nothing here re-checks it. The result is a pure function of the
    input: no clock, no randomness, no I/O.
    """
    diseases = rules.canonical_diseases(data.diseases)

    bmi = metrics.calculate_bmi(data.weight, data.height)
    bmi_category = metrics.classify_bmi(bmi)
    ideal = metrics.ideal_weight(data.height)
    bmr = metrics.calculate_bmr(data.age, data.weight, data.height)
    calories = metrics.daily_calories(bmr, data.goal, bmi_category)

    recommendations = rules.derive_recommendations(data.goal, bmi_category, diseases)
    restrictions = rules.derive_restrictions(diseases)

    plan = meal_plan.generate_meal_plan(data.goal, bmi_category, calories, diseases)

    score = scoring.health_score(bmi, data.age, len(diseases))
    summary = scoring.compose_summary(bmi, bmi_category, data.goal, diseases)
    steps = scoring.next_steps(data.goal, bmi_category, diseases)

    logger.debug(f"Analyzed assessment: bmi={bmi:.2f} category={bmi_category.value} calories={calories}")

    return AnalysisResult(
        analysis=Analysis(
            bmi=metrics.round_half_up(bmi, 1),
            bmi_category=bmi_category,
            ideal_weight=metrics.round_half_up(ideal, 1),
            weight_difference=metrics.round_half_up(data.weight - ideal, 1),
            daily_calories=calories,
        ),
        recommendations=recommendations,
        meal_plan=plan,
        restrictions=restrictions,
        summary=summary,
        health_score=score,
        next_steps=steps,
    )
