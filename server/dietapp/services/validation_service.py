# dietapp/services/validation_service.py
"""
Business-rule validation for assessments.

Field ranges and enum membership are enforced by the pydantic models; this
module adds the plausibility checks that need several fields at once (BMI
bounds, goal vs BMI, disease combinations) and the advisory warnings shown
next to a result.
"""

import logging
from typing import List, NamedTuple

from dietapp.engine.metrics import calculate_bmi, round_half_up
from dietapp.engine.types import AssessmentInput, Disease, Goal
from dietapp.models.assessment import ValidationIssue

logger = logging.getLogger(__name__)

MIN_PLAUSIBLE_BMI = 15
MAX_PLAUSIBLE_BMI = 50

METABOLIC_DISEASES = (Disease.DIABETES, Disease.HIPERTENSI, Disease.KOLESTEROL)


class AssessmentValidationError(Exception):
    def __init__(self, errors: List[ValidationIssue]):
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))


class ValidationOutcome(NamedTuple):
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue]

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_business_rules(data: AssessmentInput) -> ValidationOutcome:
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    bmi = calculate_bmi(data.weight, data.height)

    if bmi < MIN_PLAUSIBLE_BMI:
        errors.append(ValidationIssue(
            field="bmi",
            message="BMI terlalu rendah, mohon periksa kembali data berat dan tinggi badan",
            value=round_half_up(bmi, 1),
        ))
    elif bmi > MAX_PLAUSIBLE_BMI:
        errors.append(ValidationIssue(
            field="bmi",
            message="BMI terlalu tinggi, mohon periksa kembali data berat dan tinggi badan",
            value=round_half_up(bmi, 1),
        ))
    elif bmi < 16 or bmi > 40:
        warnings.append(ValidationIssue(
            field="bmi",
            message="BMI berada di luar rentang normal, disarankan konsultasi dengan dokter",
        ))

    if data.age < 30 and Disease.DIABETES in data.diseases:
        warnings.append(ValidationIssue(
            field="age_disease",
            message="Diabetes di usia muda memerlukan perhatian khusus",
        ))

    if data.age > 60 and not data.diseases:
        warnings.append(ValidationIssue(
            field="age_health",
            message="Di usia ini, pemeriksaan kesehatan rutin sangat disarankan",
        ))

    if data.goal == Goal.DIET and bmi < 25:
        warnings.append(ValidationIssue(
            field="goal_bmi",
            message="BMI Anda normal, pastikan tujuan diet untuk kesehatan, bukan penurunan berat badan drastis",
        ))

    if data.goal == Goal.MASSA_OTOT and bmi > 30:
        warnings.append(ValidationIssue(
            field="goal_bmi",
            message="Dengan BMI tinggi, fokus pada penurunan lemak dulu sebelum menambah massa otot",
        ))

    metabolic = [d for d in data.diseases if d in METABOLIC_DISEASES]
    if len(metabolic) >= 2:
        warnings.append(ValidationIssue(
            field="diseases",
            message="Kombinasi penyakit metabolik memerlukan pengawasan medis ketat",
        ))

    return ValidationOutcome(errors=errors, warnings=warnings)


def extreme_value_warnings(data: AssessmentInput) -> List[ValidationIssue]:
    warnings: List[ValidationIssue] = []

    if data.age > 70:
        warnings.append(ValidationIssue(
            field="age",
            message="Untuk usia lanjut, konsultasi dengan dokter sangat disarankan",
        ))

    bmi = calculate_bmi(data.weight, data.height)
    if bmi < 18.5:
        warnings.append(ValidationIssue(
            field="bmi",
            message="BMI menunjukkan berat badan kurang, pertimbangkan program penambahan berat badan",
        ))
    elif bmi > 30:
        warnings.append(ValidationIssue(
            field="bmi",
            message="BMI menunjukkan obesitas, sangat disarankan konsultasi dengan ahli gizi",
        ))

    return warnings


def validate_assessment(data: AssessmentInput) -> List[ValidationIssue]:
    """Raise AssessmentValidationError on implausible input, otherwise return all warnings."""
    outcome = validate_business_rules(data)
    if not outcome.is_valid:
        logger.info(f"Assessment rejected by business rules: {[e.field for e in outcome.errors]}")
        raise AssessmentValidationError(outcome.errors)
    return outcome.warnings + extreme_value_warnings(data)


def issues_from_pydantic(errors) -> List[ValidationIssue]:
    """Flatten pydantic/FastAPI error dicts into field/message/value issues."""
    issues = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        value = None if err.get("type") == "missing" else err.get("input")
        if isinstance(value, (dict, list)):
            value = None
        issues.append(ValidationIssue(
            field=".".join(loc) or "general",
            message=err.get("msg", "Invalid value"),
            value=value,
        ))
    return issues
