# dietapp/engine/scoring.py
"""Health score, summary paragraph and next-step list."""

from typing import Iterable, List

from dietapp.engine.metrics import round_half_up
from dietapp.engine.rules import canonical_diseases
from dietapp.engine.types import BmiCategory, Disease, Goal

BASE_SCORE = 100


def health_score(bmi: float, age: int, disease_count: int) -> int:
    score = BASE_SCORE

    if bmi < 18.5 or bmi > 30:
        score -= 20
    elif bmi < 20 or bmi > 25:
        score -= 10

    if age > 50:
        score -= 5

    score -= disease_count * 10

    return max(score, 0)


def compose_summary(bmi: float, bmi_category: BmiCategory, goal: Goal, diseases: Iterable[Disease]) -> str:
    summary = f"Berdasarkan analisis, BMI Anda adalah {round_half_up(bmi, 1):g} ({bmi_category.value}). "

    if goal == Goal.DIET and bmi_category in (BmiCategory.OVERWEIGHT, BmiCategory.OBESE):
        summary += "Program penurunan berat badan akan sangat bermanfaat untuk kesehatan Anda. "
    elif goal == Goal.MASSA_OTOT and bmi_category == BmiCategory.UNDERWEIGHT:
        summary += "Program penambahan massa otot akan membantu mencapai berat badan ideal. "

    ordered = canonical_diseases(diseases)
    if ordered:
        names = ", ".join(d.value for d in ordered)
        summary += f"Dengan kondisi kesehatan {names}, penting untuk mengikuti panduan diet khusus yang telah disesuaikan."
    else:
        summary += "Tidak ada kondisi kesehatan khusus yang perlu dipertimbangkan."

    return summary


def next_steps(goal: Goal, bmi_category: BmiCategory, diseases: Iterable[Disease]) -> List[str]:
    steps = [
        "Mulai dengan perubahan kecil dalam pola makan",
        "Tetapkan target yang realistis dan dapat dicapai",
        "Monitor progress secara berkala",
    ]

    if list(diseases):
        steps.append("Konsultasi dengan dokter atau ahli gizi")

    steps.append("Lakukan olahraga sesuai kemampuan secara bertahap")
    return steps
