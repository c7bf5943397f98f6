# dietapp/engine/meal_plan.py
from types import MappingProxyType
from typing import Iterable, List, Sequence

from dietapp.engine.metrics import round_half_up
from dietapp.engine.types import BmiCategory, Disease, Goal, Meal, MealPlan, MealTime

# Slot order is fixed; each slot is rounded on its own so the sum may drift
# from the daily total by a calorie or two.
MEAL_DISTRIBUTION = (
    (MealTime.BREAKFAST, 0.25),
    (MealTime.LUNCH, 0.35),
    (MealTime.DINNER, 0.30),
    (MealTime.SNACK, 0.10),
)

MEAL_OPTIONS = MappingProxyType({
    MealTime.BREAKFAST: (
        "Oatmeal dengan buah dan kacang",
        "Telur rebus dengan roti gandum",
        "Smoothie protein dengan sayuran hijau",
        "Yogurt Greek dengan berry",
    ),
    MealTime.LUNCH: (
        "Nasi merah dengan ayam panggang dan sayuran",
        "Salad protein dengan quinoa",
        "Sup sayuran dengan protein tanpa lemak",
        "Ikan bakar dengan kentang rebus",
    ),
    MealTime.DINNER: (
        "Salmon dengan brokoli kukus",
        "Tahu/tempe dengan sayur hijau",
        "Ayam tanpa kulit dengan sayuran panggang",
        "Ikan dengan salad",
    ),
    MealTime.SNACK: (
        "Buah segar",
        "Kacang almond",
        "Yogurt rendah lemak",
        "Smoothie sayuran",
    ),
})

MEAL_GUIDELINES = MappingProxyType({
    MealTime.BREAKFAST: ("Jangan skip sarapan", "Sertakan protein dan serat"),
    MealTime.LUNCH: ("Porsi terbesar dalam sehari", "Seimbangkan karbohidrat dan protein"),
    MealTime.DINNER: ("Makan 3 jam sebelum tidur", "Porsi lebih ringan dari makan siang"),
    MealTime.SNACK: ("Pilih snack sehat", "Hindari makanan olahan"),
})

HIGH_SUGAR_MARKERS = ("buah manis",)


def filter_high_sugar(items: Sequence[str]) -> List[str]:
    """Drop suggestions that carry a high-sugar marker."""
    return [item for item in items if not any(m in item.lower() for m in HIGH_SUGAR_MARKERS)]


def meal_suggestions(meal_time: MealTime, diseases: Iterable[Disease]) -> List[str]:
    options = list(MEAL_OPTIONS[meal_time])
    if Disease.DIABETES in set(diseases):
        options = filter_high_sugar(options)
    return options


def generate_meal_plan(
    goal: Goal,
    bmi_category: BmiCategory,
    daily_calories: int,
    diseases: Iterable[Disease],
) -> MealPlan:
    # goal and bmi_category are accepted for parity with the rule engine;
    # the current slot tables do not vary by them.
    diseases = list(diseases)
    meals = [
        Meal(
            time=meal_time,
            target_calories=int(round_half_up(daily_calories * share)),
            suggestions=meal_suggestions(meal_time, diseases),
            guidelines=list(MEAL_GUIDELINES[meal_time]),
        )
        for meal_time, share in MEAL_DISTRIBUTION
    ]
    return MealPlan(total_calories=daily_calories, meals=meals)
