# dietapp/engine/rules.py
"""
Rule tables for goal, BMI and disease driven recommendations.

Rules are applied additively: the goal template first, then the BMI addendum,
then every disease in canonical order. Overlapping statements are kept as-is.
"""

from types import MappingProxyType
from typing import Iterable, List, NamedTuple, Tuple

from dietapp.engine.types import (
    BmiCategory,
    Disease,
    Goal,
    Recommendations,
    Restriction,
    RestrictionType,
)


class RuleSet(NamedTuple):
    primary: Tuple[str, ...] = ()
    dietary: Tuple[str, ...] = ()
    lifestyle: Tuple[str, ...] = ()


class RestrictionRule(NamedTuple):
    type: RestrictionType
    items: Tuple[str, ...]
    reason: str


GOAL_TEMPLATES = MappingProxyType({
    Goal.DIET: RuleSet(
        primary=("Fokus pada defisit kalori yang sehat",),
        dietary=(
            "Konsumsi protein tinggi untuk menjaga massa otot",
            "Pilih karbohidrat kompleks dengan indeks glikemik rendah",
        ),
        lifestyle=("Olahraga kardio 3-4x seminggu",),
    ),
    Goal.MASSA_OTOT: RuleSet(
        primary=("Tingkatkan asupan protein dan kalori",),
        dietary=(
            "Konsumsi 1.6-2.2g protein per kg berat badan",
            "Makan 5-6 kali sehari dengan porsi lebih sering",
        ),
        lifestyle=("Latihan beban 3-4x seminggu",),
    ),
    Goal.HIDUP_SEHAT: RuleSet(
        primary=("Jaga pola makan seimbang dan teratur",),
        dietary=(
            "Konsumsi 5 porsi buah dan sayur setiap hari",
            # Added line: every goal carries at least two dietary items
            "Batasi gula, garam, dan lemak berlebih",
        ),
        lifestyle=("Olahraga rutin minimal 150 menit per minggu",),
    ),
})

WEIGHT_GAIN_RULES = RuleSet(
    primary=("Tingkatkan berat badan secara bertahap",),
    dietary=("Makan lebih sering dengan porsi yang cukup",),
)

WEIGHT_LOSS_RULES = RuleSet(
    primary=("Turunkan berat badan secara bertahap",),
    dietary=("Kurangi kalori dari makanan olahan",),
)

BMI_RULES = MappingProxyType({
    BmiCategory.UNDERWEIGHT: WEIGHT_GAIN_RULES,
    BmiCategory.NORMAL: RuleSet(),
    BmiCategory.OVERWEIGHT: WEIGHT_LOSS_RULES,
    BmiCategory.OBESE: WEIGHT_LOSS_RULES,
})

DISEASE_RULES = MappingProxyType({
    Disease.DIABETES: RuleSet(
        dietary=(
            "Batasi gula dan karbohidrat sederhana",
            "Pilih makanan dengan indeks glikemik rendah",
        ),
        lifestyle=("Monitor gula darah secara teratur",),
    ),
    Disease.HIPERTENSI: RuleSet(
        dietary=(
            "Kurangi asupan garam (< 2300mg/hari)",
            "Tingkatkan konsumsi kalium dari buah dan sayur",
        ),
        lifestyle=("Kelola stress dengan baik",),
    ),
    Disease.KOLESTEROL: RuleSet(
        dietary=(
            "Batasi lemak jenuh dan trans",
            "Tingkatkan serat larut dari oats dan kacang-kacangan",
        ),
        lifestyle=("Olahraga aerobik secara teratur",),
    ),
    Disease.ASAM_URAT: RuleSet(
        dietary=(
            "Hindari makanan tinggi purin (jeroan, seafood)",
            "Minum air putih minimal 8 gelas per hari",
        ),
        lifestyle=("Batasi konsumsi alkohol",),
    ),
})

RESTRICTION_RULES = MappingProxyType({
    Disease.DIABETES: RestrictionRule(
        type=RestrictionType.AVOID,
        items=("Gula tambahan", "Makanan olahan tinggi gula", "Minuman manis"),
        reason="Dapat meningkatkan gula darah secara drastis",
    ),
    Disease.HIPERTENSI: RestrictionRule(
        type=RestrictionType.LIMIT,
        items=("Garam berlebih", "Makanan asin", "Fast food"),
        reason="Dapat meningkatkan tekanan darah",
    ),
    Disease.KOLESTEROL: RestrictionRule(
        type=RestrictionType.AVOID,
        items=("Lemak jenuh", "Makanan gorengan", "Jeroan"),
        reason="Dapat meningkatkan kolesterol LDL",
    ),
    Disease.ASAM_URAT: RestrictionRule(
        type=RestrictionType.AVOID,
        items=("Jeroan", "Seafood tinggi purin", "Alkohol"),
        reason="Dapat memicu serangan asam urat",
    ),
})


def canonical_diseases(diseases: Iterable[Disease]) -> List[Disease]:
    """Diseases de-duplicated and ordered by the Disease enum, not by input order."""
    present = {Disease(d) for d in diseases}
    return [d for d in Disease if d in present]


def derive_recommendations(goal: Goal, bmi_category: BmiCategory, diseases: Iterable[Disease]) -> Recommendations:
    primary: List[str] = []
    dietary: List[str] = []
    lifestyle: List[str] = []

    rule_sets = [GOAL_TEMPLATES[goal], BMI_RULES[bmi_category]]
    rule_sets.extend(DISEASE_RULES[d] for d in canonical_diseases(diseases))

    for rules in rule_sets:
        primary.extend(rules.primary)
        dietary.extend(rules.dietary)
        lifestyle.extend(rules.lifestyle)

    return Recommendations(primary=primary, dietary=dietary, lifestyle=lifestyle)


def derive_restrictions(diseases: Iterable[Disease]) -> List[Restriction]:
    restrictions = []
    for disease in canonical_diseases(diseases):
        rule = RESTRICTION_RULES[disease]
        restrictions.append(Restriction(type=rule.type, items=list(rule.items), reason=rule.reason))
    return restrictions
