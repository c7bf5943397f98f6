# dietapp/services/meal_catalogue.py
"""Ready-made meal packages shown on the recommendations page."""

from typing import Any, Dict, Iterable, List

from dietapp.engine.types import Disease, Goal

MAX_MEALS = 4

# Disease tags are lower_snake slugs; "none" marks meals suitable for everyone
DISEASE_TAGS = {
    Disease.DIABETES: "diabetes",
    Disease.HIPERTENSI: "hipertensi",
    Disease.KOLESTEROL: "kolesterol",
    Disease.ASAM_URAT: "asam_urat",
}

MEAL_PACKAGES: Dict[str, List[Dict[str, Any]]] = {
    "healthy": [
        {
            "id": "healthy1",
            "name": "Bowl Seimbang Harian",
            "description": "Nasi merah, ayam panggang dan sayuran segar",
            "calories": 450,
            "tags": ["none"],
        },
        {
            "id": "healthy2",
            "name": "Quinoa Bowl Alpukat",
            "description": "Quinoa dengan alpukat dan sayuran warna-warni",
            "calories": 380,
            "tags": ["none"],
        },
        {
            "id": "healthy3",
            "name": "Smoothie Protein Hijau",
            "description": "Smoothie protein dengan sayuran hijau",
            "calories": 300,
            "tags": ["none"],
        },
    ],
    "lowcal": [
        {
            "id": "lowcal1",
            "name": "Salad Protein Rendah Kalori",
            "description": "Sayuran segar dengan dada ayam dan quinoa",
            "calories": 200,
            "tags": ["diet", "diabetes", "hipertensi"],
        },
        {
            "id": "lowcal2",
            "name": "Sup Sayuran",
            "description": "Sup sayuran dengan protein tanpa lemak",
            "calories": 180,
            "tags": ["diet", "hipertensi"],
        },
        {
            "id": "lowcal3",
            "name": "Yogurt Greek Berry",
            "description": "Yogurt rendah lemak dengan buah berry",
            "calories": 150,
            "tags": ["diet", "diabetes"],
        },
    ],
    "protein_high": [
        {
            "id": "protein1",
            "name": "Nasi Putih dengan Daging dan Sayur",
            "description": "Menu tinggi kalori untuk menambah massa otot",
            "calories": 650,
            "tags": ["massa_otot"],
        },
        {
            "id": "protein2",
            "name": "Grilled Salmon dengan Brokoli",
            "description": "Salmon panggang disajikan dengan brokoli kukus",
            "calories": 520,
            "tags": ["massa_otot", "hipertensi"],
        },
        {
            "id": "protein3",
            "name": "Smoothie Protein Pisang",
            "description": "Smoothie protein tinggi dengan pisang",
            "calories": 400,
            "tags": ["massa_otot"],
        },
    ],
}

VISIBLE_PACKAGES = {
    Goal.HIDUP_SEHAT: ["healthy"],
    Goal.DIET: ["lowcal"],
    Goal.MASSA_OTOT: ["protein_high"],
}


def filter_meals_by_diseases(meals: List[Dict[str, Any]], diseases: Iterable[Disease]) -> List[Dict[str, Any]]:
    """
    Keep meals tagged "none", plus meals tagged with any of the given diseases.
    With no diseases only the "none" meals survive.
    """
    tags = {DISEASE_TAGS[Disease(d)] for d in diseases}
    if not tags:
        return [m for m in meals if "none" in m["tags"]]
    return [m for m in meals if "none" in m["tags"] or tags.intersection(m["tags"])]


def meals_for_user(goal: Goal, diseases: Iterable[Disease] = ()) -> List[Dict[str, Any]]:
    meals: List[Dict[str, Any]] = []
    for package in VISIBLE_PACKAGES.get(Goal(goal), []):
        meals.extend(dict(m, tags=list(m["tags"]), package=package) for m in MEAL_PACKAGES[package])
    return filter_meals_by_diseases(meals, diseases)[:MAX_MEALS]
