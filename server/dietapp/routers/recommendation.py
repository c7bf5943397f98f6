# dietapp/routers/recommendation.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from dietapp.engine.types import Disease, Goal
from dietapp.routers.assessment import get_history_service
from dietapp.services.assessment_history_service import AssessmentHistoryService
from dietapp.services.meal_catalogue import meals_for_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/recommendation", tags=["Recommendation"])


@router.get("/meals")
def get_meal_recommendations(
    goal: str = Query(..., description="Hidup Sehat, Diet or Massa Otot"),
    diseases: List[str] = Query(default=[]),
):
    """Meal packages matching a goal, filtered by disease tags"""
    try:
        goal_value = Goal(goal)
        disease_values = [Disease(d) for d in diseases]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    meals = meals_for_user(goal_value, disease_values)
    return {
        "success": True,
        "message": "Meal recommendations retrieved successfully",
        "data": {
            "goal": goal_value.value,
            "diseases": [d.value for d in disease_values],
            "meals": meals,
            "totalItems": len(meals),
        },
    }


@router.get("/user/{user_id}")
def get_user_recommendations(
    user_id: str,
    service: AssessmentHistoryService = Depends(get_history_service),
):
    """Meal plan, recommendations and restrictions from the user's latest assessment"""
    assessment = service.get_latest(user_id)
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found for this user")

    results = assessment.get("results") or {}
    return {
        "success": True,
        "message": "User recommendations retrieved successfully",
        "data": {
            "assessmentId": assessment["id"],
            "createdAt": assessment["createdAt"],
            "mealPlan": results.get("mealPlan"),
            "recommendations": results.get("recommendations"),
            "restrictions": results.get("restrictions", []),
        },
    }
