# dietapp/routers/assessment.py
import logging
import uuid
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from dietapp.database.connection import ASSESSMENTS_COLLECTION, db
from dietapp.engine import analyze
from dietapp.engine.types import AGE_RANGE, HEIGHT_RANGE, WEIGHT_RANGE, Disease, Goal
from dietapp.models.assessment import AssessmentRequest, HistoryResponse
from dietapp.services.assessment_history_service import AssessmentHistoryService
from dietapp.services.validation_service import (
    AssessmentValidationError,
    issues_from_pydantic,
    validate_assessment,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/assessment", tags=["Assessment"])

GOAL_LABELS = {
    Goal.HIDUP_SEHAT: "Hidup Sehat",
    Goal.DIET: "Menurunkan Berat Badan",
    Goal.MASSA_OTOT: "Menambah Massa Otot",
}

DISEASE_LABELS = {
    Disease.DIABETES: "Diabetes",
    Disease.HIPERTENSI: "Hipertensi",
    Disease.KOLESTEROL: "Kolesterol Tinggi",
    Disease.ASAM_URAT: "Asam Urat",
}


def get_history_service() -> AssessmentHistoryService:
    if db is None:
        raise HTTPException(status_code=500, detail="Database connection not available")
    return AssessmentHistoryService(db[ASSESSMENTS_COLLECTION])


def _ensure_indexes():
    if db is None:
        return
    try:
        AssessmentHistoryService.ensure_indexes(db[ASSESSMENTS_COLLECTION])
    except PyMongoError as e:
        logger.warning(f"Could not ensure assessment indexes: {e}")


def _new_user_id() -> str:
    return f"user_{uuid.uuid4().hex[:12]}"


@router.get("/form")
def get_assessment_form():
    """Structure of the multi-step assessment form"""
    fields = [
        {"name": "name", "type": "text", "label": "Nama Lengkap", "required": False,
         "placeholder": "Masukkan nama lengkap Anda"},
        {"name": "age", "type": "number", "label": "Umur", "required": True,
         "min": AGE_RANGE[0], "max": AGE_RANGE[1], "placeholder": "Masukkan umur Anda"},
        {"name": "weight", "type": "number", "label": "Berat Badan (kg)", "required": True,
         "min": WEIGHT_RANGE[0], "max": WEIGHT_RANGE[1], "placeholder": "Masukkan berat badan"},
        {"name": "height", "type": "number", "label": "Tinggi Badan (cm)", "required": True,
         "min": HEIGHT_RANGE[0], "max": HEIGHT_RANGE[1], "placeholder": "Masukkan tinggi badan"},
        {"name": "goal", "type": "select", "label": "Tujuan Diet", "required": True,
         "options": [{"value": g.value, "label": GOAL_LABELS[g]} for g in Goal]},
        {"name": "diseases", "type": "checkbox", "label": "Riwayat Penyakit", "required": False,
         "options": [{"value": d.value, "label": DISEASE_LABELS[d]} for d in Disease]},
    ]
    return {
        "success": True,
        "message": "Assessment form structure retrieved",
        "data": {"fields": fields},
    }


@router.post("/validate")
def validate_assessment_data(payload: Dict[str, Any] = Body(...)):
    """Dry-run validation: reports errors and warnings without storing anything"""
    try:
        request = AssessmentRequest.model_validate(payload)
    except ValidationError as e:
        return {
            "success": False,
            "message": "Validation failed",
            "errors": [i.model_dump() for i in issues_from_pydantic(e.errors())],
            "warnings": [],
        }

    try:
        warnings = validate_assessment(request.to_input())
    except AssessmentValidationError as e:
        return {
            "success": False,
            "message": "Validation failed",
            "errors": [i.model_dump() for i in e.errors],
            "warnings": [],
        }

    return {
        "success": True,
        "message": "Validation passed",
        "errors": [],
        "warnings": [w.model_dump() for w in warnings],
        "validatedData": request.model_dump(mode="json", exclude={"userId"}),
    }


@router.post("", status_code=201)
def submit_assessment(
    payload: AssessmentRequest,
    service: AssessmentHistoryService = Depends(get_history_service),
):
    data = payload.to_input()
    warnings = validate_assessment(data)
    result = analyze(data)

    user_id = payload.userId or _new_user_id()
    try:
        saved = service.save_assessment(user_id, data, result, name=payload.name, warnings=warnings)
    except PyMongoError as e:
        logger.error(f"Failed to save assessment for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save assessment")

    return {
        "success": True,
        "message": "Assessment submitted successfully",
        "data": {
            "assessmentId": saved["id"],
            "userId": user_id,
            "results": saved["results"],
            "warnings": saved["warnings"],
            "createdAt": saved["createdAt"],
        },
    }


@router.get("/history/{user_id}", response_model=HistoryResponse)
def get_assessment_history(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: AssessmentHistoryService = Depends(get_history_service),
):
    try:
        history = service.get_user_history(user_id, page=page, limit=limit)
    except PyMongoError as e:
        logger.error(f"Error fetching assessment history for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get assessment history")

    logger.info(f"Found {history['pagination']['totalCount']} assessments for user: {user_id}")
    return {
        "success": True,
        "message": "Assessment history retrieved successfully",
        "data": history,
    }


@router.delete("/history/{user_id}")
def delete_assessment_history(
    user_id: str,
    keep_latest: bool = Query(True, alias="keepLatest"),
    service: AssessmentHistoryService = Depends(get_history_service),
):
    try:
        result = service.delete_user_history(user_id, keep_latest=keep_latest)
    except PyMongoError as e:
        logger.error(f"Error deleting assessment history for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete assessment history")
    return {
        "success": True,
        "message": "Assessment history deleted successfully",
        "data": result,
    }


@router.get("/history/{user_id}/compare/{first_id}/{second_id}")
def compare_assessments(
    user_id: str,
    first_id: str,
    second_id: str,
    service: AssessmentHistoryService = Depends(get_history_service),
):
    comparison = service.compare_assessments(user_id, first_id, second_id)
    if not comparison:
        raise HTTPException(status_code=404, detail="One or both assessments not found")
    return {
        "success": True,
        "message": "Assessments compared successfully",
        "data": comparison,
    }


@router.get("/history/{user_id}/export")
def export_assessment_history(
    user_id: str,
    export_format: str = Query("json", alias="format", pattern="^(json|csv)$"),
    service: AssessmentHistoryService = Depends(get_history_service),
):
    """All of a user's assessments, oldest first, as JSON or a CSV download"""
    if export_format == "csv":
        csv_bytes = service.export_user_csv(user_id).encode("utf-8")
        return Response(
            content=csv_bytes,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=assessments_{user_id}.csv"},
        )
    return {
        "success": True,
        "message": "Assessment data exported successfully",
        "data": service.export_user_data(user_id),
    }


@router.get("/{assessment_id}")
def get_assessment_by_id(
    assessment_id: str,
    service: AssessmentHistoryService = Depends(get_history_service),
):
    assessment = service.get_assessment(assessment_id)
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return {
        "success": True,
        "message": "Assessment retrieved successfully",
        "data": assessment,
    }


@router.delete("/{assessment_id}")
def delete_assessment(
    assessment_id: str,
    service: AssessmentHistoryService = Depends(get_history_service),
):
    if not service.delete_assessment(assessment_id):
        raise HTTPException(status_code=404, detail="Assessment not found")
    return {
        "success": True,
        "message": "Assessment deleted successfully",
        "data": {"assessmentId": assessment_id},
    }
