from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field, field_serializer, field_validator

from dietapp.engine.types import AssessmentInput


class AssessmentRequest(AssessmentInput):
    """Body of POST /api/v1/assessment: engine input plus caller metadata."""

    name: Optional[str] = Field(default=None, max_length=100)
    userId: Optional[str] = Field(default=None, max_length=128)

    @field_validator("name", "userId", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    def to_input(self) -> AssessmentInput:
        return AssessmentInput(
            age=self.age,
            weight=self.weight,
            height=self.height,
            goal=self.goal,
            diseases=self.diseases,
        )


class ValidationIssue(BaseModel):
    field: str
    message: str
    value: Optional[Any] = None


class AssessmentSummaryItem(BaseModel):
    id: str
    createdAt: datetime
    bmi: Optional[float] = None
    bmiCategory: Optional[str] = None
    goal: str
    healthScore: Optional[int] = None

    # Same isoformat the rest of the API emits for stored dates
    @field_serializer("createdAt", when_used="json")
    def _iso_created_at(self, v: datetime) -> str:
        return v.isoformat()


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalCount: int
    hasNextPage: bool
    hasPrevPage: bool
    limit: int


class AssessmentHistory(BaseModel):
    userId: str
    assessments: List[AssessmentSummaryItem] = Field(default_factory=list)
    pagination: Pagination
    statistics: Dict[str, Any] = Field(default_factory=dict)

    @field_serializer("statistics", when_used="json")
    def _encode_statistics(self, v: Dict[str, Any]) -> Dict[str, Any]:
        return jsonable_encoder(v)


class HistoryResponse(BaseModel):
    success: bool = True
    message: str
    data: AssessmentHistory
