# dietapp/services/assessment_history_service.py
"""
Assessment History Service
Stores analysed assessments in MongoDB and builds per-user history views
"""

import csv
import io
import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING

from dietapp.engine.metrics import round_half_up
from dietapp.engine.types import AnalysisResult, AssessmentInput
from dietapp.models.assessment import ValidationIssue

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24

CSV_HEADERS = [
    "Date",
    "Age",
    "Weight",
    "Height",
    "Goal",
    "Diseases",
    "BMI",
    "BMI Category",
    "Daily Calories",
    "Health Score",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _oid(val: str) -> Optional[ObjectId]:
    try:
        return ObjectId(val)
    except (InvalidId, TypeError):
        return None


def _direction(change: float) -> str:
    if change > 0:
        return "increase"
    if change < 0:
        return "decrease"
    return "stable"


def _result_bmi(doc: Dict[str, Any]) -> float:
    return ((doc.get("results") or {}).get("analysis") or {}).get("bmi") or 0


def serialize_assessment(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored document into its API form (string id, no _id)."""
    data = {k: v for k, v in doc.items() if k != "_id"}
    data["id"] = str(doc["_id"])
    return data


def linear_trend(values: List[float]) -> float:
    """Least-squares slope of values against their index, 3 decimals."""
    n = len(values)
    if n < 2:
        return 0
    xs = range(n)
    sum_x = sum(xs)
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in zip(xs, values))
    sum_x2 = sum(x * x for x in xs)
    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    return round_half_up(slope, 3)


def assessment_frequency(dates: List[datetime]) -> Optional[int]:
    """Average number of days between consecutive assessments."""
    if len(dates) < 2:
        return None
    intervals = [
        (dates[i] - dates[i - 1]).total_seconds() / SECONDS_PER_DAY
        for i in range(1, len(dates))
    ]
    return int(round_half_up(sum(intervals) / len(intervals)))


class AssessmentHistoryService:
    """Persistence and history statistics over an `assessments` collection"""

    def __init__(self, collection, clock: Callable[[], datetime] = _utcnow):
        self.collection = collection
        self.clock = clock

    @staticmethod
    def ensure_indexes(collection) -> None:
        collection.create_index(
            [("userId", ASCENDING), ("createdAt", DESCENDING)],
            name="idx_user_created",
        )

    def save_assessment(
        self,
        user_id: str,
        data: AssessmentInput,
        result: AnalysisResult,
        name: Optional[str] = None,
        warnings: Optional[List[ValidationIssue]] = None,
    ) -> Dict[str, Any]:
        doc = {
            "userId": user_id,
            "name": name,
            "personalData": {
                "age": data.age,
                "weight": data.weight,
                "height": data.height,
            },
            "goal": data.goal.value,
            "diseases": [d.value for d in data.diseases],
            "results": result.to_dict(),
            "warnings": [w.model_dump() for w in (warnings or [])],
            "createdAt": self.clock(),
        }
        res = self.collection.insert_one(doc)
        doc["_id"] = res.inserted_id
        logger.info(f"Assessment saved for user: {user_id} ({res.inserted_id})")
        return serialize_assessment(doc)

    def get_assessment(self, assessment_id: str) -> Optional[Dict[str, Any]]:
        oid = _oid(assessment_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return serialize_assessment(doc) if doc else None

    def delete_assessment(self, assessment_id: str) -> bool:
        oid = _oid(assessment_id)
        if oid is None:
            return False
        res = self.collection.delete_one({"_id": oid})
        if res.deleted_count:
            logger.info(f"Assessment deleted: {assessment_id}")
        return bool(res.deleted_count)

    def get_latest(self, user_id: str) -> Optional[Dict[str, Any]]:
        docs = list(self.collection.find({"userId": user_id}).sort("createdAt", DESCENDING).limit(1))
        return serialize_assessment(docs[0]) if docs else None

    def get_user_history(self, user_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        skip = (page - 1) * limit
        docs = list(
            self.collection.find({"userId": user_id})
            .sort("createdAt", DESCENDING)
            .skip(skip)
            .limit(limit)
        )
        total_count = self.collection.count_documents({"userId": user_id})
        total_pages = math.ceil(total_count / limit) if total_count else 0

        assessments = []
        for doc in docs:
            analysis = (doc.get("results") or {}).get("analysis") or {}
            assessments.append({
                "id": str(doc["_id"]),
                "createdAt": doc["createdAt"],
                "bmi": analysis.get("bmi"),
                "bmiCategory": analysis.get("bmiCategory"),
                "goal": doc.get("goal"),
                "healthScore": (doc.get("results") or {}).get("healthScore"),
            })

        return {
            "userId": user_id,
            "assessments": assessments,
            "pagination": {
                "currentPage": page,
                "totalPages": total_pages,
                "totalCount": total_count,
                "hasNextPage": page < total_pages,
                "hasPrevPage": page > 1,
                "limit": limit,
            },
            "statistics": self.calculate_user_stats(user_id),
        }

    def calculate_user_stats(self, user_id: str) -> Dict[str, Any]:
        docs = list(self.collection.find({"userId": user_id}).sort("createdAt", ASCENDING))

        if not docs:
            return {
                "totalAssessments": 0,
                "firstAssessment": None,
                "latestAssessment": None,
                "progressSummary": None,
            }

        first, latest = docs[0], docs[-1]
        return {
            "totalAssessments": len(docs),
            "firstAssessment": first["createdAt"],
            "latestAssessment": latest["createdAt"],
            "progressSummary": self.calculate_progress(first, latest),
            "trends": self.calculate_trends(docs),
            "goalHistory": self.goal_history(docs),
        }

    @staticmethod
    def calculate_progress(first: Dict[str, Any], latest: Dict[str, Any]) -> Dict[str, Any]:
        weight_change = latest["personalData"]["weight"] - first["personalData"]["weight"]
        bmi_change = _result_bmi(latest) - _result_bmi(first)
        elapsed_days = (latest["createdAt"] - first["createdAt"]).total_seconds() / SECONDS_PER_DAY

        return {
            "weightChange": round_half_up(weight_change, 1),
            "bmiChange": round_half_up(bmi_change, 1),
            "timeSpan": {
                "days": math.floor(elapsed_days),
                "months": math.floor(elapsed_days / 30),
            },
            "direction": {
                "weight": _direction(weight_change),
                "bmi": _direction(bmi_change),
            },
        }

    @staticmethod
    def calculate_trends(docs: List[Dict[str, Any]]) -> Dict[str, Any]:
        if len(docs) < 2:
            return {"insufficient_data": True}

        weights = [d["personalData"]["weight"] for d in docs]
        bmis = [_result_bmi(d) for d in docs]
        dates = [d["createdAt"] for d in docs]

        def _series(values):
            return {
                "data": values,
                "trend": linear_trend(values),
                "average": sum(values) / len(values),
                "range": {"min": min(values), "max": max(values)},
            }

        return {
            "weight": _series(weights),
            "bmi": _series(bmis),
            "timeframe": {
                "start": dates[0],
                "end": dates[-1],
                "assessmentFrequency": assessment_frequency(dates),
            },
        }

    @staticmethod
    def goal_history(docs: List[Dict[str, Any]]) -> Dict[str, Any]:
        counts: Dict[str, int] = {}
        changes = []
        previous = None
        for doc in docs:
            goal = doc.get("goal")
            counts[goal] = counts.get(goal, 0) + 1
            if previous is not None and previous != goal:
                changes.append({"from": previous, "to": goal, "date": doc["createdAt"]})
            previous = goal
        return {
            "counts": counts,
            "changes": changes,
            "currentGoal": docs[-1].get("goal") if docs else None,
        }

    def compare_assessments(self, user_id: str, first_id: str, second_id: str) -> Optional[Dict[str, Any]]:
        """Side-by-side view of two of a user's assessments; None if either is missing."""
        docs = []
        for assessment_id in (first_id, second_id):
            oid = _oid(assessment_id)
            doc = self.collection.find_one({"_id": oid, "userId": user_id}) if oid else None
            if not doc:
                return None
            docs.append(doc)

        def _side(doc):
            return {
                "id": str(doc["_id"]),
                "date": doc["createdAt"],
                "data": doc["personalData"],
                "results": doc.get("results"),
                "goal": doc.get("goal"),
            }

        first, second = docs
        return {
            "assessment1": _side(first),
            "assessment2": _side(second),
            "differences": self.calculate_differences(first, second),
        }

    @staticmethod
    def calculate_differences(first: Dict[str, Any], second: Dict[str, Any]) -> Dict[str, Any]:
        weight1 = first["personalData"]["weight"]
        weight2 = second["personalData"]["weight"]
        analysis1 = (first.get("results") or {}).get("analysis") or {}
        analysis2 = (second.get("results") or {}).get("analysis") or {}
        # healthScore lives next to analysis in stored results
        score1 = (first.get("results") or {}).get("healthScore") or 0
        score2 = (second.get("results") or {}).get("healthScore") or 0
        elapsed_days = (second["createdAt"] - first["createdAt"]).total_seconds() / SECONDS_PER_DAY

        return {
            "weight": {
                "change": weight2 - weight1,
                "percentage": f"{round_half_up((weight2 - weight1) / weight1 * 100, 1):.1f}",
            },
            "bmi": {
                "change": (analysis2.get("bmi") or 0) - (analysis1.get("bmi") or 0),
                "categoryChange": {
                    "from": analysis1.get("bmiCategory") or "Unknown",
                    "to": analysis2.get("bmiCategory") or "Unknown",
                },
            },
            "goal": {
                "changed": first.get("goal") != second.get("goal"),
                "from": first.get("goal"),
                "to": second.get("goal"),
            },
            "timespan": {"days": math.floor(elapsed_days)},
            "healthScore": {"change": score2 - score1},
        }

    def delete_user_history(self, user_id: str, keep_latest: bool = True) -> Dict[str, Any]:
        query: Dict[str, Any] = {"userId": user_id}
        if keep_latest:
            latest = self.get_latest(user_id)
            if latest:
                query["_id"] = {"$ne": ObjectId(latest["id"])}

        res = self.collection.delete_many(query)
        logger.info(f"Deleted {res.deleted_count} assessments for user: {user_id} (keep_latest={keep_latest})")
        return {"deletedCount": res.deleted_count, "keptLatest": keep_latest}

    def export_user_data(self, user_id: str) -> Dict[str, Any]:
        docs = list(self.collection.find({"userId": user_id}).sort("createdAt", ASCENDING))
        return {
            "userId": user_id,
            "exportDate": self.clock(),
            "totalAssessments": len(docs),
            "assessments": [
                {
                    "date": doc["createdAt"],
                    "personalData": doc["personalData"],
                    "goal": doc.get("goal"),
                    "diseases": doc.get("diseases") or [],
                    "results": doc.get("results"),
                }
                for doc in docs
            ],
        }

    def export_user_csv(self, user_id: str) -> str:
        """Exported assessments as CSV, oldest first. Empty string when there are none."""
        assessments = self.export_user_data(user_id)["assessments"]
        if not assessments:
            return ""

        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for a in assessments:
            results = a["results"] or {}
            analysis = results.get("analysis") or {}
            date = a["date"]
            writer.writerow([
                date.isoformat() if isinstance(date, datetime) else date,
                a["personalData"]["age"],
                a["personalData"]["weight"],
                a["personalData"]["height"],
                a["goal"],
                ";".join(a["diseases"]),
                analysis.get("bmi") or "",
                analysis.get("bmiCategory") or "",
                analysis.get("dailyCalories") or "",
                results.get("healthScore") or "",
            ])
        return buf.getvalue().rstrip("\n")
