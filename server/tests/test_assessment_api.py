# server/tests/test_assessment_api.py
from unittest.mock import patch

from bson import ObjectId
from fastapi.testclient import TestClient

from dietapp.main import app

ASSESSMENT_URL = "/api/v1/assessment"
RECOMMENDATION_URL = "/api/v1/recommendation"


def _payload(**overrides):
    data = {
        "name": "Budi",
        "userId": "user_1",
        "age": 25,
        "weight": 70,
        "height": 170,
        "goal": "Diet",
        "diseases": [],
    }
    data.update(overrides)
    return data


class TestRoot:
    def test_home_and_health(self, client):
        assert client.get("/").status_code == 200
        response = client.get("/health")
        assert response.json()["status"] == "healthy"
        assert response.json()["timestamp"].endswith("+00:00")


class TestAssessmentForm:
    def test_form_structure(self, client):
        response = client.get(f"{ASSESSMENT_URL}/form")
        assert response.status_code == 200
        fields = response.json()["data"]["fields"]
        assert [f["name"] for f in fields] == ["name", "age", "weight", "height", "goal", "diseases"]
        weight = fields[2]
        assert (weight["min"], weight["max"]) == (30, 300)
        goals = [o["value"] for o in fields[4]["options"]]
        assert goals == ["Hidup Sehat", "Diet", "Massa Otot"]


class TestValidateEndpoint:
    def test_valid_payload(self, client):
        response = client.post(f"{ASSESSMENT_URL}/validate", json=_payload())
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [w["field"] for w in body["warnings"]] == ["goal_bmi"]
        assert body["validatedData"]["goal"] == "Diet"
        assert "userId" not in body["validatedData"]

    def test_out_of_range_field(self, client):
        body = client.post(f"{ASSESSMENT_URL}/validate", json=_payload(age=5)).json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "age"
        assert body["errors"][0]["value"] == 5

    def test_business_rule_error(self, client):
        body = client.post(f"{ASSESSMENT_URL}/validate", json=_payload(weight=200, height=150)).json()
        assert body["success"] is False
        assert [e["field"] for e in body["errors"]] == ["bmi"]


class TestSubmitAssessment:
    def test_submit_returns_results(self, client, collection):
        response = client.post(ASSESSMENT_URL, json=_payload())
        assert response.status_code == 201

        data = response.json()["data"]
        assert data["userId"] == "user_1"
        assert ObjectId.is_valid(data["assessmentId"])
        assert data["results"]["analysis"]["dailyCalories"] == 2080
        assert data["results"]["healthScore"] == 100
        assert [m["targetCalories"] for m in data["results"]["mealPlan"]["meals"]] == [520, 728, 624, 208]
        assert data["createdAt"].startswith("2024-01-01T00:00:00")
        assert len(collection.docs) == 1

    def test_submit_generates_user_id(self, client):
        data = client.post(ASSESSMENT_URL, json=_payload(userId=None)).json()["data"]
        assert data["userId"].startswith("user_")

    def test_missing_field_rejected(self, client, collection):
        payload = _payload()
        del payload["height"]
        response = client.post(ASSESSMENT_URL, json=payload)
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "height"
        assert collection.docs == []

    def test_unknown_goal_rejected(self, client):
        response = client.post(ASSESSMENT_URL, json=_payload(goal="Bulking"))
        assert response.status_code == 400

    def test_implausible_bmi_rejected(self, client, collection):
        response = client.post(ASSESSMENT_URL, json=_payload(weight=200, height=150))
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "bmi"
        assert collection.docs == []


class TestAssessmentLookup:
    def test_get_and_delete(self, client):
        assessment_id = client.post(ASSESSMENT_URL, json=_payload()).json()["data"]["assessmentId"]

        response = client.get(f"{ASSESSMENT_URL}/{assessment_id}")
        assert response.status_code == 200
        assert response.json()["data"]["personalData"]["age"] == 25

        assert client.delete(f"{ASSESSMENT_URL}/{assessment_id}").status_code == 200
        assert client.get(f"{ASSESSMENT_URL}/{assessment_id}").status_code == 404
        assert client.delete(f"{ASSESSMENT_URL}/{assessment_id}").status_code == 404

    def test_unknown_ids(self, client):
        assert client.get(f"{ASSESSMENT_URL}/{ObjectId()}").status_code == 404
        assert client.get(f"{ASSESSMENT_URL}/not-an-id").status_code == 404

    def test_history(self, client):
        first = client.post(ASSESSMENT_URL, json=_payload(weight=72)).json()["data"]["assessmentId"]
        second = client.post(ASSESSMENT_URL, json=_payload(weight=70)).json()["data"]["assessmentId"]

        response = client.get(f"{ASSESSMENT_URL}/history/user_1", params={"limit": 1})
        assert response.status_code == 200
        data = response.json()["data"]
        assert [a["id"] for a in data["assessments"]] == [second]
        assert data["pagination"]["totalCount"] == 2
        assert data["pagination"]["hasNextPage"] is True
        assert data["statistics"]["progressSummary"]["weightChange"] == -2.0

        page2 = client.get(f"{ASSESSMENT_URL}/history/user_1", params={"page": 2, "limit": 1}).json()
        assert [a["id"] for a in page2["data"]["assessments"]] == [first]

    def test_created_at_format_matches_across_endpoints(self, client):
        submitted = client.post(ASSESSMENT_URL, json=_payload()).json()["data"]
        fetched = client.get(f"{ASSESSMENT_URL}/{submitted['assessmentId']}").json()["data"]
        history = client.get(f"{ASSESSMENT_URL}/history/user_1").json()["data"]
        assert fetched["createdAt"] == submitted["createdAt"]
        assert history["assessments"][0]["createdAt"] == submitted["createdAt"]

    def test_database_unavailable(self):
        app.dependency_overrides.clear()
        with patch("dietapp.routers.assessment.db", None):
            response = TestClient(app).get(f"{ASSESSMENT_URL}/history/user_1")
        assert response.status_code == 500
        assert response.json()["detail"] == "Database connection not available"


class TestRecommendations:
    def test_user_recommendations_from_latest(self, client):
        client.post(ASSESSMENT_URL, json=_payload(diseases=["Hipertensi"]))
        response = client.get(f"{RECOMMENDATION_URL}/user/user_1")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["mealPlan"]["totalCalories"] == 2080
        assert data["restrictions"][0]["type"] == "Limit"

    def test_user_without_assessment(self, client):
        assert client.get(f"{RECOMMENDATION_URL}/user/nobody").status_code == 404

    def test_meal_packages(self, client):
        response = client.get(f"{RECOMMENDATION_URL}/meals", params={"goal": "Diet", "diseases": ["Diabetes"]})
        assert response.status_code == 200
        data = response.json()["data"]
        assert [m["id"] for m in data["meals"]] == ["lowcal1", "lowcal3"]
        assert data["totalItems"] == 2

    def test_meal_packages_unknown_goal(self, client):
        response = client.get(f"{RECOMMENDATION_URL}/meals", params={"goal": "Bulking"})
        assert response.status_code == 400


class TestHistoryManagement:
    def test_compare(self, client):
        first = client.post(ASSESSMENT_URL, json=_payload(weight=72)).json()["data"]["assessmentId"]
        second = client.post(ASSESSMENT_URL, json=_payload(weight=70)).json()["data"]["assessmentId"]

        response = client.get(f"{ASSESSMENT_URL}/history/user_1/compare/{first}/{second}")
        assert response.status_code == 200
        diff = response.json()["data"]["differences"]
        assert diff["weight"]["change"] == -2.0
        assert diff["timespan"]["days"] == 7

    def test_compare_missing(self, client):
        first = client.post(ASSESSMENT_URL, json=_payload()).json()["data"]["assessmentId"]
        response = client.get(f"{ASSESSMENT_URL}/history/user_1/compare/{first}/{ObjectId()}")
        assert response.status_code == 404

    def test_delete_history(self, client, collection):
        for weight in (74, 72, 70):
            client.post(ASSESSMENT_URL, json=_payload(weight=weight))

        response = client.delete(f"{ASSESSMENT_URL}/history/user_1")
        assert response.status_code == 200
        assert response.json()["data"] == {"deletedCount": 2, "keptLatest": True}
        assert len(collection.docs) == 1

        response = client.delete(f"{ASSESSMENT_URL}/history/user_1", params={"keepLatest": "false"})
        assert response.json()["data"] == {"deletedCount": 1, "keptLatest": False}
        assert collection.docs == []

    def test_export_json(self, client):
        client.post(ASSESSMENT_URL, json=_payload())
        response = client.get(f"{ASSESSMENT_URL}/history/user_1/export")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalAssessments"] == 1
        assert data["assessments"][0]["goal"] == "Diet"

    def test_export_csv(self, client):
        client.post(ASSESSMENT_URL, json=_payload())
        response = client.get(f"{ASSESSMENT_URL}/history/user_1/export", params={"format": "csv"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        lines = response.text.split("\n")
        assert lines[0].startswith("Date,Age,Weight,Height,Goal")
        assert len(lines) == 2

    def test_export_unknown_format(self, client):
        response = client.get(f"{ASSESSMENT_URL}/history/user_1/export", params={"format": "xml"})
        assert response.status_code == 400
