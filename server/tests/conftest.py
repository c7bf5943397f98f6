# server/tests/conftest.py
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import DESCENDING

from dietapp.main import app
from dietapp.routers.assessment import get_history_service
from dietapp.services.assessment_history_service import AssessmentHistoryService


class FakeCursor:
    """Minimal stand-in for a pymongo cursor (sort/skip/limit/iterate)."""

    def __init__(self, docs):
        self._docs = list(docs)

    def sort(self, key, direction=1):
        self._docs.sort(key=lambda d: d.get(key), reverse=direction == DESCENDING)
        return self

    def skip(self, n):
        self._docs = self._docs[n:]
        return self

    def limit(self, n):
        if n:
            self._docs = self._docs[:n]
        return self

    def __iter__(self):
        return iter(self._docs)


class FakeCollection:
    """In-memory collection covering the calls AssessmentHistoryService makes."""

    def __init__(self):
        self.docs = []
        self.indexes = []

    @staticmethod
    def _matches(doc, query):
        for key, expected in query.items():
            if isinstance(expected, dict) and "$ne" in expected:
                if doc.get(key) == expected["$ne"]:
                    return False
            elif doc.get(key) != expected:
                return False
        return True

    def insert_one(self, doc):
        doc = dict(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    def find_one(self, query):
        for doc in self.docs:
            if self._matches(doc, query):
                return dict(doc)
        return None

    def find(self, query):
        return FakeCursor(dict(d) for d in self.docs if self._matches(d, query))

    def count_documents(self, query):
        return sum(1 for d in self.docs if self._matches(d, query))

    def delete_one(self, query):
        for i, doc in enumerate(self.docs):
            if self._matches(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def delete_many(self, query):
        kept = [d for d in self.docs if not self._matches(d, query)]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return SimpleNamespace(deleted_count=deleted)

    def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return kwargs.get("name")


class StepClock:
    """Clock that advances a fixed step on every call."""

    def __init__(self, start=None, step=timedelta(days=7)):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        now = self.current
        self.current = self.current + self.step
        return now


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def history_service(collection):
    return AssessmentHistoryService(collection, clock=StepClock())


@pytest.fixture
def client(history_service):
    app.dependency_overrides[get_history_service] = lambda: history_service
    yield TestClient(app)
    app.dependency_overrides.clear()
