# tests/conftest.py - Shared test fixtures
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.issue import AIAnalysis, MaintenanceIssue
from app.routes.deps import get_issue_classifier, get_store
from app.services.category_mapper import Category
from app.services.classifier import IssueClassifier
from app.services.issue_store import IssueStore


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


def gemini_body(text):
    """Wrap model output text the way generateContent returns it."""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def store():
    return IssueStore()


@pytest.fixture
def reporter(store):
    return store.create_user({"username": "asha", "email": "asha@example.com"})


@pytest.fixture
def technician(store):
    return store.create_technician({"name": "John Smith", "specialty": "Plumbing"})


@pytest.fixture
def classifier():
    """Classifier with no external provider: keyword fallback only."""
    return IssueClassifier(external=None)


@pytest.fixture
def make_issue(store, reporter):
    def _make(**overrides):
        data = {
            "title": "Pothole on MG Road",
            "description": "Large pothole near the junction",
            "category": Category.ROADS_TRANSPORT,
            "severity": "moderate",
            "reporter_id": reporter.id,
        }
        data.update(overrides)
        return store.create_issue(data)

    return _make


@pytest.fixture
def restore_issue(store, reporter):
    """Insert an issue with an explicit created_at (hours ago) for ordering tests."""
    base = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def _restore(issue_id, hours_ago, reporter_id=None, voters=()):
        issue = MaintenanceIssue(
            id=issue_id,
            title=f"Issue {issue_id}",
            description="Seeded issue",
            category=Category.MISCELLANEOUS,
            severity="minor",
            reporter_id=reporter_id or reporter.id,
            ai_analysis=AIAnalysis(
                domain="General Maintenance",
                category=Category.MISCELLANEOUS,
                severity="minor",
                confidence=0.6,
                reasoning="seed",
            ),
            created_at=base - timedelta(hours=hours_ago),
            updated_at=base,
        )
        return store.restore_issue(issue, voters)

    return _restore


@pytest.fixture
def client(store, classifier):
    """HTTP test client with the store and classifier overridden"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_issue_classifier] = lambda: classifier
    yield TestClient(app)
    app.dependency_overrides.clear()
