"""
Shared route dependencies.

The store and classifier live on app.state (created at startup) and are
injected per request, so tests can swap them via dependency_overrides.
"""

from fastapi import HTTPException, Request, status

from app.services.classifier import IssueClassifier
from app.services.issue_store import IssueStore


def get_store(request: Request) -> IssueStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Issue store not initialized",
        )
    return store


def get_issue_classifier(request: Request) -> IssueClassifier:
    classifier = getattr(request.app.state, "classifier", None)
    if classifier is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Classifier not initialized",
        )
    return classifier
