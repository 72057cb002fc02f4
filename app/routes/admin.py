"""
Admin endpoints - dashboard aggregation, classification preview and demo reset.
"""

import logging

from fastapi import APIRouter, Depends

from app.models.issue import AIAnalysis, ClassifyRequest
from app.routes.deps import get_issue_classifier, get_store
from app.services.classifier import IssueClassifier
from app.services.dashboard_service import summarize_issues
from app.services.issue_store import IssueStore
from app.services.report_service import classify_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Admin"])


@router.get("/dashboard/summary")
async def dashboard_summary(store: IssueStore = Depends(get_store)):
    """Counts per category (all eight), severity and status, plus technician workload."""
    return summarize_issues(store.get_all_issues(), store.get_all_technicians())


@router.post("/classify", response_model=AIAnalysis)
def classify_preview(
    payload: ClassifyRequest,
    classifier: IssueClassifier = Depends(get_issue_classifier),
):
    """Classify a description (and optional photo) without storing anything."""
    return classify_report(classifier, payload.description, payload.image_data)


@router.post("/admin/reset")
async def reset_demo_data(store: IssueStore = Depends(get_store)):
    """Discard all data and reload the demo users, technicians and issues."""
    logger.warning("⚠️ Resetting store to demo data")
    store.reset()
    return {
        "status": "reset",
        "users": len(store.users),
        "technicians": len(store.technicians),
        "issues": len(store.issues),
    }
