"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from app.core.settings import settings
from app.routes.deps import get_issue_classifier, get_store
from app.services.classifier import IssueClassifier
from app.services.issue_store import IssueStore


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(store: IssueStore = Depends(get_store)):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "issues": len(store.issues),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/ai")
async def ai_health(classifier: IssueClassifier = Depends(get_issue_classifier)):
    """
    Which classifier answers report submissions.
    "fallback" means Gemini is disabled or not configured.
    """
    provider = classifier.active_provider()
    info = provider.get_model_info()
    return {
        "ai_enabled": settings.AI_ENABLED,
        "mode": "fallback" if provider is classifier.fallback else "external",
        "model": info["name"],
        "model_version": info["version"],
        "timeout_seconds": provider.get_timeout_seconds(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
