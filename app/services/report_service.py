"""
Report service - turns a citizen report into a classified, stored issue.

Flow:
1. Check the reporter exists (fail fast, before spending an AI call)
2. Classify description + optional photo (never fails, may fall back)
3. Store the issue with the analysis attached
"""

from typing import Optional
import logging

from app.models.issue import AIAnalysis, MaintenanceIssue, ReportCreate
from app.services.classifier import IssueClassifier, InlineImage
from app.services.issue_store import InvariantViolation, IssueStore
from app.utils.images import decode_data_url

logger = logging.getLogger(__name__)


def classify_report(
    classifier: IssueClassifier,
    description: str,
    image_data: Optional[str] = None,
) -> AIAnalysis:
    image: Optional[InlineImage] = decode_data_url(image_data)
    return classifier.classify(description, image)


def submit_report(store: IssueStore, classifier: IssueClassifier, report: ReportCreate) -> MaintenanceIssue:
    """
    Create an issue from a report submission.

    Raises:
        InvariantViolation: reporter does not exist
    """
    if store.get_user(report.reporter_id) is None:
        raise InvariantViolation(f"Reporter {report.reporter_id} does not exist")

    analysis = classify_report(classifier, report.description, report.image_data)

    issue = store.create_issue({
        "title": report.title,
        "description": report.description,
        "location": report.location,
        "image_urls": report.image_urls,
        "reporter_id": report.reporter_id,
        "category": analysis.category,
        "severity": analysis.severity,
        "ai_analysis": analysis,
    })

    logger.info(
        f"📝 Report {issue.id} triaged as {analysis.domain} → {analysis.category.value} "
        f"({analysis.severity.value}, confidence {analysis.confidence:.2f})"
    )
    return issue
