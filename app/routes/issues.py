"""
Issue endpoints - report submission, feed, lifecycle updates, upvotes and comments.
"""

from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.models.issue import (
    AssignRequest,
    IssueUpdate,
    IssueWithReporter,
    MaintenanceIssue,
    ReportCreate,
    UpvoteRequest,
    UpvoteResult,
)
from app.models.technician import Comment, CommentCreate
from app.routes.deps import get_issue_classifier, get_store
from app.services.classifier import IssueClassifier
from app.services.issue_store import InvariantViolation, IssueStore
from app.services.report_service import submit_report
from app.services.status_workflow import InvalidTransition, StatusWorkflowEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/issues", tags=["Issues"])

# Fields an update may explicitly clear with null
NULLABLE_UPDATE_FIELDS = {"assigned_technician_id", "location"}


def _not_found(issue_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Issue {issue_id} not found")


@router.post("", response_model=MaintenanceIssue, status_code=status.HTTP_201_CREATED)
def create_issue(
    report: ReportCreate,
    store: IssueStore = Depends(get_store),
    classifier: IssueClassifier = Depends(get_issue_classifier),
):
    """
    Submit a new maintenance report.

    The classifier fills in category, severity and ai_analysis. It never
    fails: without Gemini the keyword fallback answers.
    """
    logger.info(f"📝 POST /api/issues - reporter={report.reporter_id}")
    try:
        return submit_report(store, classifier, report)
    except InvariantViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=List[IssueWithReporter])
async def list_issues(store: IssueStore = Depends(get_store)):
    """All issues joined with their reporter, newest first."""
    return store.get_all_issues()


@router.get("/{issue_id}", response_model=MaintenanceIssue)
async def get_issue(issue_id: str, store: IssueStore = Depends(get_store)):
    issue = store.get_issue(issue_id)
    if issue is None:
        raise _not_found(issue_id)
    return issue


@router.patch("/{issue_id}", response_model=MaintenanceIssue)
async def update_issue(issue_id: str, payload: IssueUpdate, store: IssueStore = Depends(get_store)):
    """
    Partial update. Status moves forward only; progress never decreases
    and reaches 100 only at resolved.
    """
    updates = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_UPDATE_FIELDS
    }

    technician_id = updates.get("assigned_technician_id")
    if technician_id and store.get_technician(technician_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Technician {technician_id} not found",
        )

    try:
        updated = store.modify_issue(
            issue_id,
            lambda issue: StatusWorkflowEngine.plan_update(issue, updates),
        )
    except InvalidTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except InvariantViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if updated is None:
        raise _not_found(issue_id)
    return updated


@router.delete("/{issue_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_issue(issue_id: str, store: IssueStore = Depends(get_store)):
    if not store.delete_issue(issue_id):
        raise _not_found(issue_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{issue_id}/assign", response_model=MaintenanceIssue)
async def assign_technician(issue_id: str, payload: AssignRequest, store: IssueStore = Depends(get_store)):
    """Attach a technician. An open issue moves to assigned."""
    if store.get_technician(payload.technician_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Technician {payload.technician_id} not found",
        )

    try:
        updated = store.modify_issue(
            issue_id,
            lambda issue: StatusWorkflowEngine.plan_assignment(issue, payload.technician_id),
        )
    except InvalidTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if updated is None:
        raise _not_found(issue_id)
    return updated


@router.post("/{issue_id}/upvote", response_model=UpvoteResult)
async def toggle_upvote(issue_id: str, payload: UpvoteRequest, store: IssueStore = Depends(get_store)):
    """
    Toggle the user's upvote. Calling twice restores the original state.
    """
    result = store.try_toggle_upvote(issue_id, payload.user_id)
    if result is None:
        raise _not_found(issue_id)
    return result


@router.get("/{issue_id}/comments", response_model=List[Comment])
async def list_comments(issue_id: str, store: IssueStore = Depends(get_store)):
    return store.get_comments_by_issue_id(issue_id)


@router.post("/{issue_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment(issue_id: str, payload: CommentCreate, store: IssueStore = Depends(get_store)):
    if store.get_issue(issue_id) is None:
        raise _not_found(issue_id)
    try:
        return store.create_comment(issue_id, payload.model_dump())
    except InvariantViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
