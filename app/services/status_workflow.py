"""
Status Workflow Engine - issue lifecycle rules.

DESIGN PRINCIPLES:
- Forward-only: OPEN → ASSIGNED → IN_PROGRESS → RESOLVED (skipping ahead is allowed)
- No backward transitions, RESOLVED is terminal
- Progress never decreases and reaches 100 only at RESOLVED
- Assigning a technician to an OPEN issue moves it to ASSIGNED
- ASSIGNED always has a technician attached
"""

from typing import Any, Dict, List
import logging

from app.models.issue import IssueStatus, MaintenanceIssue

logger = logging.getLogger(__name__)


class InvalidTransition(ValueError):
    """Raised when an update would break the lifecycle rules."""


class StatusWorkflowEngine:
    """
    Validates and normalizes lifecycle changes before they reach the store.
    """

    ORDER: List[IssueStatus] = [
        IssueStatus.OPEN,
        IssueStatus.ASSIGNED,
        IssueStatus.IN_PROGRESS,
        IssueStatus.RESOLVED,
    ]

    @classmethod
    def rank(cls, status: IssueStatus) -> int:
        return cls.ORDER.index(IssueStatus(status))

    @classmethod
    def is_valid_transition(cls, from_status: str, to_status: str) -> bool:
        """
        Check if a status transition is valid.

        Same status is always valid (no-op).
        """
        try:
            from_rank = cls.rank(IssueStatus(from_status))
            to_rank = cls.rank(IssueStatus(to_status))
        except ValueError:
            return False
        return to_rank >= from_rank

    @classmethod
    def get_allowed_transitions(cls, current_status: str) -> List[str]:
        """Statuses reachable from current_status (excluding itself)."""
        try:
            current_rank = cls.rank(IssueStatus(current_status))
        except ValueError:
            return []
        return [status.value for status in cls.ORDER[current_rank + 1:]]

    @classmethod
    def plan_update(cls, issue: MaintenanceIssue, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate a partial update against the lifecycle and return the
        normalized fields to merge.

        Raises:
            InvalidTransition: backward status move, ASSIGNED without a
                technician, decreasing progress, or progress 100 without RESOLVED
        """
        planned = dict(updates)
        current_status = IssueStatus(issue.status)
        new_status = IssueStatus(planned.get("status") or current_status)

        if not cls.is_valid_transition(current_status, new_status):
            allowed = cls.get_allowed_transitions(current_status)
            raise InvalidTransition(
                f"Invalid status transition: {current_status.value} → {new_status.value}. "
                f"Allowed transitions from {current_status.value}: {allowed}"
            )

        if planned.get("assigned_technician_id") and new_status == IssueStatus.OPEN:
            new_status = IssueStatus.ASSIGNED

        if "assigned_technician_id" in planned:
            technician_id = planned["assigned_technician_id"]
        else:
            technician_id = issue.assigned_technician_id
        if new_status == IssueStatus.ASSIGNED and not technician_id:
            raise InvalidTransition("An assigned issue needs a technician attached")

        if new_status != current_status:
            planned["status"] = new_status

        progress = planned.get("progress")
        if progress is not None:
            if progress < issue.progress:
                raise InvalidTransition(
                    f"Progress cannot decrease ({issue.progress} → {progress})"
                )
            if progress >= 100 and new_status != IssueStatus.RESOLVED:
                raise InvalidTransition("Progress can only reach 100 when the issue is resolved")

        if new_status == IssueStatus.RESOLVED:
            planned["progress"] = 100

        if "status" in planned:
            logger.info(f"Issue {issue.id}: {current_status.value} → {new_status.value}")
        return planned

    @classmethod
    def plan_assignment(cls, issue: MaintenanceIssue, technician_id: str) -> Dict[str, Any]:
        """Attach a technician; OPEN issues move to ASSIGNED."""
        if IssueStatus(issue.status) == IssueStatus.RESOLVED:
            raise InvalidTransition("Cannot assign a technician to a resolved issue")
        return cls.plan_update(issue, {"assigned_technician_id": technician_id})
