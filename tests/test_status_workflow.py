# tests/test_status_workflow.py - Lifecycle rules
import pytest

from app.models.issue import IssueStatus
from app.services.status_workflow import InvalidTransition, StatusWorkflowEngine


@pytest.mark.parametrize(
    "from_status, to_status, valid",
    [
        ("open", "assigned", True),
        ("open", "resolved", True),
        ("assigned", "in_progress", True),
        ("in_progress", "in_progress", True),
        ("in_progress", "open", False),
        ("resolved", "open", False),
        ("resolved", "in_progress", False),
        ("open", "closed", False),
    ],
)
def test_is_valid_transition(from_status, to_status, valid):
    assert StatusWorkflowEngine.is_valid_transition(from_status, to_status) is valid


def test_allowed_transitions():
    assert StatusWorkflowEngine.get_allowed_transitions("open") == ["assigned", "in_progress", "resolved"]
    assert StatusWorkflowEngine.get_allowed_transitions("resolved") == []
    assert StatusWorkflowEngine.get_allowed_transitions("bogus") == []


def test_backward_move_rejected(store, make_issue):
    issue = store.update_issue(make_issue().id, {"status": "resolved", "progress": 100})
    with pytest.raises(InvalidTransition, match="resolved → open"):
        StatusWorkflowEngine.plan_update(issue, {"status": "open"})


def test_assigning_technician_moves_open_to_assigned(make_issue, technician):
    issue = make_issue()
    planned = StatusWorkflowEngine.plan_assignment(issue, technician.id)
    assert planned == {"assigned_technician_id": technician.id, "status": IssueStatus.ASSIGNED}


def test_assigning_technician_keeps_later_status(store, make_issue, technician):
    issue = store.update_issue(make_issue().id, {"status": "in_progress", "progress": 30})
    planned = StatusWorkflowEngine.plan_assignment(issue, technician.id)
    assert "status" not in planned


def test_cannot_assign_resolved_issue(store, make_issue, technician):
    issue = store.update_issue(make_issue().id, {"status": "resolved", "progress": 100})
    with pytest.raises(InvalidTransition):
        StatusWorkflowEngine.plan_assignment(issue, technician.id)


def test_progress_cannot_decrease(store, make_issue):
    issue = store.update_issue(make_issue().id, {"status": "in_progress", "progress": 50})
    with pytest.raises(InvalidTransition, match="cannot decrease"):
        StatusWorkflowEngine.plan_update(issue, {"progress": 20})


def test_progress_100_requires_resolved(make_issue):
    with pytest.raises(InvalidTransition, match="resolved"):
        StatusWorkflowEngine.plan_update(make_issue(), {"progress": 100})


def test_resolving_sets_full_progress(make_issue):
    planned = StatusWorkflowEngine.plan_update(make_issue(), {"status": "resolved"})
    assert planned["status"] == IssueStatus.RESOLVED
    assert planned["progress"] == 100


def test_same_status_is_noop(make_issue):
    planned = StatusWorkflowEngine.plan_update(make_issue(), {"status": "open", "title": "Renamed"})
    assert planned == {"status": "open", "title": "Renamed"}


def test_assigned_status_requires_technician(make_issue):
    with pytest.raises(InvalidTransition, match="technician"):
        StatusWorkflowEngine.plan_update(make_issue(), {"status": "assigned"})


def test_cannot_detach_technician_from_assigned_issue(store, make_issue, technician):
    issue = store.modify_issue(
        make_issue().id,
        lambda current: StatusWorkflowEngine.plan_assignment(current, technician.id),
    )
    assert issue.status == IssueStatus.ASSIGNED

    with pytest.raises(InvalidTransition, match="technician"):
        StatusWorkflowEngine.plan_update(issue, {"assigned_technician_id": None})

    planned = StatusWorkflowEngine.plan_update(issue, {"assigned_technician_id": None, "status": "in_progress"})
    assert planned["status"] == IssueStatus.IN_PROGRESS
