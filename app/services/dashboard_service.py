"""
Dashboard aggregation for the admin view.

Groups issues by the eight fixed categories (every category is always
present, possibly with zero), by severity and by status, and summarizes
each technician's workload.
"""

from typing import Dict, List
from collections import Counter

from app.models.issue import IssueStatus, MaintenanceIssue, Severity
from app.models.technician import Technician
from app.services.category_mapper import all_categories

ACTIVE_STATUSES = {IssueStatus.ASSIGNED, IssueStatus.IN_PROGRESS}


def summarize_issues(issues: List[MaintenanceIssue], technicians: List[Technician]) -> Dict:
    by_category = Counter(issue.category for issue in issues)
    by_severity = Counter(issue.severity for issue in issues)
    by_status = Counter(issue.status for issue in issues)

    workload = []
    for technician in technicians:
        assigned = [issue for issue in issues if issue.assigned_technician_id == technician.id]
        workload.append({
            "technician_id": technician.id,
            "name": technician.name,
            "specialty": technician.specialty,
            "status": technician.status.value,
            "assigned": len(assigned),
            "active": sum(1 for issue in assigned if issue.status in ACTIVE_STATUSES),
            "resolved": sum(1 for issue in assigned if issue.status == IssueStatus.RESOLVED),
        })

    return {
        "total_issues": len(issues),
        "total_upvotes": sum(issue.upvotes for issue in issues),
        "by_category": {category.value: by_category.get(category, 0) for category in all_categories()},
        "by_severity": {severity.value: by_severity.get(severity, 0) for severity in Severity},
        "by_status": {status.value: by_status.get(status, 0) for status in IssueStatus},
        "unassigned_open": sum(
            1 for issue in issues
            if issue.status == IssueStatus.OPEN and not issue.assigned_technician_id
        ),
        "technician_workload": workload,
    }
