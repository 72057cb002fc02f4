"""
Demo data loaded at startup (SEED_DEMO_DATA) and on admin reset.

Seeded issues keep their showcase upvote counts through synthetic voter
ids, so upvotes == |voters| holds from the first request.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, List
from uuid import uuid4
import logging

from app.models.issue import AIAnalysis, IssueStatus, MaintenanceIssue, Severity, utcnow
from app.models.technician import Technician, TechnicianStatus
from app.models.user import User, UserRole
from app.services.category_mapper import Category
from app.utils.images import public_image_url

if TYPE_CHECKING:
    from app.services.issue_store import IssueStore

logger = logging.getLogger(__name__)


def synthetic_voters(issue_id: str, count: int) -> List[str]:
    return [f"seed-voter-{issue_id[:8]}-{n}" for n in range(count)]


def seed_demo_data(store: "IssueStore") -> None:
    """Populate the store with 2 users, 3 technicians and 4 issues."""
    now = utcnow()

    admin = User(
        id=str(uuid4()),
        username="admin",
        email="admin@maintain.ai",
        role=UserRole.ADMIN,
        credibility_score=9,
        external_auth_id="admin-firebase-uid",
        created_at=now,
    )
    citizen = User(
        id=str(uuid4()),
        username="user",
        email="user@maintain.ai",
        role=UserRole.USER,
        credibility_score=7,
        external_auth_id="user-firebase-uid",
        created_at=now,
    )
    for user in (admin, citizen):
        store.users[user.id] = user

    technicians = [
        Technician(id=str(uuid4()), name="John Smith", specialty="Plumbing",
                   status=TechnicianStatus.AVAILABLE, phone="+1-555-0101", email="john@maintain.ai", created_at=now),
        Technician(id=str(uuid4()), name="Lisa Garcia", specialty="Electrical",
                   status=TechnicianStatus.BUSY, phone="+1-555-0102", email="lisa@maintain.ai", created_at=now),
        Technician(id=str(uuid4()), name="Tom Wilson", specialty="General",
                   status=TechnicianStatus.AVAILABLE, phone="+1-555-0103", email="tom@maintain.ai", created_at=now),
    ]
    for technician in technicians:
        store.technicians[technician.id] = technician

    demo_issues = [
        (
            MaintenanceIssue(
                id=str(uuid4()),
                title="Dangerous pothole causing vehicle damage on MG Road",
                description=(
                    "Large pothole near City Center junction causing multiple two-wheelers to suffer tire damage. "
                    "Vehicles are swerving dangerously to avoid it, creating risk of accidents."
                ),
                category=Category.ROADS_TRANSPORT,
                severity=Severity.CRITICAL,
                status=IssueStatus.IN_PROGRESS,
                progress=72,
                location="Nizampet Main Road",
                image_urls=[public_image_url("/sample-images/pothole on road.webp")],
                reporter_id=citizen.id,
                assigned_technician_id=technicians[2].id,
                ai_analysis=AIAnalysis(
                    domain="Infrastructure & Road Safety",
                    category=Category.ROADS_TRANSPORT,
                    severity=Severity.CRITICAL,
                    confidence=0.97,
                    reasoning=(
                        "Large, deep pothole on a heavily trafficked arterial road with surface deterioration "
                        "beyond the crater. Vehicles must swerve into adjacent lanes."
                    ),
                ),
                created_at=now - timedelta(hours=4),
                updated_at=now,
            ),
            156,
        ),
        (
            MaintenanceIssue(
                id=str(uuid4()),
                title="Malfunctioning streetlights creating safety hazards",
                description=(
                    "Multiple streetlights flickering and non-functional along pedestrian pathway. "
                    "Area becomes dangerously dark after sunset."
                ),
                category=Category.ELECTRICITY_LIGHTING,
                severity=Severity.MAJOR,
                status=IssueStatus.ASSIGNED,
                progress=35,
                location="Bachupally Crossroads",
                image_urls=[public_image_url("/sample-images/flickering streetlights.webp")],
                reporter_id=admin.id,
                assigned_technician_id=technicians[1].id,
                ai_analysis=AIAnalysis(
                    domain="Public Utilities & Safety",
                    category=Category.ELECTRICITY_LIGHTING,
                    severity=Severity.MAJOR,
                    confidence=0.94,
                    reasoning=(
                        "Flickering streetlight with intermittent illumination typical of ballast or wiring "
                        "failure. Several dark units along a pedestrian pathway."
                    ),
                ),
                created_at=now - timedelta(hours=7),
                updated_at=now,
            ),
            89,
        ),
        (
            MaintenanceIssue(
                id=str(uuid4()),
                title="Damaged traffic sign at school zone crossing",
                description=(
                    "Stop sign bent and barely visible at school pedestrian crossing. "
                    "Hundreds of children use this crossing daily."
                ),
                category=Category.PUBLIC_SAFETY,
                severity=Severity.CRITICAL,
                status=IssueStatus.OPEN,
                progress=8,
                location="Nizampet X Roads",
                image_urls=[public_image_url("/sample-images/broken traffic sign.webp")],
                reporter_id=citizen.id,
                ai_analysis=AIAnalysis(
                    domain="Traffic Management & Child Safety",
                    category=Category.PUBLIC_SAFETY,
                    severity=Severity.CRITICAL,
                    confidence=0.96,
                    reasoning=(
                        "Stop sign post bent at roughly 45 degrees with reduced reflectivity. "
                        "School zone location makes the missing control device an immediate pedestrian risk."
                    ),
                ),
                created_at=now - timedelta(hours=10),
                updated_at=now,
            ),
            203,
        ),
        (
            MaintenanceIssue(
                id=str(uuid4()),
                title="Overflowing trash bins attracting pests in park",
                description=(
                    "Park waste bins overflowing with garbage around children's play area. "
                    "Attracting stray animals and insects."
                ),
                category=Category.SANITATION_WASTE,
                severity=Severity.MODERATE,
                status=IssueStatus.OPEN,
                progress=5,
                location="JNTU Road, Bachupally",
                image_urls=[public_image_url("/sample-images/trash in park.webp")],
                reporter_id=admin.id,
                ai_analysis=AIAnalysis(
                    domain="Waste Management & Public Health",
                    category=Category.SANITATION_WASTE,
                    severity=Severity.MODERATE,
                    confidence=0.88,
                    reasoning=(
                        "Overflowing receptacles with litter around the bins, indicating inadequate collection "
                        "frequency in a high-usage park."
                    ),
                ),
                created_at=now - timedelta(hours=12),
                updated_at=now,
            ),
            42,
        ),
    ]

    for issue, vote_count in demo_issues:
        store.restore_issue(issue, synthetic_voters(issue.id, vote_count))

    logger.info(
        f"Seeded demo data: {len(store.users)} users, {len(store.technicians)} technicians, "
        f"{len(store.issues)} issues"
    )
