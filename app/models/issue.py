"""
Pydantic models for maintenance issues, their AI analysis and upvotes.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import Optional, List
from enum import Enum

from app.models.user import User
from app.services.category_mapper import Category


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Severity(str, Enum):
    """Severity levels, always stored lowercase."""
    CRITICAL = "critical"
    MAJOR = "major"
    MODERATE = "moderate"
    MINOR = "minor"


class IssueStatus(str, Enum):
    """
    Issue lifecycle.

    OPEN → ASSIGNED → IN_PROGRESS → RESOLVED
    """
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class AIAnalysis(BaseModel):
    """Classification result attached to an issue. Never changes once stored."""
    domain: str
    category: Category
    severity: Severity
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class MaintenanceIssue(BaseModel):
    """A stored maintenance issue."""
    id: str
    title: str
    description: str
    category: Category
    severity: Severity
    status: IssueStatus = IssueStatus.OPEN
    progress: int = Field(default=0, ge=0, le=100)
    location: Optional[str] = Field(None, description="Opaque location text, may embed 'lat,lng | address'")
    image_urls: List[str] = Field(default_factory=list)
    reporter_id: str
    assigned_technician_id: Optional[str] = None
    ai_analysis: Optional[AIAnalysis] = None
    upvotes: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    class Config:
        extra = "ignore"
    

class IssueWithReporter(MaintenanceIssue):
    """Issue joined with its reporter (feed, map and dashboard read path)."""
    reporter: User


class ReportCreate(BaseModel):
    """
    Incoming report submission.
    Category, severity and AI analysis are derived by the classifier, not supplied.
    """
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    location: Optional[str] = Field(None, max_length=500)
    image_urls: Optional[List[str]] = None
    reporter_id: str = Field(..., min_length=1)
    image_data: Optional[str] = Field(None, description="Optional photo as a data URL (data:<mime>;base64,<payload>)")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Water leak near the main pipe",
                "description": "Water leak near the main pipe, emergency!",
                "location": "17.5145, 78.3856 | Nizampet Main Road",
                "image_urls": ["/uploads/leak.jpg"],
                "reporter_id": "4c1d2d6e-0000-4000-8000-000000000000",
            }
        }


class IssueUpdate(BaseModel):
    """Partial update from admins/technicians. Lifecycle rules apply."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    status: Optional[IssueStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    location: Optional[str] = Field(None, max_length=500)
    image_urls: Optional[List[str]] = None
    assigned_technician_id: Optional[str] = None
    severity: Optional[Severity] = None
    category: Optional[Category] = None

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class AssignRequest(BaseModel):
    technician_id: str = Field(..., min_length=1)


class ClassifyRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=5000)
    image_data: Optional[str] = None


class UpvoteRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class UpvoteResult(BaseModel):
    """Post-toggle state of a user's vote on an issue."""
    upvoted: bool
    new_count: int = Field(..., ge=0)
