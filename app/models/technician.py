"""
Technician and comment models.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional
from enum import Enum


class TechnicianStatus(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"


class TechnicianCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    specialty: str = Field(..., min_length=1, max_length=100)
    status: Optional[TechnicianStatus] = None
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=254)


class TechnicianUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    specialty: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[TechnicianStatus] = None
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=254)


class Technician(BaseModel):
    id: str
    name: str
    specialty: str
    status: TechnicianStatus = TechnicianStatus.AVAILABLE
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CommentCreate(BaseModel):
    """Model for creating a comment on an issue."""
    author_id: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1, max_length=1000)


class Comment(BaseModel):
    id: str
    issue_id: str
    author_id: str
    body: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
