"""
User models. Identity comes from an external auth provider;
this service only keeps the profile and its opaque provider reference.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional
from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserCreate(BaseModel):
    """Model for creating a new user."""
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    role: Optional[UserRole] = None
    credibility_score: Optional[int] = Field(None, ge=0, le=10, description="Informational reputation (default 7)")
    external_auth_id: Optional[str] = Field(None, description="Identity-provider reference (e.g. Firebase UID)")


class User(BaseModel):
    """Stored user profile."""
    id: str
    username: str
    email: str
    role: UserRole = UserRole.USER
    credibility_score: int = 7
    external_auth_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
