"""
User endpoints. Authentication itself happens in the identity provider;
these routes only manage profiles and the "my reports" view.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.issue import IssueWithReporter
from app.models.user import User, UserCreate
from app.routes.deps import get_store
from app.services.issue_store import InvariantViolation, IssueStore

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, store: IssueStore = Depends(get_store)):
    if payload.external_auth_id and store.get_user_by_external_auth_id(payload.external_auth_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this external auth id already exists",
        )
    try:
        return store.create_user(payload.model_dump())
    except InvariantViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/by-auth/{external_auth_id}", response_model=User)
async def get_user_by_external_auth_id(external_auth_id: str, store: IssueStore = Depends(get_store)):
    user = store.get_user_by_external_auth_id(external_auth_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: str, store: IssueStore = Depends(get_store)):
    user = store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found")
    return user


@router.get("/{user_id}/issues", response_model=List[IssueWithReporter])
async def get_user_issues(user_id: str, store: IssueStore = Depends(get_store)):
    """Issues reported by this user, newest first."""
    if store.get_user(user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found")
    return store.get_user_issues(user_id)
