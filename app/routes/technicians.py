"""
Technician endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.technician import Technician, TechnicianCreate, TechnicianUpdate
from app.routes.deps import get_store
from app.services.issue_store import InvariantViolation, IssueStore

router = APIRouter(prefix="/api/technicians", tags=["Technicians"])


@router.get("", response_model=List[Technician])
async def list_technicians(store: IssueStore = Depends(get_store)):
    return store.get_all_technicians()


@router.get("/{technician_id}", response_model=Technician)
async def get_technician(technician_id: str, store: IssueStore = Depends(get_store)):
    technician = store.get_technician(technician_id)
    if technician is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Technician {technician_id} not found")
    return technician


@router.post("", response_model=Technician, status_code=status.HTTP_201_CREATED)
async def create_technician(payload: TechnicianCreate, store: IssueStore = Depends(get_store)):
    try:
        return store.create_technician(payload.model_dump())
    except InvariantViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{technician_id}", response_model=Technician)
async def update_technician(technician_id: str, payload: TechnicianUpdate, store: IssueStore = Depends(get_store)):
    updates = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    try:
        technician = store.update_technician(technician_id, updates)
    except InvariantViolation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if technician is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Technician {technician_id} not found")
    return technician
