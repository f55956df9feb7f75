from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.core.exceptions import ServiceError
from academic_records.db.session import get_db

from .schemas import MarksCreate, MarksResponse, MarksUpdate, MarksWithDetails
from . import service

router = APIRouter(prefix="/api/v1", tags=["marks"])


@router.get("/marks", response_model=List[MarksWithDetails])
async def list_marks(db: AsyncSession = Depends(get_db)):
    return await service.list_marks(db)


@router.post("/marks", response_model=MarksResponse, status_code=status.HTTP_201_CREATED)
async def save_marks(
    payload: MarksCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create or overwrite marks for an enrollment."""
    try:
        return await service.save_marks(db, payload.enrollment_id, payload.cat1, payload.cat2, payload.fat)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/enrollments/{enrollment_id}/marks", response_model=MarksResponse)
async def get_marks(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.get_marks(db, enrollment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.put("/enrollments/{enrollment_id}/marks", response_model=MarksResponse)
async def update_marks(
    enrollment_id: int,
    payload: MarksUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.update_marks(db, enrollment_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/enrollments/{enrollment_id}/marks", status_code=status.HTTP_204_NO_CONTENT)
async def delete_marks(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db),
):
    await service.delete_marks(db, enrollment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
