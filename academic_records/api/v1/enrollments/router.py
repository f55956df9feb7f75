from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.core.exceptions import ServiceError
from academic_records.db.session import get_db

from .schemas import EnrollmentRemoveResponse, EnrollmentSetRequest, EnrollmentWithDetails
from . import service

router = APIRouter(prefix="/api/v1", tags=["enrollments"])


@router.get("/enrollments", response_model=List[EnrollmentWithDetails])
async def list_enrollments(db: AsyncSession = Depends(get_db)):
    return await service.list_enrollments(db)


@router.get("/students/{student_id}/enrollments", response_model=List[EnrollmentWithDetails])
async def list_student_enrollments(
    student_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await service.list_enrollments(db, student_id=student_id)


@router.put("/students/{student_id}/enrollments", status_code=status.HTTP_204_NO_CONTENT)
async def set_student_enrollments(
    student_id: int,
    payload: EnrollmentSetRequest,
    db: AsyncSession = Depends(get_db),
):
    """Replace the student's subject set. Marks of dropped subjects are deleted."""
    try:
        await service.set_enrollments(db, student_id, payload.subject_ids)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/enrollments/{student_id}/{subject_id}", response_model=EnrollmentRemoveResponse)
async def remove_enrollment(
    student_id: int,
    subject_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Remove one enrollment. Any marks recorded for it are deleted as well."""
    try:
        return await service.remove_enrollment(db, student_id, subject_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
