import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.core.exceptions import ConstraintError, NotFoundError, ValidationError
from academic_records.core.models import Subject

from .schemas import SubjectCreate, SubjectResponse, SubjectUpdate

logger = logging.getLogger(__name__)


def _to_response(s: Subject) -> SubjectResponse:
    return SubjectResponse(id=s.id, name=s.name, code=s.code, max_marks=s.max_marks)


def _clean(value: str, field: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{field} is required", fields=[field])
    return cleaned


async def _existing_by_code(
    db: AsyncSession,
    code: str,
    exclude_subject_id: Optional[int] = None,
) -> Optional[Subject]:
    stmt = select(Subject).where(Subject.code == code)
    if exclude_subject_id is not None:
        stmt = stmt.where(Subject.id != exclude_subject_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


def _conflict(code: str) -> ConstraintError:
    logger.warning("Subject code %r already exists", code)
    return ConstraintError(f"Subject code '{code}' already exists")


async def list_subjects(db: AsyncSession) -> List[SubjectResponse]:
    result = await db.execute(select(Subject).order_by(Subject.name, Subject.id))
    return [_to_response(s) for s in result.scalars().all()]


async def get_subject_model(db: AsyncSession, subject_id: int) -> Subject:
    result = await db.execute(select(Subject).where(Subject.id == subject_id))
    obj = result.scalar_one_or_none()
    if not obj:
        raise NotFoundError("Subject not found")
    return obj


async def get_subject(db: AsyncSession, subject_id: int) -> SubjectResponse:
    return _to_response(await get_subject_model(db, subject_id))


async def create_subject(db: AsyncSession, payload: SubjectCreate) -> SubjectResponse:
    name = _clean(payload.name, "name")
    code = _clean(payload.code, "code").upper()
    if await _existing_by_code(db, code):
        raise _conflict(code)
    try:
        obj = Subject(name=name, code=code, max_marks=payload.max_marks)
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        # lost a race with a concurrent insert of the same code
        await db.rollback()
        raise _conflict(code)
    logger.info("Created subject %s (id=%s)", obj.code, obj.id)
    return _to_response(obj)


async def update_subject(db: AsyncSession, subject_id: int, payload: SubjectUpdate) -> SubjectResponse:
    name = _clean(payload.name, "name") if payload.name is not None else None
    code = _clean(payload.code, "code").upper() if payload.code is not None else None
    obj = await get_subject_model(db, subject_id)
    if code is not None and code != obj.code and await _existing_by_code(db, code, exclude_subject_id=subject_id):
        raise _conflict(code)
    if name is not None:
        obj.name = name
    if code is not None:
        obj.code = code
    if payload.max_marks is not None:
        obj.max_marks = payload.max_marks
    # rollback expires obj, so the code for the error is read before committing
    target_code = obj.code
    try:
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise _conflict(target_code)
    return _to_response(obj)


async def delete_subject(db: AsyncSession, subject_id: int) -> None:
    """Delete a subject; enrollments referencing it and their marks are removed with it."""
    obj = await get_subject_model(db, subject_id)
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted subject %s (id=%s) with its enrollments and marks", obj.code, subject_id)
