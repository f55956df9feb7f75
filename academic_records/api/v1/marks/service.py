"""
Marks persistence.

save_marks is an upsert keyed on enrollment_id: on PostgreSQL and SQLite it is a single
INSERT ... ON CONFLICT DO UPDATE; elsewhere it falls back to check-then-write under the
enrollment row lock. update_marks locks the stored row before merging the partial input.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.core.exceptions import NotFoundError, ValidationError
from academic_records.core.models import Enrollment, Marks, Student, Subject
from academic_records.db.session import utcnow

from . import calculator
from .schemas import MarksResponse, MarksUpdate, MarksWithDetails

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _response_fields(m: Marks) -> dict:
    return dict(
        id=m.id,
        enrollment_id=m.enrollment_id,
        cat1=m.cat1,
        cat2=m.cat2,
        fat=m.fat,
        total_marks=m.total_marks,
        percentage=m.percentage,
        updated_at=m.updated_at,
        performance_band=calculator.performance_band(m.percentage),
    )


def _to_response(m: Marks) -> MarksResponse:
    return MarksResponse(**_response_fields(m))


async def _find_marks(db: AsyncSession, enrollment_id: int, for_update: bool = False) -> Optional[Marks]:
    stmt = select(Marks).where(Marks.enrollment_id == enrollment_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _lock_enrollment(db: AsyncSession, enrollment_id: int) -> Enrollment:
    result = await db.execute(select(Enrollment).where(Enrollment.id == enrollment_id).with_for_update())
    enrollment = result.scalar_one_or_none()
    if not enrollment:
        raise NotFoundError("Enrollment not found")
    return enrollment


async def list_marks(db: AsyncSession) -> List[MarksWithDetails]:
    stmt = (
        select(
            Marks,
            Student.name.label("student_name"),
            Student.student_id.label("student_code"),
            Subject.name.label("subject_name"),
            Subject.code.label("subject_code"),
        )
        .join(Enrollment, Marks.enrollment_id == Enrollment.id)
        .join(Student, Enrollment.student_id == Student.id)
        .join(Subject, Enrollment.subject_id == Subject.id)
        .order_by(Marks.updated_at.desc(), Marks.id.desc())
    )
    result = await db.execute(stmt)
    return [
        MarksWithDetails(
            **_response_fields(row.Marks),
            student_name=row.student_name,
            student_code=row.student_code,
            subject_name=row.subject_name,
            subject_code=row.subject_code,
        )
        for row in result.all()
    ]


async def get_marks(db: AsyncSession, enrollment_id: int) -> MarksResponse:
    obj = await _find_marks(db, enrollment_id)
    if not obj:
        raise NotFoundError("Marks not found")
    return _to_response(obj)


async def save_marks(
    db: AsyncSession,
    enrollment_id: int,
    cat1: calculator.Number,
    cat2: calculator.Number,
    fat: calculator.Number,
) -> MarksResponse:
    """Insert or overwrite the marks for an enrollment; total and percentage are recomputed."""
    values = calculator.calculate(cat1, cat2, fat)
    values["updated_at"] = utcnow()
    try:
        await _lock_enrollment(db, enrollment_id)
        insert_fn = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
        if insert_fn is not None:
            stmt = insert_fn(Marks).values(enrollment_id=enrollment_id, **values)
            stmt = stmt.on_conflict_do_update(index_elements=[Marks.enrollment_id], set_=values)
            await db.execute(stmt)
        else:
            existing = await _find_marks(db, enrollment_id, for_update=True)
            if existing:
                for field, value in values.items():
                    setattr(existing, field, value)
            else:
                db.add(Marks(enrollment_id=enrollment_id, **values))
            await db.flush()
        obj = await _find_marks(db, enrollment_id)
        await db.commit()
    except NotFoundError:
        await db.rollback()
        raise
    logger.info(
        "Saved marks for enrollment id=%s: total=%s percentage=%s",
        enrollment_id,
        values["total_marks"],
        values["percentage"],
    )
    return _to_response(obj)


async def update_marks(db: AsyncSession, enrollment_id: int, payload: MarksUpdate) -> MarksResponse:
    """Merge a partial update with the stored components, then recompute total and percentage."""
    obj = await _find_marks(db, enrollment_id, for_update=True)
    if not obj:
        await db.rollback()
        raise NotFoundError("Marks not found for this enrollment")
    try:
        values = calculator.calculate(
            payload.cat1 if payload.cat1 is not None else obj.cat1,
            payload.cat2 if payload.cat2 is not None else obj.cat2,
            payload.fat if payload.fat is not None else obj.fat,
        )
    except ValidationError:
        await db.rollback()
        raise
    for field, value in values.items():
        setattr(obj, field, value)
    obj.updated_at = utcnow()
    await db.commit()
    await db.refresh(obj)
    logger.info("Updated marks for enrollment id=%s: percentage=%s", enrollment_id, obj.percentage)
    return _to_response(obj)


async def delete_marks(db: AsyncSession, enrollment_id: int) -> bool:
    """Remove the marks row for an enrollment. Deleting marks that do not exist is a no-op."""
    result = await db.execute(delete(Marks).where(Marks.enrollment_id == enrollment_id))
    await db.commit()
    return bool(result.rowcount)
