"""
Enrollments: enriched listings and reconciliation of a student's subject set.

Reconciliation computes the delta between the subjects a student is enrolled in and the
desired set: enrollments for dropped subjects are deleted (their marks cascade), missing
ones are created. Subjects present on both sides are left untouched, so their marks survive.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.api.v1.students import service as student_service
from academic_records.core.exceptions import ConstraintError, NotFoundError
from academic_records.core.models import Enrollment, Marks, Student, Subject

from .schemas import EnrollmentDelta, EnrollmentRemoveResponse, EnrollmentWithDetails

logger = logging.getLogger(__name__)


def format_class_section(class_name: str, section: str) -> str:
    return f"{class_name}-{section}"


def _row_to_details(row) -> EnrollmentWithDetails:
    e = row.Enrollment
    return EnrollmentWithDetails(
        id=e.id,
        student_id=e.student_id,
        subject_id=e.subject_id,
        enrollment_date=e.enrollment_date,
        student_name=row.student_name,
        subject_name=row.subject_name,
        subject_code=row.subject_code,
        class_section=format_class_section(row.class_name, row.section),
    )


async def list_enrollments(
    db: AsyncSession,
    student_id: Optional[int] = None,
) -> List[EnrollmentWithDetails]:
    """All enrollments newest first, or one student's enrollments by subject name."""
    stmt = (
        select(
            Enrollment,
            Student.name.label("student_name"),
            Student.class_name.label("class_name"),
            Student.section.label("section"),
            Subject.name.label("subject_name"),
            Subject.code.label("subject_code"),
        )
        .join(Student, Enrollment.student_id == Student.id)
        .join(Subject, Enrollment.subject_id == Subject.id)
    )
    if student_id is not None:
        stmt = stmt.where(Enrollment.student_id == student_id).order_by(Subject.name, Subject.id)
    else:
        stmt = stmt.order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc())
    result = await db.execute(stmt)
    return [_row_to_details(row) for row in result.all()]


async def current_subject_ids(db: AsyncSession, student_id: int) -> set:
    result = await db.execute(select(Enrollment.subject_id).where(Enrollment.student_id == student_id))
    return set(result.scalars().all())


async def set_enrollments(
    db: AsyncSession,
    student_id: int,
    subject_ids: Iterable[int],
) -> EnrollmentDelta:
    """
    Make the student's enrollments equal to `subject_ids`, touching only the difference.

    Runs as one transaction. The student row is locked first so two concurrent
    reconciles for the same student cannot interleave their delete/insert sequences.
    """
    desired = set(subject_ids)
    try:
        await student_service.get_student_model(db, student_id, for_update=True)
        if desired:
            found = await db.execute(select(Subject.id).where(Subject.id.in_(sorted(desired))))
            missing = sorted(desired - set(found.scalars().all()))
            if missing:
                raise NotFoundError(f"Subjects not found: {', '.join(str(m) for m in missing)}")

        current = await current_subject_ids(db, student_id)
        to_remove = current - desired
        to_add = desired - current

        if to_remove:
            await db.execute(
                delete(Enrollment).where(
                    Enrollment.student_id == student_id,
                    Enrollment.subject_id.in_(sorted(to_remove)),
                )
            )
        for subject_id in sorted(to_add):
            db.add(Enrollment(student_id=student_id, subject_id=subject_id))
        await db.commit()
    except NotFoundError:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        logger.warning("Enrollment conflict while reconciling student id=%s", student_id)
        raise ConstraintError("Enrollment changed concurrently, reload and retry")

    delta = EnrollmentDelta(added=sorted(to_add), removed=sorted(to_remove))
    if delta.added or delta.removed:
        logger.info(
            "Reconciled enrollments for student id=%s: added=%s removed=%s",
            student_id,
            delta.added,
            delta.removed,
        )
    return delta


async def remove_enrollment(
    db: AsyncSession,
    student_id: int,
    subject_id: int,
) -> EnrollmentRemoveResponse:
    """Delete one enrollment. Its marks row, if any, is deleted with it."""
    result = await db.execute(
        select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.subject_id == subject_id,
        )
    )
    obj = result.scalar_one_or_none()
    if not obj:
        raise NotFoundError("Enrollment not found")
    marks_deleted = (
        await db.execute(select(func.count(Marks.id)).where(Marks.enrollment_id == obj.id))
    ).scalar_one()
    await db.delete(obj)
    await db.commit()
    if marks_deleted:
        logger.warning(
            "Removed enrollment student id=%s subject id=%s and %s marks row(s)",
            student_id,
            subject_id,
            marks_deleted,
        )
    return EnrollmentRemoveResponse(student_id=student_id, subject_id=subject_id, marks_deleted=marks_deleted)
