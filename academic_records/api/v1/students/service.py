import logging
from typing import List, Optional

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.api.v1.marks.calculator import performance_band
from academic_records.core.exceptions import ConstraintError, NotFoundError, ValidationError
from academic_records.core.models import Enrollment, Marks, Student

from .schemas import StudentCreate, StudentResponse, StudentUpdate, StudentWithStats

logger = logging.getLogger(__name__)

STUDENT_CODE_PREFIX = "STU"


def format_student_code(sequence: int) -> str:
    """STU + sequence zero-padded to at least 3 digits (STU001, STU042, STU1234)."""
    return f"{STUDENT_CODE_PREFIX}{sequence:03d}"


def _to_response(s: Student) -> StudentResponse:
    return StudentResponse(
        id=s.id,
        student_id=s.student_id,
        name=s.name,
        class_name=s.class_name,
        section=s.section,
        created_at=s.created_at,
    )


def row_to_stats(row) -> StudentWithStats:
    s = row.Student
    average = round(float(row.average_percentage or 0), 2)
    return StudentWithStats(
        id=s.id,
        student_id=s.student_id,
        name=s.name,
        class_name=s.class_name,
        section=s.section,
        created_at=s.created_at,
        subject_count=int(row.subject_count or 0),
        average_percentage=average,
        performance_band=performance_band(average),
    )


def _required(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} is required", fields=[field])
    return cleaned


def student_stats_query() -> Select:
    """One row per student with subject_count and average_percentage (0 when no marks)."""
    return (
        select(
            Student,
            func.count(Enrollment.id).label("subject_count"),
            func.coalesce(func.avg(Marks.percentage), 0).label("average_percentage"),
        )
        .outerjoin(Enrollment, Enrollment.student_id == Student.id)
        .outerjoin(Marks, Marks.enrollment_id == Enrollment.id)
        .group_by(Student.id)
    )


async def list_students(
    db: AsyncSession,
    search: Optional[str] = None,
    class_name: Optional[str] = None,
    section: Optional[str] = None,
) -> List[StudentWithStats]:
    stmt = student_stats_query()
    needle = (search or "").strip()
    if needle:
        stmt = stmt.where(
            or_(
                Student.name.icontains(needle, autoescape=True),
                Student.student_id.icontains(needle, autoescape=True),
            )
        )
    if class_name:
        stmt = stmt.where(Student.class_name == class_name)
    if section:
        stmt = stmt.where(Student.section == section)
    stmt = stmt.order_by(Student.created_at.desc(), Student.id.desc())
    result = await db.execute(stmt)
    return [row_to_stats(row) for row in result.all()]


async def get_student_model(db: AsyncSession, student_id: int, for_update: bool = False) -> Student:
    stmt = select(Student).where(Student.id == student_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    obj = result.scalar_one_or_none()
    if not obj:
        raise NotFoundError("Student not found")
    return obj


async def get_student(db: AsyncSession, student_id: int) -> StudentResponse:
    return _to_response(await get_student_model(db, student_id))


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    name = _required(payload.name, "name")
    class_name = _required(payload.class_name, "class_name")
    section = _required(payload.section, "section")
    try:
        obj = Student(name=name, class_name=class_name, section=section)
        db.add(obj)
        # The identity value is the sequence the code is derived from; both land in one transaction
        await db.flush()
        obj.student_id = format_student_code(obj.id)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        logger.warning("Student code collision while creating student %r", name)
        raise ConstraintError("Student code already exists")
    logger.info("Created student %s (id=%s)", obj.student_id, obj.id)
    return _to_response(obj)


async def update_student(db: AsyncSession, student_id: int, payload: StudentUpdate) -> StudentResponse:
    changes = {
        field: _required(value, field)
        for field, value in (
            ("name", payload.name),
            ("class_name", payload.class_name),
            ("section", payload.section),
        )
        if value is not None
    }
    obj = await get_student_model(db, student_id)
    for field, value in changes.items():
        setattr(obj, field, value)
    await db.commit()
    await db.refresh(obj)
    return _to_response(obj)


async def delete_student(db: AsyncSession, student_id: int) -> None:
    """Delete a student; enrollments and their marks go with it (ON DELETE CASCADE)."""
    obj = await get_student_model(db, student_id)
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted student %s (id=%s) with its enrollments and marks", obj.student_id, student_id)
