from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.api.v1.marks.calculator import performance_band
from academic_records.api.v1.students import service as student_service
from academic_records.api.v1.students.schemas import StudentWithStats
from academic_records.core.models import Enrollment, Marks, Student, Subject

from .schemas import StatsResponse, SubjectPerformance

DEFAULT_TOP_PERFORMERS = 5


async def compute_stats(db: AsyncSession) -> StatsResponse:
    """Student count, subject count and mean marks percentage, read in a single statement."""
    stmt = select(
        select(func.count(Student.id)).scalar_subquery().label("total_students"),
        select(func.count(Subject.id)).scalar_subquery().label("active_subjects"),
        select(func.coalesce(func.avg(Marks.percentage), 0)).scalar_subquery().label("average_score"),
    )
    row = (await db.execute(stmt)).one()
    return StatsResponse(
        total_students=int(row.total_students or 0),
        active_subjects=int(row.active_subjects or 0),
        average_score=round(float(row.average_score or 0), 2),
    )


async def top_performers(db: AsyncSession, limit: int = DEFAULT_TOP_PERFORMERS) -> List[StudentWithStats]:
    """Students with a positive average, best first."""
    average = func.avg(Marks.percentage)
    stmt = (
        student_service.student_stats_query()
        .having(average > 0)
        .order_by(average.desc(), Student.id)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return [student_service.row_to_stats(row) for row in result.all()]


async def subject_performance(db: AsyncSession) -> List[SubjectPerformance]:
    """Mean marks percentage per subject, for subjects with at least one marks row."""
    average = func.avg(Marks.percentage)
    stmt = (
        select(
            Subject.id,
            Subject.name,
            Subject.code,
            func.count(Marks.id).label("marks_count"),
            average.label("average_percentage"),
        )
        .join(Enrollment, Enrollment.subject_id == Subject.id)
        .join(Marks, Marks.enrollment_id == Enrollment.id)
        .group_by(Subject.id, Subject.name, Subject.code)
        .order_by(average.desc(), Subject.name)
    )
    result = await db.execute(stmt)
    out = []
    for row in result.all():
        avg = round(float(row.average_percentage), 2)
        out.append(
            SubjectPerformance(
                subject_id=row.id,
                subject_name=row.name,
                subject_code=row.code,
                marks_count=row.marks_count,
                average_percentage=avg,
                performance_band=performance_band(avg),
            )
        )
    return out
