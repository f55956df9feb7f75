from pydantic import BaseModel

from academic_records.core.enums import PerformanceBand


class StatsResponse(BaseModel):
    total_students: int
    active_subjects: int
    average_score: float


class SubjectPerformance(BaseModel):
    subject_id: int
    subject_name: str
    subject_code: str
    marks_count: int
    average_percentage: float
    performance_band: PerformanceBand
