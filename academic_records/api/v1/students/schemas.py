from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from academic_records.core.enums import PerformanceBand


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    class_name: str = Field(..., min_length=1, max_length=10, description="Class, e.g. '10'")
    section: str = Field(..., min_length=1, max_length=5, description="Section, e.g. 'A'")


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    class_name: Optional[str] = Field(None, min_length=1, max_length=10)
    section: Optional[str] = Field(None, min_length=1, max_length=5)


class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: Optional[str] = Field(None, description="Human-readable code, e.g. STU001")
    name: str
    class_name: str
    section: str
    created_at: datetime


class StudentWithStats(StudentResponse):
    subject_count: int = 0
    average_percentage: float = Field(0.0, description="Mean marks percentage; 0 when the student has no marks")
    performance_band: PerformanceBand = PerformanceBand.POOR
