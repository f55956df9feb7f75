from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    subject_id: int
    enrollment_date: datetime


class EnrollmentWithDetails(EnrollmentResponse):
    student_name: str
    subject_name: str
    subject_code: str
    class_section: str = Field(..., description="'{class}-{section}', e.g. '10-A'")


class EnrollmentSetRequest(BaseModel):
    subject_ids: List[int] = Field(..., description="Full desired set of subject ids for the student")


class EnrollmentDelta(BaseModel):
    """What a reconcile call changed."""

    added: List[int] = Field(default_factory=list)
    removed: List[int] = Field(default_factory=list)


class EnrollmentRemoveResponse(BaseModel):
    student_id: int
    subject_id: int
    marks_deleted: int = Field(..., description="Marks rows removed together with the enrollment")
