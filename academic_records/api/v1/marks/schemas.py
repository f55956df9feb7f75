from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from academic_records.core.enums import PerformanceBand

from .calculator import CAT1_MAX, CAT2_MAX, FAT_MAX


class MarksCreate(BaseModel):
    enrollment_id: int
    cat1: Decimal = Field(..., ge=0, le=CAT1_MAX)
    cat2: Decimal = Field(..., ge=0, le=CAT2_MAX)
    fat: Decimal = Field(..., ge=0, le=FAT_MAX)


class MarksUpdate(BaseModel):
    """Partial update; omitted components keep their stored value."""

    cat1: Optional[Decimal] = Field(None, ge=0, le=CAT1_MAX)
    cat2: Optional[Decimal] = Field(None, ge=0, le=CAT2_MAX)
    fat: Optional[Decimal] = Field(None, ge=0, le=FAT_MAX)


class MarksResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    enrollment_id: int
    cat1: float
    cat2: float
    fat: float
    total_marks: float
    percentage: float
    updated_at: datetime
    performance_band: PerformanceBand


class MarksWithDetails(MarksResponse):
    student_name: str
    student_code: Optional[str] = Field(None, description="Student's human-readable code, e.g. STU001")
    subject_name: str
    subject_code: str
