from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from academic_records.core.models.subject import DEFAULT_MAX_MARKS


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=20)
    max_marks: int = Field(DEFAULT_MAX_MARKS, gt=0, description="CAT1 (50) + CAT2 (50) + FAT (100)")


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    max_marks: Optional[int] = Field(None, gt=0)


class SubjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    max_marks: int
