from academic_records.core.models.student import Student
from academic_records.core.models.subject import Subject
from academic_records.core.models.enrollment import Enrollment
from academic_records.core.models.marks import Marks

__all__ = [
    "Student",
    "Subject",
    "Enrollment",
    "Marks",
]
