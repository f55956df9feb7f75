"""Students. `student_id` is the human-readable code (STU001, STU002, ...) derived from `id`."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from academic_records.db.session import Base, utcnow


class Student(Base):
    __tablename__ = "students"
    # never reuse ids on SQLite; student codes are derived from them
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    student_id = Column(String(20), unique=True, nullable=True)  # set right after insert, same transaction
    class_name = Column("class", String(10), nullable=False)
    section = Column(String(5), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    enrollments = relationship(
        "Enrollment",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
