from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from academic_records.db.session import Base

# CAT1 (50) + CAT2 (50) + FAT (100)
DEFAULT_MAX_MARKS = 200


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    code = Column(String(20), unique=True, nullable=False)
    max_marks = Column(Integer, nullable=False, default=DEFAULT_MAX_MARKS)

    enrollments = relationship(
        "Enrollment",
        back_populates="subject",
        cascade="all, delete",
        passive_deletes=True,
    )
