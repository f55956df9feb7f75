"""
Marks per enrollment.

total_marks and percentage are derived columns: every write recomputes them from
cat1/cat2/fat (see api/v1/marks/calculator.py). They are never accepted from callers.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship

from academic_records.db.session import Base, utcnow


class Marks(Base):
    __tablename__ = "marks"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    enrollment_id = Column(
        Integer,
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    cat1 = Column(Numeric(5, 2), nullable=False, default=0)
    cat2 = Column(Numeric(5, 2), nullable=False, default=0)
    fat = Column(Numeric(5, 2), nullable=False, default=0)
    total_marks = Column(Numeric(6, 2), nullable=False, default=0)
    percentage = Column(Numeric(5, 2), nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    enrollment = relationship("Enrollment", back_populates="marks")
