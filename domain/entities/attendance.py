"""Модель отметки посещаемости."""

from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from .base import Base


class Attendance(Base):
    """Отметка присутствия/отсутствия студента на уроке."""

    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("lesson_id", "student_id", name="uq_attendance_lesson_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    is_present = Column(Boolean, nullable=False)
    marked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
