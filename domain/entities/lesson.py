"""Модель урока."""

from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from .base import Base


class LessonStatus(str, Enum):
    """Статусы урока."""
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    MISSED = "MISSED"


class Lesson(Base):
    """Урок группы."""

    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="SET NULL"), nullable=True, index=True)
    topic = Column(String(255), nullable=True)

    # Время хранится в UTC
    scheduled_at = Column(DateTime, nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    status = Column(String(20), nullable=False, default=LessonStatus.SCHEDULED.value, index=True)

    # Ставка преподавателя, зафиксированная при проведении урока
    hourly_rate_snapshot = Column(Numeric(12, 2), nullable=True)
    completed_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, teacher_id={self.teacher_id}, status='{self.status}')>"
