"""Модель студента."""

from enum import Enum

from sqlalchemy import Column, Integer, String
from .base import Base


class StudentStatus(str, Enum):
    """Статусы студента."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    WITHDRAWN = "WITHDRAWN"


class Student(Base):
    """Студент."""

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=StudentStatus.ACTIVE.value, index=True)

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, status='{self.status}')>"
