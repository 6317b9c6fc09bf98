"""Модель преподавателя (только поля, нужные для расчёта зарплаты)."""

from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime
from sqlalchemy.sql import func
from .base import Base


class Teacher(Base):
    """Преподаватель."""

    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=True)
    hourly_rate = Column(Numeric(12, 2), nullable=False, default=0)  # Текущая ставка
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id}, name='{self.full_name}')>"
