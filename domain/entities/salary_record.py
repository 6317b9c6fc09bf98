"""Модель месячной записи зарплаты преподавателя."""

from enum import Enum

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, ForeignKey, UniqueConstraint
from .base import Base, JSONType, utcnow


class SalaryStatus(str, Enum):
    """Статусы записи зарплаты."""
    PENDING = "PENDING"
    PAID = "PAID"


class SalaryRecord(Base):
    """
    Зарплата преподавателя за календарный месяц.

    Одна запись на (teacher_id, year, month). PENDING пересчитывается целиком,
    PAID неизменна (кроме метаданных аудита).
    """

    __tablename__ = "salary_records"
    __table_args__ = (
        UniqueConstraint("teacher_id", "year", "month", name="uq_salary_record_teacher_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)

    # Агрегаты по урокам
    lessons_count = Column(Integer, nullable=False, default=0)
    gross_amount = Column(Numeric(12, 2), nullable=False, default=0)
    deduction_amount = Column(Numeric(12, 2), nullable=False, default=0)
    net_amount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default=SalaryStatus.PENDING.value, index=True)
    generated_at = Column(DateTime(timezone=True), nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    # Снимок весов обязательств, с которыми выполнен расчёт
    config_version = Column(Integer, nullable=False, default=0)
    config_snapshot = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def is_paid(self) -> bool:
        return self.status == SalaryStatus.PAID.value

    @property
    def period_label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __repr__(self) -> str:
        return (
            f"<SalaryRecord(id={self.id}, teacher_id={self.teacher_id}, "
            f"period={self.period_label}, net_amount={self.net_amount}, status='{self.status}')>"
        )
