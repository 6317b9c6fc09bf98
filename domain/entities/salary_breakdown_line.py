"""Модель строки расшифровки зарплаты (один урок)."""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Boolean, ForeignKey, UniqueConstraint
from .base import Base, JSONType, utcnow


class SalaryBreakdownLine(Base):
    """
    Как было рассчитано удержание по уроку.

    Пишется в одной транзакции с родительской SalaryRecord и после этого
    не меняется; заменяется только целиком при пересчёте PENDING-записи.
    """

    __tablename__ = "salary_breakdown_lines"
    __table_args__ = (
        UniqueConstraint("salary_record_id", "lesson_id", name="uq_breakdown_line_record_lesson"),
    )

    id = Column(Integer, primary_key=True, index=True)
    salary_record_id = Column(
        Integer, ForeignKey("salary_records.id", ondelete="CASCADE"), nullable=False, index=True
    )
    lesson_id = Column(Integer, nullable=False, index=True)

    # Денормализованный снимок урока
    lesson_name = Column(String(255), nullable=False)
    lesson_date = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    hourly_rate_snapshot = Column(Numeric(12, 2), nullable=False)

    # Расчёт
    gross_amount = Column(Numeric(12, 2), nullable=False)
    deduction_amount = Column(Numeric(12, 2), nullable=False)
    net_amount = Column(Numeric(12, 2), nullable=False)
    penalty_percent = Column(Integer, nullable=False)

    # Обязательства на момент расчёта
    absence_marked = Column(Boolean, nullable=False)
    feedback_complete = Column(Boolean, nullable=False)
    voice_sent = Column(Boolean, nullable=False)
    text_sent = Column(Boolean, nullable=False)
    missing_obligations = Column(JSONType, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "lesson_id": self.lesson_id,
            "lesson_name": self.lesson_name,
            "lesson_date": self.lesson_date.isoformat() if self.lesson_date else None,
            "duration_minutes": self.duration_minutes,
            "hourly_rate_snapshot": str(self.hourly_rate_snapshot),
            "gross_amount": str(self.gross_amount),
            "deduction_amount": str(self.deduction_amount),
            "net_amount": str(self.net_amount),
            "penalty_percent": self.penalty_percent,
            "obligations": {
                "absence_marked": self.absence_marked,
                "feedback_complete": self.feedback_complete,
                "voice_sent": self.voice_sent,
                "text_sent": self.text_sent,
            },
            "missing_obligations": list(self.missing_obligations or []),
        }

    def __repr__(self) -> str:
        return (
            f"<SalaryBreakdownLine(record_id={self.salary_record_id}, lesson_id={self.lesson_id}, "
            f"net_amount={self.net_amount})>"
        )
