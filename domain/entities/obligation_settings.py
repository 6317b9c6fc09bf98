"""Модель настроек весов обязательств (одна строка на систему)."""

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from .base import Base, utcnow

SINGLETON_ID = 1


class ObligationSettings(Base):
    """
    Веса четырёх обязательств в процентах.

    Инвариант: каждый процент в [0, 100], сумма ровно 100.
    Проверяется сервисом до записи и CHECK-ограничениями в БД.
    """

    __tablename__ = "obligation_settings"
    __table_args__ = (
        CheckConstraint("absence_percent BETWEEN 0 AND 100", name="ck_absence_percent_range"),
        CheckConstraint("feedback_percent BETWEEN 0 AND 100", name="ck_feedback_percent_range"),
        CheckConstraint("voice_percent BETWEEN 0 AND 100", name="ck_voice_percent_range"),
        CheckConstraint("text_percent BETWEEN 0 AND 100", name="ck_text_percent_range"),
        CheckConstraint(
            "absence_percent + feedback_percent + voice_percent + text_percent = 100",
            name="ck_obligation_percents_sum",
        ),
    )

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    absence_percent = Column(Integer, nullable=False, default=25)
    feedback_percent = Column(Integer, nullable=False, default=25)
    voice_percent = Column(Integer, nullable=False, default=25)
    text_percent = Column(Integer, nullable=False, default=25)

    # Версия растёт при каждом изменении; попадает в снимок каждой записи зарплаты
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    updated_by = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ObligationSettings(version={self.version}, absence={self.absence_percent}, "
            f"feedback={self.feedback_percent}, voice={self.voice_percent}, text={self.text_percent})>"
        )
