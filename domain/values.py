"""Неизменяемые значения движка расчёта зарплат: конфигурация, обязательства, урок, удержание."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

from core.config.settings import settings
from domain.exceptions import InvalidConfigError

MoneyLike = Union[Decimal, int, str]

ZERO = Decimal("0")


def to_money(value: MoneyLike) -> Decimal:
    """Приводит значение к Decimal без потери точности (float не принимается)."""
    if isinstance(value, float):
        raise TypeError("Money values must not be floats")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: MoneyLike, minor_unit: Optional[Decimal] = None) -> Decimal:
    """Округление half-up до минимальной единицы валюты."""
    unit = minor_unit if minor_unit is not None else settings.currency_minor_unit
    return to_money(value).quantize(unit, rounding=ROUND_HALF_UP)


class ObligationKind(str, Enum):
    """Четыре обязательных действия преподавателя по уроку."""

    ABSENCE = "absence"
    FEEDBACK = "feedback"
    VOICE = "voice"
    TEXT = "text"


# Фиксированный порядок обхода обязательств
OBLIGATION_KINDS = (
    ObligationKind.ABSENCE,
    ObligationKind.FEEDBACK,
    ObligationKind.VOICE,
    ObligationKind.TEXT,
)


@dataclass(frozen=True)
class ObligationConfig:
    """
    Веса обязательств в процентах.

    Создаётся только валидным: каждый процент целый в [0, 100], сумма ровно 100.
    Один экземпляр на запуск расчёта (снимок настроек на момент старта).
    """

    absence_percent: int
    feedback_percent: int
    voice_percent: int
    text_percent: int
    version: int = 0

    def __post_init__(self):
        percents = self.as_dict()
        for name, value in percents.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigError(f"{name} must be an integer, got {value!r}", percents)
            if value < 0 or value > 100:
                raise InvalidConfigError(f"{name} must be between 0 and 100, got {value}", percents)
        total = sum(percents.values())
        if total != 100:
            raise InvalidConfigError(f"percents must sum to 100, got {total}", percents)

    @classmethod
    def default(cls) -> "ObligationConfig":
        return cls(absence_percent=25, feedback_percent=25, voice_percent=25, text_percent=25)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], version: int = 0) -> "ObligationConfig":
        """Строит конфигурацию из словаря с ключами ``*_percent``."""
        try:
            return cls(
                absence_percent=data["absence_percent"],
                feedback_percent=data["feedback_percent"],
                voice_percent=data["voice_percent"],
                text_percent=data["text_percent"],
                version=version,
            )
        except KeyError as e:
            raise InvalidConfigError(f"missing {e.args[0]}", dict(data)) from e

    def percent_for(self, kind: ObligationKind) -> int:
        return {
            ObligationKind.ABSENCE: self.absence_percent,
            ObligationKind.FEEDBACK: self.feedback_percent,
            ObligationKind.VOICE: self.voice_percent,
            ObligationKind.TEXT: self.text_percent,
        }[kind]

    def as_dict(self) -> Dict[str, int]:
        return {
            "absence_percent": self.absence_percent,
            "feedback_percent": self.feedback_percent,
            "voice_percent": self.voice_percent,
            "text_percent": self.text_percent,
        }


@dataclass(frozen=True)
class ObligationState:
    """Выполнение четырёх обязательств по одному уроку (вычисляется, не хранится)."""

    absence_marked: bool
    feedback_complete: bool
    voice_sent: bool
    text_sent: bool

    def is_met(self, kind: ObligationKind) -> bool:
        return {
            ObligationKind.ABSENCE: self.absence_marked,
            ObligationKind.FEEDBACK: self.feedback_complete,
            ObligationKind.VOICE: self.voice_sent,
            ObligationKind.TEXT: self.text_sent,
        }[kind]

    @property
    def missing(self) -> FrozenSet[ObligationKind]:
        return frozenset(kind for kind in OBLIGATION_KINDS if not self.is_met(kind))

    @property
    def completed_count(self) -> int:
        return len(OBLIGATION_KINDS) - len(self.missing)


@dataclass(frozen=True)
class LessonFact:
    """Проекция проведённого урока только для чтения."""

    lesson_id: int
    teacher_id: int
    group_id: Optional[int]
    scheduled_at: datetime
    duration_minutes: int
    hourly_rate_snapshot: Decimal
    status: str
    lesson_name: str = "Untitled Lesson"


@dataclass(frozen=True)
class DeductionBreakdown:
    """Расчёт удержания по одному уроку."""

    gross_amount: Decimal
    deduction_amount: Decimal
    net_amount: Decimal
    penalty_percent: int
    missing_obligations: FrozenSet[ObligationKind] = field(default_factory=frozenset)

    @property
    def missing_codes(self) -> list:
        """Коды невыполненных обязательств в фиксированном порядке."""
        return [kind.value for kind in OBLIGATION_KINDS if kind in self.missing_obligations]
