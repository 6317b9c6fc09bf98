"""
Движок удержаний за невыполненные обязательства.

Чистые вычисления без I/O: штрафной процент равен сумме весов невыполненных
обязательств, удержание округляется один раз (half-up до минимальной единицы валюты).
"""

from decimal import Decimal
from typing import Optional

from core.config.settings import settings
from domain.values import (
    OBLIGATION_KINDS,
    DeductionBreakdown,
    LessonFact,
    MoneyLike,
    ObligationConfig,
    ObligationState,
    round_money,
    to_money,
)


class DeductionRuleEngine:
    """Расчёт удержания по одному уроку."""

    def __init__(self, minor_unit: Optional[Decimal] = None):
        self.minor_unit = minor_unit if minor_unit is not None else settings.currency_minor_unit

    @staticmethod
    def penalty_percent(state: ObligationState, config: ObligationConfig) -> int:
        """Сумма весов невыполненных обязательств (0..100 при валидной конфигурации)."""
        return sum(config.percent_for(kind) for kind in OBLIGATION_KINDS if not state.is_met(kind))

    def lesson_gross_amount(self, lesson: LessonFact) -> Decimal:
        """Оплата урока до удержаний: длительность × зафиксированная ставка."""
        rate = to_money(lesson.hourly_rate_snapshot)
        return round_money(rate * lesson.duration_minutes / 60, self.minor_unit)

    def compute(
        self,
        gross_amount: MoneyLike,
        state: ObligationState,
        config: ObligationConfig,
    ) -> DeductionBreakdown:
        """
        Считает удержание и сумму к выплате по уроку.

        deduction = round(gross * penalty / 100), net = gross - deduction.
        Невыполненные обязательства являются штатной ситуацией, не ошибкой.
        """
        gross = to_money(gross_amount)
        if gross < 0:
            raise ValueError(f"Gross amount must not be negative, got {gross}")
        if gross != round_money(gross, self.minor_unit):
            raise ValueError(f"Gross amount {gross} is not expressed in minor currency units")

        penalty = self.penalty_percent(state, config)
        deduction = round_money(gross * penalty / 100, self.minor_unit)
        net = gross - deduction

        return DeductionBreakdown(
            gross_amount=gross,
            deduction_amount=deduction,
            net_amount=net,
            penalty_percent=penalty,
            missing_obligations=state.missing,
        )
