"""Сервис генерации месячной зарплаты преподавателя с удержаниями за невыполненные обязательства."""

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config.settings import settings
from core.database.session import get_async_session
from core.logging.logger import logger
from core.utils.period_helper import month_bounds, validate_period
from domain.entities.base import utcnow
from domain.entities.group import Group
from domain.entities.lesson import Lesson, LessonStatus
from domain.entities.salary_breakdown_line import SalaryBreakdownLine
from domain.entities.salary_record import SalaryRecord, SalaryStatus
from domain.entities.teacher import Teacher
from domain.exceptions import (
    CompensationError,
    SalaryAlreadyFinalizedError,
    TeacherNotFoundError,
    TransientPersistenceError,
)
from domain.values import ZERO, DeductionBreakdown, LessonFact, ObligationConfig, ObligationKind
from shared.services.deduction_rule_engine import DeductionRuleEngine
from shared.services.obligation_settings_service import ObligationSettingsService
from shared.services.obligation_tracker import ObligationTracker, lesson_fact_from_entity

# Ошибки фиксации, после которых попытка повторяется целиком в новой транзакции
TRANSIENT_ERRORS = (IntegrityError, OperationalError)

OUTCOME_CREATED = "created"
OUTCOME_REPLACED = "replaced"


@dataclass
class SalaryCalculation:
    """Результат шагов FETCH_LESSONS → EVALUATE_EACH → AGGREGATE (до записи)."""

    config: ObligationConfig
    lessons: List[Tuple[LessonFact, DeductionBreakdown]] = field(default_factory=list)
    gross_amount: Decimal = ZERO
    deduction_amount: Decimal = ZERO
    net_amount: Decimal = ZERO

    @property
    def lessons_count(self) -> int:
        return len(self.lessons)


@dataclass
class MonthlyGenerationReport:
    """Итог пакетной генерации за месяц."""

    year: int
    month: int
    total_teachers: int = 0
    generated: List[Dict] = field(default_factory=list)
    failed: List[Dict] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict:
        return {
            "year": self.year,
            "month": self.month,
            "total_teachers": self.total_teachers,
            "generated_count": len(self.generated),
            "failed_count": len(self.failed),
            "generated": self.generated,
            "failed": self.failed,
        }


class SalaryGenerationService:
    """
    Генерирует SalaryRecord за (teacher_id, year, month).

    Каждая попытка: снимок конфигурации, выборка уроков, оценка обязательств,
    расчёт удержаний, агрегация и запись одной транзакцией. Запись идёт через явный
    автомат: нет записи -> создать; PENDING -> заменить целиком; PAID -> отказ.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        rule_engine: Optional[DeductionRuleEngine] = None,
        session_factory: Optional[Callable] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.session = session
        self.rule_engine = rule_engine or DeductionRuleEngine()
        self.tracker = ObligationTracker(session)
        self.settings_service = ObligationSettingsService(session)
        self.session_factory = session_factory or get_async_session
        self.max_retries = max_retries if max_retries is not None else settings.salary_generation_max_retries
        self.retry_delay = (
            retry_delay if retry_delay is not None else settings.salary_generation_retry_delay_seconds
        )

    async def generate(self, teacher_id: int, year: int, month: int) -> SalaryRecord:
        """
        Рассчитывает и сохраняет зарплату преподавателя за месяц.

        Raises:
            ValueError: некорректный период
            TeacherNotFoundError: преподаватель не найден
            SalaryAlreadyFinalizedError: запись за период уже выплачена
            TransientPersistenceError: запись не удалось зафиксировать после всех попыток
        """
        validate_period(year, month)

        attempt = 0
        while True:
            attempt += 1
            try:
                record, outcome, calculation = await self._run_attempt(teacher_id, year, month)
                await self.session.commit()
            except TRANSIENT_ERRORS as e:
                await self.session.rollback()
                if attempt >= self.max_retries:
                    logger.error(
                        "Salary persist failed, retries exhausted",
                        teacher_id=teacher_id,
                        year=year,
                        month=month,
                        attempts=attempt,
                        error=str(e),
                    )
                    raise TransientPersistenceError(teacher_id, year, month, attempt) from e
                logger.warning(
                    "Salary persist conflict, retrying",
                    teacher_id=teacher_id,
                    year=year,
                    month=month,
                    attempt=attempt,
                    error=str(e),
                )
                await asyncio.sleep(self.retry_delay * attempt)
                continue
            except Exception:
                await self.session.rollback()
                raise

            logger.info(
                "Salary generated",
                outcome=outcome,
                salary_record_id=record.id,
                teacher_id=teacher_id,
                year=year,
                month=month,
                lessons_count=calculation.lessons_count,
                gross_amount=str(calculation.gross_amount),
                deduction_amount=str(calculation.deduction_amount),
                net_amount=str(calculation.net_amount),
                config_version=calculation.config.version,
                attempts=attempt,
            )
            return record

    async def regenerate_if_pending(self, teacher_id: int, year: int, month: int) -> Optional[SalaryRecord]:
        """
        Пересчитывает зарплату, только если за период уже есть PENDING-запись.

        Нет записи или запись выплачена: ничего не делает и возвращает None.
        """
        validate_period(year, month)
        result = await self.session.execute(
            select(SalaryRecord.status).where(
                SalaryRecord.teacher_id == teacher_id,
                SalaryRecord.year == year,
                SalaryRecord.month == month,
            )
        )
        status = result.scalar_one_or_none()

        if status is None:
            logger.debug("No salary record to recalculate", teacher_id=teacher_id, year=year, month=month)
            return None
        if status == SalaryStatus.PAID.value:
            logger.info("Salary already paid, recalculation skipped", teacher_id=teacher_id, year=year, month=month)
            return None

        try:
            return await self.generate(teacher_id, year, month)
        except SalaryAlreadyFinalizedError:
            # Выплачена между проверкой и пересчётом
            logger.info("Salary paid during recalculation, skipped", teacher_id=teacher_id, year=year, month=month)
            return None

    async def generate_monthly_salaries(self, year: int, month: int) -> MonthlyGenerationReport:
        """
        Генерирует зарплаты всех активных преподавателей за месяц.

        Преподаватели обрабатываются параллельно (не более salary_generation_concurrency
        одновременно), каждый в своей сессии. Ошибка по одному преподавателю попадает
        в отчёт и не прерывает остальных.
        """
        validate_period(year, month)

        async with self.session_factory() as session:
            result = await session.execute(
                select(Teacher.id).where(Teacher.is_active.is_(True)).order_by(Teacher.id)
            )
            teacher_ids = list(result.scalars().all())

        report = MonthlyGenerationReport(year=year, month=month, total_teachers=len(teacher_ids))
        semaphore = asyncio.Semaphore(settings.salary_generation_concurrency)

        logger.info("Monthly salary generation started", year=year, month=month, teachers_count=len(teacher_ids))

        async def run_one(teacher_id: int) -> None:
            async with semaphore:
                try:
                    async with self.session_factory() as session:
                        service = SalaryGenerationService(
                            session,
                            rule_engine=self.rule_engine,
                            session_factory=self.session_factory,
                            max_retries=self.max_retries,
                            retry_delay=self.retry_delay,
                        )
                        record = await service.generate(teacher_id, year, month)
                        report.generated.append(
                            {
                                "teacher_id": teacher_id,
                                "salary_record_id": record.id,
                                "lessons_count": record.lessons_count,
                                "net_amount": str(record.net_amount),
                            }
                        )
                except Exception as e:
                    code = e.code if isinstance(e, CompensationError) else type(e).__name__
                    report.failed.append({"teacher_id": teacher_id, "code": code, "message": str(e)})
                    logger.error(
                        "Salary generation failed for teacher",
                        teacher_id=teacher_id,
                        year=year,
                        month=month,
                        code=code,
                        error=str(e),
                    )

        await asyncio.gather(*(run_one(teacher_id) for teacher_id in teacher_ids))

        report.generated.sort(key=lambda item: item["teacher_id"])
        report.failed.sort(key=lambda item: item["teacher_id"])
        logger.info(
            "Monthly salary generation finished",
            year=year,
            month=month,
            generated_count=len(report.generated),
            failed_count=len(report.failed),
        )
        return report

    async def calculate(self, teacher: Teacher, year: int, month: int) -> SalaryCalculation:
        """FETCH_LESSONS → EVALUATE_EACH → AGGREGATE без записи результата."""
        config = await self.settings_service.get_config()
        facts = await self._fetch_lessons(teacher, year, month)
        states = await self.tracker.evaluate_many(facts)

        calculation = SalaryCalculation(config=config)
        for fact in facts:
            gross = self.rule_engine.lesson_gross_amount(fact)
            breakdown = self.rule_engine.compute(gross, states[fact.lesson_id], config)
            calculation.lessons.append((fact, breakdown))
            calculation.gross_amount += breakdown.gross_amount
            calculation.deduction_amount += breakdown.deduction_amount
            calculation.net_amount += breakdown.net_amount

        return calculation

    async def _run_attempt(
        self, teacher_id: int, year: int, month: int
    ) -> Tuple[SalaryRecord, str, SalaryCalculation]:
        teacher = await self.session.get(Teacher, teacher_id)
        if teacher is None:
            raise TeacherNotFoundError(teacher_id)

        calculation = await self.calculate(teacher, year, month)
        record, outcome = await self._persist(teacher_id, year, month, calculation)
        return record, outcome, calculation

    async def _fetch_lessons(self, teacher: Teacher, year: int, month: int) -> List[LessonFact]:
        """Проведённые уроки преподавателя, начавшиеся в пределах месяца (UTC)."""
        start, end = month_bounds(year, month)
        result = await self.session.execute(
            select(Lesson, Group.name)
            .outerjoin(Group, Group.id == Lesson.group_id)
            .where(
                Lesson.teacher_id == teacher.id,
                Lesson.status == LessonStatus.COMPLETED.value,
                Lesson.scheduled_at >= start,
                Lesson.scheduled_at < end,
            )
            .order_by(Lesson.scheduled_at, Lesson.id)
        )

        facts = []
        for lesson, group_name in result.all():
            fallback_rate = None
            if lesson.hourly_rate_snapshot is None:
                # Таблица уроков только читается; ставка попадает в строку расшифровки
                fallback_rate = teacher.hourly_rate
                logger.warning(
                    "Lesson has no rate snapshot, using current teacher rate",
                    lesson_id=lesson.id,
                    teacher_id=teacher.id,
                    hourly_rate=str(teacher.hourly_rate),
                )
            facts.append(lesson_fact_from_entity(lesson, group_name, fallback_rate=fallback_rate))
        return facts

    async def _persist(
        self, teacher_id: int, year: int, month: int, calculation: SalaryCalculation
    ) -> Tuple[SalaryRecord, str]:
        """
        PERSIST: существующая запись перечитывается под блокировкой.

        Запись и её строки расшифровки пишутся в одной транзакции.
        """
        result = await self.session.execute(
            select(SalaryRecord)
            .where(
                SalaryRecord.teacher_id == teacher_id,
                SalaryRecord.year == year,
                SalaryRecord.month == month,
            )
            .with_for_update()
        )
        record = result.scalar_one_or_none()

        if record is None:
            record = SalaryRecord(
                teacher_id=teacher_id,
                year=year,
                month=month,
                status=SalaryStatus.PENDING.value,
            )
            self._apply_calculation(record, calculation)
            self.session.add(record)
            await self.session.flush()
            outcome = OUTCOME_CREATED
        elif record.is_paid:
            logger.warning(
                "Attempt to regenerate paid salary",
                salary_record_id=record.id,
                teacher_id=teacher_id,
                year=year,
                month=month,
            )
            raise SalaryAlreadyFinalizedError(teacher_id, year, month, record_id=record.id)
        else:
            self._apply_calculation(record, calculation)
            await self.session.execute(
                delete(SalaryBreakdownLine).where(SalaryBreakdownLine.salary_record_id == record.id)
            )
            outcome = OUTCOME_REPLACED

        self.session.add_all(
            [self._build_line(record.id, fact, breakdown) for fact, breakdown in calculation.lessons]
        )
        await self.session.flush()
        return record, outcome

    @staticmethod
    def _apply_calculation(record: SalaryRecord, calculation: SalaryCalculation) -> None:
        record.lessons_count = calculation.lessons_count
        record.gross_amount = calculation.gross_amount
        record.deduction_amount = calculation.deduction_amount
        record.net_amount = calculation.net_amount
        record.generated_at = utcnow()
        record.config_version = calculation.config.version
        record.config_snapshot = {**calculation.config.as_dict(), "version": calculation.config.version}

    @staticmethod
    def _build_line(record_id: int, fact: LessonFact, breakdown: DeductionBreakdown) -> SalaryBreakdownLine:
        missing = breakdown.missing_obligations
        return SalaryBreakdownLine(
            salary_record_id=record_id,
            lesson_id=fact.lesson_id,
            lesson_name=fact.lesson_name,
            lesson_date=fact.scheduled_at,
            duration_minutes=fact.duration_minutes,
            hourly_rate_snapshot=fact.hourly_rate_snapshot,
            gross_amount=breakdown.gross_amount,
            deduction_amount=breakdown.deduction_amount,
            net_amount=breakdown.net_amount,
            penalty_percent=breakdown.penalty_percent,
            absence_marked=ObligationKind.ABSENCE not in missing,
            feedback_complete=ObligationKind.FEEDBACK not in missing,
            voice_sent=ObligationKind.VOICE not in missing,
            text_sent=ObligationKind.TEXT not in missing,
            missing_obligations=breakdown.missing_codes,
        )
