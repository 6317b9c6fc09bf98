"""Сервис расшифровки зарплаты по урокам (только сохранённые строки, без пересчёта)."""

from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging.logger import logger
from core.utils.period_helper import validate_period
from domain.entities.salary_breakdown_line import SalaryBreakdownLine
from domain.entities.salary_record import SalaryRecord
from domain.entities.teacher import Teacher
from domain.exceptions import SalaryRecordNotFoundError

SORT_FIELDS = {
    "lesson_date": lambda line: line.lesson_date,
    "lesson_name": lambda line: line.lesson_name,
    "gross_amount": lambda line: line.gross_amount,
    "deduction_amount": lambda line: line.deduction_amount,
    "net_amount": lambda line: line.net_amount,
}

DEFAULT_SORT = "lesson_date"


def sort_lines(
    lines: List[SalaryBreakdownLine], sort_by: str = DEFAULT_SORT, descending: bool = False
) -> List[SalaryBreakdownLine]:
    """
    Упорядочивает строки расшифровки.

    Основной ключ может идти по убыванию; дополнительный порядок
    (lesson_date, затем lesson_id) всегда по возрастанию.
    """
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {sort_by!r}. Allowed: {', '.join(SORT_FIELDS)}")

    ordered = sorted(lines, key=lambda line: (line.lesson_date, line.lesson_id))
    # sorted стабилен: вторичный порядок сохраняется внутри равных основных ключей
    return sorted(ordered, key=SORT_FIELDS[sort_by], reverse=descending)


class SalaryBreakdownService:
    """Чтение расшифровки последнего успешного расчёта."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_breakdown(
        self,
        teacher_id: int,
        year: int,
        month: int,
        sort_by: str = DEFAULT_SORT,
        descending: bool = False,
    ) -> List[SalaryBreakdownLine]:
        """
        Строки расшифровки за месяц.

        Raises:
            ValueError: неизвестное поле сортировки или некорректный период
            SalaryRecordNotFoundError: зарплата за период не рассчитана
        """
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {sort_by!r}. Allowed: {', '.join(SORT_FIELDS)}")

        record = await self._get_record(teacher_id, year, month)
        return await self._load_lines(record, sort_by, descending)

    async def get_salary_breakdown(
        self,
        teacher_id: int,
        year: int,
        month: int,
        sort_by: str = DEFAULT_SORT,
        descending: bool = False,
    ) -> Dict:
        """Отчёт по зарплате: преподаватель, агрегаты, снимок весов и строки по урокам."""
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {sort_by!r}. Allowed: {', '.join(SORT_FIELDS)}")

        record = await self._get_record(teacher_id, year, month)
        lines = await self._load_lines(record, sort_by, descending)
        teacher = await self.session.get(Teacher, teacher_id)

        return {
            "salary_record_id": record.id,
            "teacher_id": teacher_id,
            "teacher_name": teacher.full_name if teacher else None,
            "month": record.period_label,
            "status": record.status,
            "lessons_count": record.lessons_count,
            "gross_amount": str(record.gross_amount),
            "deduction_amount": str(record.deduction_amount),
            "net_amount": str(record.net_amount),
            "generated_at": record.generated_at.isoformat() if record.generated_at else None,
            "paid_at": record.paid_at.isoformat() if record.paid_at else None,
            "config_snapshot": record.config_snapshot,
            "lines": [line.to_dict() for line in lines],
        }

    async def _get_record(self, teacher_id: int, year: int, month: int) -> SalaryRecord:
        validate_period(year, month)
        result = await self.session.execute(
            select(SalaryRecord).where(
                SalaryRecord.teacher_id == teacher_id,
                SalaryRecord.year == year,
                SalaryRecord.month == month,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise SalaryRecordNotFoundError(teacher_id=teacher_id, year=year, month=month)
        return record

    async def _load_lines(
        self, record: SalaryRecord, sort_by: str, descending: bool
    ) -> List[SalaryBreakdownLine]:
        result = await self.session.execute(
            select(SalaryBreakdownLine).where(SalaryBreakdownLine.salary_record_id == record.id)
        )
        lines = list(result.scalars().all())
        logger.debug(
            "Salary breakdown loaded",
            salary_record_id=record.id,
            lines_count=len(lines),
            sort_by=sort_by,
            descending=descending,
        )
        return sort_lines(lines, sort_by, descending)
