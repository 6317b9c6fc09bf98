"""Celery задачи расчёта зарплат преподавателей."""

import asyncio
from typing import Any, Callable, Dict, Optional

from core.celery.celery_app import celery_app
from core.database.session import get_async_session, close_database
from core.logging.logger import logger
from core.utils.period_helper import previous_month
from domain.exceptions import CompensationError
from shared.services.salary_generation_service import SalaryGenerationService


async def run_monthly_generation(
    year: Optional[int] = None,
    month: Optional[int] = None,
    session_factory: Optional[Callable] = None,
) -> Dict[str, Any]:
    """Тело задачи generate_monthly_salaries; по умолчанию берётся прошедший месяц."""
    if year is None or month is None:
        year, month = previous_month()

    session_factory = session_factory or get_async_session
    logger.info("Starting monthly salary generation", year=year, month=month)

    async with session_factory() as session:
        service = SalaryGenerationService(session, session_factory=session_factory)
        report = await service.generate_monthly_salaries(year, month)

    return {"success": report.success, **report.to_dict()}


async def run_salary_recalculation(
    teacher_id: int,
    year: int,
    month: int,
    session_factory: Optional[Callable] = None,
) -> Dict[str, Any]:
    """Тело задачи recalculate_teacher_salary: пересчёт только PENDING-записи."""
    session_factory = session_factory or get_async_session

    async with session_factory() as session:
        service = SalaryGenerationService(session, session_factory=session_factory)
        record = await service.regenerate_if_pending(teacher_id, year, month)

    if record is None:
        return {
            "success": True,
            "recalculated": False,
            "teacher_id": teacher_id,
            "year": year,
            "month": month,
        }

    return {
        "success": True,
        "recalculated": True,
        "teacher_id": teacher_id,
        "year": year,
        "month": month,
        "salary_record_id": record.id,
        "lessons_count": record.lessons_count,
        "net_amount": str(record.net_amount),
    }


@celery_app.task(name="generate_monthly_salaries")
def generate_monthly_salaries(year: int = None, month: int = None):
    """
    Генерирует зарплаты всех активных преподавателей за месяц.

    Запускается 1 числа в 04:00 за прошедший месяц.
    Ошибки по отдельным преподавателям попадают в результат, не прерывая пакет.
    """

    async def process():
        try:
            return await run_monthly_generation(year, month)
        except Exception as e:
            logger.error(f"Critical error in monthly salary generation: {e}", year=year, month=month)
            return {"success": False, "error": str(e)}
        finally:
            await close_database()

    # Запускаем async функцию в event loop
    return asyncio.run(process())


@celery_app.task(name="recalculate_teacher_salary")
def recalculate_teacher_salary(teacher_id: int, year: int, month: int):
    """Пересчитывает зарплату преподавателя за месяц, если она ещё не выплачена."""

    async def process():
        try:
            return await run_salary_recalculation(teacher_id, year, month)
        except CompensationError as e:
            logger.warning(
                f"Salary recalculation rejected: {e}",
                teacher_id=teacher_id,
                year=year,
                month=month,
                code=e.code,
            )
            return {"success": False, "code": e.code, "error": e.message}
        except Exception as e:
            logger.error(
                f"Error recalculating salary: {e}",
                teacher_id=teacher_id,
                year=year,
                month=month,
            )
            return {"success": False, "error": str(e)}
        finally:
            await close_database()

    return asyncio.run(process())
