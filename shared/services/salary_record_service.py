"""Сервис записей зарплаты: поиск, список, выплата, сводка по преподавателю."""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging.logger import logger
from domain.entities.base import utcnow
from domain.entities.salary_breakdown_line import SalaryBreakdownLine
from domain.entities.salary_record import SalaryRecord, SalaryStatus
from domain.exceptions import SalaryAlreadyFinalizedError, SalaryRecordNotFoundError
from domain.values import round_money


class SalaryRecordService:
    """Операции над SalaryRecord вне генерации."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_record(self, record_id: int) -> SalaryRecord:
        record = await self.session.get(SalaryRecord, record_id)
        if record is None:
            raise SalaryRecordNotFoundError(record_id=record_id)
        return record

    async def find_record(self, teacher_id: int, year: int, month: int) -> Optional[SalaryRecord]:
        result = await self.session.execute(
            select(SalaryRecord).where(
                SalaryRecord.teacher_id == teacher_id,
                SalaryRecord.year == year,
                SalaryRecord.month == month,
            )
        )
        return result.scalar_one_or_none()

    async def list_records(
        self,
        *,
        teacher_id: Optional[int] = None,
        status: Optional[str] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[SalaryRecord], int]:
        """Записи с фильтрами; новые периоды первыми."""
        filters = []
        if teacher_id is not None:
            filters.append(SalaryRecord.teacher_id == teacher_id)
        if status is not None:
            filters.append(SalaryRecord.status == status)
        if year is not None:
            filters.append(SalaryRecord.year == year)
        if month is not None:
            filters.append(SalaryRecord.month == month)

        count_result = await self.session.execute(
            select(func.count(SalaryRecord.id)).where(*filters)
        )
        total = count_result.scalar_one()

        result = await self.session.execute(
            select(SalaryRecord)
            .where(*filters)
            .order_by(SalaryRecord.year.desc(), SalaryRecord.month.desc(), SalaryRecord.teacher_id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def process_payment(self, record_id: int, notes: Optional[str] = None) -> SalaryRecord:
        """
        Переводит запись PENDING → PAID.

        Raises:
            SalaryRecordNotFoundError: записи нет
            SalaryAlreadyFinalizedError: запись уже выплачена
        """
        try:
            result = await self.session.execute(
                select(SalaryRecord).where(SalaryRecord.id == record_id).with_for_update()
            )
            record = result.scalar_one_or_none()
            if record is None:
                raise SalaryRecordNotFoundError(record_id=record_id)
            if record.is_paid:
                raise SalaryAlreadyFinalizedError(
                    record.teacher_id, record.year, record.month, record_id=record.id
                )

            record.status = SalaryStatus.PAID.value
            record.paid_at = utcnow()
            if notes:
                record.notes = notes
            await self.session.flush()
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Salary paid",
            salary_record_id=record.id,
            teacher_id=record.teacher_id,
            year=record.year,
            month=record.month,
            net_amount=str(record.net_amount),
        )
        return record

    async def delete_record(self, record_id: int) -> None:
        """
        Удаляет PENDING-запись вместе со строками расшифровки.

        Raises:
            SalaryRecordNotFoundError: записи нет
            SalaryAlreadyFinalizedError: запись уже выплачена
        """
        try:
            result = await self.session.execute(
                select(SalaryRecord).where(SalaryRecord.id == record_id).with_for_update()
            )
            record = result.scalar_one_or_none()
            if record is None:
                raise SalaryRecordNotFoundError(record_id=record_id)
            if record.is_paid:
                raise SalaryAlreadyFinalizedError(
                    record.teacher_id, record.year, record.month, record_id=record.id
                )

            context = {"teacher_id": record.teacher_id, "year": record.year, "month": record.month}
            await self._delete_with_lines([record.id])
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Salary record deleted", salary_record_id=record_id, **context)

    async def delete_records(self, record_ids: List[int]) -> Dict[str, List[int]]:
        """
        Пакетное удаление. Выплаченные записи пропускаются.

        Returns:
            Словарь deleted / skipped_paid / not_found со списками ID
        """
        requested = sorted(set(record_ids))
        if not requested:
            return {"deleted": [], "skipped_paid": [], "not_found": []}

        try:
            result = await self.session.execute(
                select(SalaryRecord.id, SalaryRecord.status)
                .where(SalaryRecord.id.in_(requested))
                .with_for_update()
            )
            statuses = dict(result.all())
            deleted = [rid for rid in requested if statuses.get(rid) == SalaryStatus.PENDING.value]
            skipped_paid = [rid for rid in requested if statuses.get(rid) == SalaryStatus.PAID.value]
            not_found = [rid for rid in requested if rid not in statuses]

            if deleted:
                await self._delete_with_lines(deleted)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        if skipped_paid:
            logger.warning("Paid salary records were not deleted", salary_record_ids=skipped_paid)
        logger.info("Salary records deleted", deleted_count=len(deleted), not_found=not_found)
        return {"deleted": deleted, "skipped_paid": skipped_paid, "not_found": not_found}

    async def _delete_with_lines(self, record_ids: List[int]) -> None:
        # SQLite без PRAGMA foreign_keys не выполняет ON DELETE CASCADE
        await self.session.execute(
            delete(SalaryBreakdownLine).where(SalaryBreakdownLine.salary_record_id.in_(record_ids))
        )
        await self.session.execute(delete(SalaryRecord).where(SalaryRecord.id.in_(record_ids)))

    async def get_teacher_salary_summary(self, teacher_id: int) -> Dict:
        """Количество записей и суммы к выплате: всего, выплачено, ожидает."""
        result = await self.session.execute(
            select(
                SalaryRecord.status,
                func.count(SalaryRecord.id),
                func.coalesce(func.sum(SalaryRecord.net_amount), 0),
            )
            .where(SalaryRecord.teacher_id == teacher_id)
            .group_by(SalaryRecord.status)
        )

        summary = {
            "teacher_id": teacher_id,
            "total_records": 0,
            "paid_records": 0,
            "pending_records": 0,
            "total_net_amount": Decimal("0"),
            "paid_net_amount": Decimal("0"),
            "pending_net_amount": Decimal("0"),
        }
        for status, count, net_sum in result.all():
            net_sum = Decimal(str(net_sum))
            summary["total_records"] += count
            summary["total_net_amount"] += net_sum
            if status == SalaryStatus.PAID.value:
                summary["paid_records"] += count
                summary["paid_net_amount"] += net_sum
            else:
                summary["pending_records"] += count
                summary["pending_net_amount"] += net_sum

        for key in ("total_net_amount", "paid_net_amount", "pending_net_amount"):
            summary[key] = str(round_money(summary[key]))
        return summary
