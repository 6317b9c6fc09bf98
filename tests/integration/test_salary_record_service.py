"""Интеграционные тесты SalaryRecordService."""

import pytest
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select

from domain.entities.salary_breakdown_line import SalaryBreakdownLine
from domain.entities.salary_record import SalaryStatus
from domain.exceptions import SalaryAlreadyFinalizedError, SalaryRecordNotFoundError
from shared.services.salary_generation_service import SalaryGenerationService
from shared.services.salary_record_service import SalaryRecordService

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]


async def _generate(db_session, factory, teacher, month, fulfilled=True):
    group = await factory.group(teacher, name=f"Group {month}")
    student = await factory.student(group)
    lesson = await factory.lesson(teacher, group, scheduled_at=datetime(2026, month, 10, 10, 0))
    if fulfilled:
        await factory.fulfil(lesson, [student])
    return await SalaryGenerationService(db_session, retry_delay=0).generate(teacher.id, 2026, month)


async def test_process_payment_marks_record_paid(db_session, factory):
    teacher = await factory.teacher()
    record = await _generate(db_session, factory, teacher, 1)

    paid = await SalaryRecordService(db_session).process_payment(record.id, notes="Bank transfer")

    assert paid.status == SalaryStatus.PAID.value
    assert paid.paid_at is not None
    assert paid.notes == "Bank transfer"


async def test_process_payment_twice_is_conflict(db_session, factory):
    teacher = await factory.teacher()
    record = await _generate(db_session, factory, teacher, 1)
    record_id = record.id
    service = SalaryRecordService(db_session)
    await service.process_payment(record_id)

    with pytest.raises(SalaryAlreadyFinalizedError):
        await service.process_payment(record_id)


async def test_process_payment_unknown_record(db_session):
    with pytest.raises(SalaryRecordNotFoundError):
        await SalaryRecordService(db_session).process_payment(12345)


async def test_get_record_unknown(db_session):
    with pytest.raises(SalaryRecordNotFoundError):
        await SalaryRecordService(db_session).get_record(12345)


async def test_list_records_filters_and_pages(db_session, factory):
    anna = await factory.teacher(first_name="Anna")
    boris = await factory.teacher(first_name="Boris")
    for month in (1, 2, 3):
        await _generate(db_session, factory, anna, month)
    boris_record = await _generate(db_session, factory, boris, 1)
    service = SalaryRecordService(db_session)
    await service.process_payment(boris_record.id)

    items, total = await service.list_records(teacher_id=anna.id, limit=2)
    assert total == 3
    assert [item.month for item in items] == [3, 2]

    items, total = await service.list_records(teacher_id=anna.id, skip=2, limit=2)
    assert [item.month for item in items] == [1]

    items, total = await service.list_records(status=SalaryStatus.PAID.value)
    assert total == 1
    assert items[0].teacher_id == boris.id

    items, total = await service.list_records(year=2026, month=1)
    assert total == 2


async def test_teacher_salary_summary(db_session, factory):
    teacher = await factory.teacher()
    january = await _generate(db_session, factory, teacher, 1)
    await _generate(db_session, factory, teacher, 2, fulfilled=False)
    await _generate(db_session, factory, teacher, 3)
    service = SalaryRecordService(db_session)
    await service.process_payment(january.id)

    summary = await service.get_teacher_salary_summary(teacher.id)

    assert summary == {
        "teacher_id": teacher.id,
        "total_records": 3,
        "paid_records": 1,
        "pending_records": 2,
        "total_net_amount": "2000.00",
        "paid_net_amount": "1000.00",
        "pending_net_amount": "1000.00",
    }


async def test_summary_for_teacher_without_records(db_session):
    summary = await SalaryRecordService(db_session).get_teacher_salary_summary(77)
    assert summary["total_records"] == 0
    assert summary["total_net_amount"] == "0.00"
    assert Decimal(summary["pending_net_amount"]) == 0


async def _line_count(db_session, record_id):
    result = await db_session.execute(
        select(func.count(SalaryBreakdownLine.id)).where(SalaryBreakdownLine.salary_record_id == record_id)
    )
    return result.scalar_one()


async def test_delete_pending_record_removes_lines(db_session, factory):
    teacher = await factory.teacher()
    record = await _generate(db_session, factory, teacher, 1)
    record_id = record.id
    teacher_id = teacher.id
    assert await _line_count(db_session, record_id) == 1
    service = SalaryRecordService(db_session)

    await service.delete_record(record_id)

    assert await service.find_record(teacher_id, 2026, 1) is None
    assert await _line_count(db_session, record_id) == 0


async def test_delete_paid_record_is_refused(db_session, factory):
    teacher = await factory.teacher()
    record = await _generate(db_session, factory, teacher, 1)
    record_id = record.id
    service = SalaryRecordService(db_session)
    await service.process_payment(record_id)

    with pytest.raises(SalaryAlreadyFinalizedError):
        await service.delete_record(record_id)

    assert (await service.get_record(record_id)).status == SalaryStatus.PAID.value
    assert await _line_count(db_session, record_id) == 1


async def test_delete_unknown_record(db_session):
    with pytest.raises(SalaryRecordNotFoundError):
        await SalaryRecordService(db_session).delete_record(12345)


async def test_delete_records_skips_paid(db_session, factory):
    teacher = await factory.teacher()
    january = await _generate(db_session, factory, teacher, 1)
    february = await _generate(db_session, factory, teacher, 2)
    january_id, february_id = january.id, february.id
    service = SalaryRecordService(db_session)
    await service.process_payment(january_id)

    result = await service.delete_records([february_id, january_id, 999, february_id])

    assert result == {"deleted": [february_id], "skipped_paid": [january_id], "not_found": [999]}
    assert await _line_count(db_session, february_id) == 0
    assert (await service.get_record(january_id)).status == SalaryStatus.PAID.value


async def test_delete_records_with_empty_list(db_session):
    result = await SalaryRecordService(db_session).delete_records([])
    assert result == {"deleted": [], "skipped_paid": [], "not_found": []}
