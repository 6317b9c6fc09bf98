"""Интеграционные тесты SalaryBreakdownService."""

import pytest
import pytest_asyncio
from datetime import datetime
from decimal import Decimal

from domain.exceptions import SalaryRecordNotFoundError
from shared.services.salary_breakdown_service import SalaryBreakdownService
from shared.services.salary_generation_service import SalaryGenerationService
from shared.services.salary_record_service import SalaryRecordService

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]


@pytest_asyncio.fixture
async def generated(db_session, factory):
    """Три урока с разной полнотой обязательств и сгенерированная зарплата за январь."""
    teacher = await factory.teacher(first_name="Anna", last_name="Petrova")
    group = await factory.group(teacher, name="Group A")
    student = await factory.student(group)

    algebra = await factory.lesson(teacher, group, scheduled_at=datetime(2026, 1, 20, 10, 0), topic="Algebra")
    await factory.fulfil(algebra, [student])
    geometry = await factory.lesson(teacher, group, scheduled_at=datetime(2026, 1, 5, 10, 0), topic="Geometry")
    await factory.fulfil(geometry, [student], voice=False, text=False)
    untitled = await factory.lesson(teacher, group, scheduled_at=datetime(2026, 1, 12, 10, 0))
    await factory.fulfil(untitled, [student], feedback=False)

    record = await SalaryGenerationService(db_session, retry_delay=0).generate(teacher.id, 2026, 1)
    return {
        "teacher_id": teacher.id,
        "record_id": record.id,
        "student": student,
        "lessons": {"algebra": algebra.id, "geometry": geometry.id, "group": untitled.id},
        "untitled": untitled,
    }


async def test_default_order_is_by_lesson_date(db_session, generated):
    lines = await SalaryBreakdownService(db_session).get_breakdown(generated["teacher_id"], 2026, 1)

    lessons = generated["lessons"]
    assert [line.lesson_id for line in lines] == [lessons["geometry"], lessons["group"], lessons["algebra"]]
    assert [line.lesson_name for line in lines] == ["Geometry", "Group A", "Algebra"]


async def test_sort_by_net_amount_descending(db_session, generated):
    lines = await SalaryBreakdownService(db_session).get_breakdown(
        generated["teacher_id"], 2026, 1, sort_by="net_amount", descending=True
    )

    assert [line.net_amount for line in lines] == [Decimal("1000.00"), Decimal("750.00"), Decimal("500.00")]


async def test_unknown_sort_field(db_session, generated):
    with pytest.raises(ValueError):
        await SalaryBreakdownService(db_session).get_breakdown(generated["teacher_id"], 2026, 1, sort_by="teacher")


async def test_missing_record_is_not_found(db_session, generated):
    with pytest.raises(SalaryRecordNotFoundError):
        await SalaryBreakdownService(db_session).get_breakdown(generated["teacher_id"], 2026, 2)


async def test_breakdown_of_paid_salary_ignores_later_facts(db_session, factory, generated):
    await SalaryRecordService(db_session).process_payment(generated["record_id"])
    await factory.feedback(generated["untitled"], generated["student"])

    lines = await SalaryBreakdownService(db_session).get_breakdown(generated["teacher_id"], 2026, 1)

    untitled_line = next(line for line in lines if line.lesson_id == generated["lessons"]["group"])
    assert untitled_line.feedback_complete is False
    assert untitled_line.deduction_amount == Decimal("250.00")


async def test_salary_breakdown_report(db_session, generated):
    report = await SalaryBreakdownService(db_session).get_salary_breakdown(
        generated["teacher_id"], 2026, 1, sort_by="lesson_name"
    )

    assert report["teacher_name"] == "Anna Petrova"
    assert report["month"] == "2026-01"
    assert report["status"] == "PENDING"
    assert report["lessons_count"] == 3
    assert report["gross_amount"] == "3000.00"
    assert report["deduction_amount"] == "750.00"
    assert report["net_amount"] == "2250.00"
    assert report["config_snapshot"]["version"] == 0
    assert [line["lesson_name"] for line in report["lines"]] == ["Algebra", "Geometry", "Group A"]
    geometry = report["lines"][1]
    assert geometry["penalty_percent"] == 50
    assert geometry["missing_obligations"] == ["voice", "text"]
    assert geometry["obligations"]["absence_marked"] is True
