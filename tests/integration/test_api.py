"""Тесты HTTP API LessonPay (httpx + ASGI, in-memory БД)."""

import pytest
import pytest_asyncio
from datetime import datetime

from httpx import ASGITransport, AsyncClient

from apps.api.app import create_app
from core.database.session import db_manager, get_db_session

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]


@pytest_asyncio.fixture
async def client(test_engine, session_factory):
    app = create_app()

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    db_manager.bind(test_engine)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

    db_manager.engine = None
    db_manager.session_factory = None
    db_manager._initialized = False


@pytest_asyncio.fixture
async def lesson_setup(factory):
    teacher = await factory.teacher()
    group = await factory.group(teacher)
    student = await factory.student(group)
    lesson = await factory.lesson(teacher, group, scheduled_at=datetime(2026, 1, 15, 10, 0))
    await factory.fulfil(lesson, [student], voice=False)
    return {"teacher_id": teacher.id, "lesson_id": lesson.id, "group": group}


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_generate_and_breakdown(client, lesson_setup):
    teacher_id = lesson_setup["teacher_id"]

    response = await client.post(
        "/api/v1/salaries/generate", json={"teacher_id": teacher_id, "year": 2026, "month": 1}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "PENDING"
    assert body["lessons_count"] == 1
    assert body["net_amount"] == "750.00"

    response = await client.get(f"/api/v1/salaries/{teacher_id}/2026/1/breakdown")
    assert response.status_code == 200
    report = response.json()
    assert report["month"] == "2026-01"
    assert report["lines"][0]["missing_obligations"] == ["voice"]
    assert report["lines"][0]["deduction_amount"] == "250.00"


async def test_breakdown_errors(client, lesson_setup):
    teacher_id = lesson_setup["teacher_id"]

    response = await client.get(f"/api/v1/salaries/{teacher_id}/2026/1/breakdown")
    assert response.status_code == 404
    assert response.json()["code"] == "SALARY_RECORD_NOT_FOUND"

    await client.post("/api/v1/salaries/generate", json={"teacher_id": teacher_id, "year": 2026, "month": 1})
    response = await client.get(f"/api/v1/salaries/{teacher_id}/2026/1/breakdown", params={"sort_by": "rate"})
    assert response.status_code == 400


async def test_paid_salary_conflicts(client, lesson_setup):
    payload = {"teacher_id": lesson_setup["teacher_id"], "year": 2026, "month": 1}
    record_id = (await client.post("/api/v1/salaries/generate", json=payload)).json()["id"]

    response = await client.patch(f"/api/v1/salaries/{record_id}/process", json={"notes": " paid "})
    assert response.status_code == 200
    assert response.json()["status"] == "PAID"
    assert response.json()["notes"] == "paid"

    response = await client.patch(f"/api/v1/salaries/{record_id}/process")
    assert response.status_code == 409

    response = await client.post("/api/v1/salaries/generate", json=payload)
    assert response.status_code == 409
    assert response.json()["code"] == "SALARY_ALREADY_FINALIZED"


async def test_generate_validation_and_unknown_teacher(client):
    response = await client.post("/api/v1/salaries/generate", json={"teacher_id": 1, "year": 2026, "month": 13})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"

    response = await client.post("/api/v1/salaries/generate", json={"teacher_id": 99, "year": 2026, "month": 1})
    assert response.status_code == 404
    assert response.json()["code"] == "TEACHER_NOT_FOUND"


async def test_generate_monthly_and_list(client, lesson_setup, sequential_generation):
    response = await client.post("/api/v1/salaries/generate-monthly", json={"year": 2026, "month": 1})
    assert response.status_code == 200
    assert response.json()["generated_count"] == 1

    response = await client.get("/api/v1/salaries", params={"status": "PENDING"})
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["pages"] == 1
    assert body["items"][0]["teacher_id"] == lesson_setup["teacher_id"]

    response = await client.get(f"/api/v1/salaries/teacher/{lesson_setup['teacher_id']}/summary")
    assert response.status_code == 200
    assert response.json()["pending_records"] == 1


async def test_lesson_obligations(client, factory, lesson_setup):
    response = await client.get(f"/api/v1/lessons/{lesson_setup['lesson_id']}/obligations")
    assert response.status_code == 200
    assert response.json()["completed_count"] == 3

    response = await client.get("/api/v1/lessons/999/obligations")
    assert response.status_code == 404


async def test_lesson_obligations_for_scheduled_lesson(client, factory):
    from domain.entities.lesson import LessonStatus

    teacher = await factory.teacher()
    lesson = await factory.lesson(teacher, status=LessonStatus.SCHEDULED)

    response = await client.get(f"/api/v1/lessons/{lesson.id}/obligations")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == LessonStatus.SCHEDULED.value
    assert body["absence_marked"] is True
    assert body["completed_count"] == 2


async def test_action_percents(client):
    response = await client.get("/api/v1/settings/action-percents")
    assert response.status_code == 200
    assert response.json() == {
        "absence_percent": 25,
        "feedback_percent": 25,
        "voice_percent": 25,
        "text_percent": 25,
        "version": 0,
    }

    response = await client.put(
        "/api/v1/settings/action-percents",
        json={"absence_percent": 40, "feedback_percent": 40, "voice_percent": 10, "text_percent": 10},
    )
    assert response.status_code == 200
    assert response.json()["version"] == 1

    response = await client.put(
        "/api/v1/settings/action-percents",
        json={"absence_percent": 40, "feedback_percent": 40, "voice_percent": 10, "text_percent": 0},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_CONFIG"

    response = await client.get("/api/v1/settings/action-percents")
    assert response.json()["absence_percent"] == 40


async def test_delete_salary_records(client, lesson_setup):
    teacher_id = lesson_setup["teacher_id"]
    response = await client.post(
        "/api/v1/salaries/generate", json={"teacher_id": teacher_id, "year": 2026, "month": 1}
    )
    record_id = response.json()["id"]

    response = await client.post("/api/v1/salaries/delete-many", json={"ids": [record_id, 404]})
    assert response.status_code == 200
    assert response.json() == {"deleted": [record_id], "skipped_paid": [], "not_found": [404]}

    response = await client.delete(f"/api/v1/salaries/{record_id}")
    assert response.status_code == 404


async def test_delete_paid_salary_record_is_conflict(client, lesson_setup):
    teacher_id = lesson_setup["teacher_id"]
    response = await client.post(
        "/api/v1/salaries/generate", json={"teacher_id": teacher_id, "year": 2026, "month": 1}
    )
    record_id = response.json()["id"]
    await client.patch(f"/api/v1/salaries/{record_id}/process")

    response = await client.delete(f"/api/v1/salaries/{record_id}")
    assert response.status_code == 409
    assert response.json()["code"] == "SALARY_ALREADY_FINALIZED"
