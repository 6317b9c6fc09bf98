"""Интеграционные тесты ObligationTracker на in-memory БД."""

import pytest
import pytest_asyncio
from datetime import timedelta

from domain.entities.chat import MessageKind
from domain.entities.lesson import LessonStatus
from domain.entities.student import StudentStatus
from domain.exceptions import InvalidLessonStateError, LessonNotFoundError
from shared.services.obligation_tracker import ObligationTracker, lesson_fact_from_entity

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]


@pytest_asyncio.fixture
async def classroom(factory):
    teacher = await factory.teacher()
    group = await factory.group(teacher)
    students = [await factory.student(group, first_name=name) for name in ("Ivan", "Olga")]
    lesson = await factory.lesson(teacher, group)
    return teacher, group, students, lesson


async def _evaluate(db_session, lesson):
    return await ObligationTracker(db_session).evaluate(lesson_fact_from_entity(lesson))


async def test_all_obligations_met(db_session, factory, classroom):
    _, _, students, lesson = classroom
    await factory.fulfil(lesson, students)

    state = await _evaluate(db_session, lesson)

    assert state.absence_marked and state.feedback_complete and state.voice_sent and state.text_sent
    assert state.completed_count == 4


async def test_absence_needs_every_enrolled_student(db_session, factory, classroom):
    _, _, students, lesson = classroom
    await factory.attendance(lesson, students[0], is_present=False)

    state = await _evaluate(db_session, lesson)
    assert state.absence_marked is False

    await factory.attendance(lesson, students[1])
    state = await _evaluate(db_session, lesson)
    assert state.absence_marked is True


async def test_left_group_student_is_not_required(db_session, factory, classroom):
    _, group, students, lesson = classroom
    await factory.student(group, enrollment_active=False, first_name="Former")
    await factory.fulfil(lesson, students, voice=False, text=False)

    state = await _evaluate(db_session, lesson)

    assert state.absence_marked is True
    assert state.feedback_complete is True


async def test_withdrawn_student_needs_no_feedback(db_session, factory, classroom):
    _, group, students, lesson = classroom
    withdrawn = await factory.student(group, status=StudentStatus.WITHDRAWN, first_name="Pavel")
    await factory.fulfil(lesson, students, voice=False, text=False)
    await factory.attendance(lesson, withdrawn, is_present=False)

    state = await _evaluate(db_session, lesson)

    assert state.absence_marked is True
    assert state.feedback_complete is True


async def test_duplicate_feedback_is_not_complete(db_session, factory, classroom):
    _, _, students, lesson = classroom
    await factory.fulfil(lesson, students, voice=False, text=False)
    await factory.feedback(lesson, students[0], content="Second note")

    state = await _evaluate(db_session, lesson)

    assert state.feedback_complete is False


async def test_messages_must_follow_lesson_start_in_group_chat(db_session, factory, classroom):
    teacher, _, _, lesson = classroom
    other_group = await factory.group(teacher, name="Group B")
    await factory.message(lesson, MessageKind.VOICE, sent_at=lesson.scheduled_at - timedelta(minutes=5))
    await factory.message(lesson, MessageKind.TEXT, group=other_group)
    await factory.message(lesson, MessageKind.IMAGE)

    state = await _evaluate(db_session, lesson)
    assert state.voice_sent is False
    assert state.text_sent is False

    await factory.message(lesson, MessageKind.VOICE, sent_at=lesson.scheduled_at)
    state = await _evaluate(db_session, lesson)
    assert state.voice_sent is True


async def test_evaluate_many_isolates_lessons(db_session, factory, classroom):
    teacher, group, students, lesson = classroom
    second = await factory.lesson(teacher, group, scheduled_at=lesson.scheduled_at + timedelta(days=7))
    await factory.fulfil(lesson, students)

    states = await ObligationTracker(db_session).evaluate_many(
        [lesson_fact_from_entity(lesson), lesson_fact_from_entity(second)]
    )

    assert states[lesson.id].completed_count == 4
    assert states[second.id].completed_count == 0


async def test_evaluation_is_repeatable(db_session, factory, classroom):
    _, _, students, lesson = classroom
    await factory.fulfil(lesson, students, feedback=False)

    first = await _evaluate(db_session, lesson)
    second = await _evaluate(db_session, lesson)

    assert first == second


async def test_scheduled_lesson_cannot_be_evaluated(db_session, factory, classroom):
    teacher, group, _, _ = classroom
    upcoming = await factory.lesson(teacher, group, status=LessonStatus.SCHEDULED)

    with pytest.raises(InvalidLessonStateError):
        await _evaluate(db_session, upcoming)


async def test_get_lesson_obligation(db_session, factory, classroom):
    _, _, students, lesson = classroom
    await factory.fulfil(lesson, students, voice=False)

    result = await ObligationTracker(db_session).get_lesson_obligation(lesson.id)

    assert result == {
        "lesson_id": lesson.id,
        "status": LessonStatus.COMPLETED.value,
        "absence_marked": True,
        "feedback_complete": True,
        "voice_sent": False,
        "text_sent": True,
        "completed_count": 3,
        "total": 4,
    }


async def test_get_lesson_obligation_unknown_lesson(db_session):
    with pytest.raises(LessonNotFoundError):
        await ObligationTracker(db_session).get_lesson_obligation(999)


async def test_get_lesson_obligation_for_scheduled_lesson(db_session, factory, classroom):
    teacher, group, students, _ = classroom
    upcoming = await factory.lesson(teacher, group, status=LessonStatus.SCHEDULED)
    await factory.attendance(upcoming, students[0])
    await factory.attendance(upcoming, students[1])

    result = await ObligationTracker(db_session).get_lesson_obligation(upcoming.id)

    assert result["status"] == LessonStatus.SCHEDULED.value
    assert result["absence_marked"] is True
    assert result["feedback_complete"] is False
    assert result["completed_count"] == 1
