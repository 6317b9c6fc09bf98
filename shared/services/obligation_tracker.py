"""
Трекер обязательств преподавателя по уроку.

Для проведённого урока определяет, выполнены ли четыре обязательства:
посещаемость отмечена, отзывы заполнены, голосовое и текстовое сообщения
отправлены в чат группы. Только чтение; повторный вызов на неизменных данных
даёт тот же результат.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging.logger import logger
from domain.entities.attendance import Attendance
from domain.entities.chat import Chat, ChatMessage, MessageKind
from domain.entities.feedback import LessonFeedback
from domain.entities.group import Group, GroupEnrollment
from domain.entities.lesson import Lesson, LessonStatus
from domain.entities.student import Student, StudentStatus
from domain.exceptions import InvalidLessonStateError, LessonNotFoundError
from domain.values import LessonFact, ObligationState, to_money

UNTITLED_LESSON = "Untitled Lesson"


@dataclass
class LessonObligationRecords:
    """Сырые факты по одному уроку, из которых выводится ObligationState."""

    enrolled_student_ids: Set[int] = field(default_factory=set)
    active_student_ids: Set[int] = field(default_factory=set)
    attendance_student_ids: Set[int] = field(default_factory=set)
    feedback_counts: Dict[int, int] = field(default_factory=dict)
    message_kinds: Set[str] = field(default_factory=set)


def resolve_obligations(records: LessonObligationRecords) -> ObligationState:
    """
    Чистое правило вывода обязательств из фактов.

    - посещаемость: отметка есть у каждого зачисленного студента (пустая группа считается выполненной);
    - отзывы: у каждого зачисленного активного студента ровно один отзыв;
    - голосовое/текстовое: в чат группы отправлено сообщение с тегом урока не раньше начала урока.
    """
    absence_marked = records.enrolled_student_ids <= records.attendance_student_ids
    feedback_complete = all(
        records.feedback_counts.get(student_id, 0) == 1
        for student_id in records.active_student_ids
    )
    return ObligationState(
        absence_marked=absence_marked,
        feedback_complete=feedback_complete,
        voice_sent=MessageKind.VOICE.value in records.message_kinds,
        text_sent=MessageKind.TEXT.value in records.message_kinds,
    )


def lesson_fact_from_entity(
    lesson: Lesson, group_name: Optional[str] = None, fallback_rate=None
) -> LessonFact:
    """
    Проекция строки урока в LessonFact.

    fallback_rate подставляется только в LessonFact, строка урока не меняется.
    """
    rate = lesson.hourly_rate_snapshot
    if rate is None:
        rate = fallback_rate if fallback_rate is not None else 0
    return LessonFact(
        lesson_id=lesson.id,
        teacher_id=lesson.teacher_id,
        group_id=lesson.group_id,
        scheduled_at=lesson.scheduled_at,
        duration_minutes=lesson.duration_minutes,
        hourly_rate_snapshot=to_money(rate),
        status=lesson.status,
        lesson_name=lesson.topic or group_name or UNTITLED_LESSON,
    )


class ObligationTracker:
    """Определяет выполнение обязательств по урокам."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def evaluate(self, lesson: LessonFact) -> ObligationState:
        """Состояние обязательств для одного проведённого урока."""
        states = await self.evaluate_many([lesson])
        return states[lesson.lesson_id]

    async def evaluate_many(self, lessons: Iterable[LessonFact]) -> Dict[int, ObligationState]:
        """
        Пакетная оценка: по одному запросу на каждый источник фактов для всего набора уроков.

        Raises:
            InvalidLessonStateError: если хотя бы один урок не в статусе COMPLETED
        """
        lessons = list(lessons)
        for lesson in lessons:
            if lesson.status != LessonStatus.COMPLETED.value:
                raise InvalidLessonStateError(lesson.lesson_id, lesson.status)

        return await self._resolve(lessons)

    async def get_lesson_obligation(self, lesson_id: int) -> dict:
        """
        Текущее выполнение обязательств по уроку (для отображения).

        Статус урока не проверяется: флаги показываются и для ещё не проведённых уроков.
        """
        result = await self.session.execute(
            select(Lesson, Group.name)
            .outerjoin(Group, Group.id == Lesson.group_id)
            .where(Lesson.id == lesson_id)
        )
        row = result.first()
        if row is None:
            raise LessonNotFoundError(lesson_id)

        lesson, group_name = row
        fact = lesson_fact_from_entity(lesson, group_name)
        state = (await self._resolve([fact]))[fact.lesson_id]
        return {
            "lesson_id": lesson.id,
            "status": lesson.status,
            "absence_marked": state.absence_marked,
            "feedback_complete": state.feedback_complete,
            "voice_sent": state.voice_sent,
            "text_sent": state.text_sent,
            "completed_count": state.completed_count,
            "total": 4,
        }

    async def _resolve(self, lessons: List[LessonFact]) -> Dict[int, ObligationState]:
        if not lessons:
            return {}

        records = await self._load_records(lessons)
        return {
            lesson.lesson_id: resolve_obligations(records[lesson.lesson_id])
            for lesson in lessons
        }

    async def _load_records(self, lessons: List[LessonFact]) -> Dict[int, LessonObligationRecords]:
        lesson_ids = [lesson.lesson_id for lesson in lessons]
        group_ids = {lesson.group_id for lesson in lessons if lesson.group_id is not None}

        enrolled_by_group: Dict[int, Set[int]] = defaultdict(set)
        active_by_group: Dict[int, Set[int]] = defaultdict(set)
        if group_ids:
            enrollment_result = await self.session.execute(
                select(GroupEnrollment.group_id, GroupEnrollment.student_id, Student.status)
                .join(Student, Student.id == GroupEnrollment.student_id)
                .where(
                    GroupEnrollment.group_id.in_(group_ids),
                    GroupEnrollment.is_active.is_(True),
                )
            )
            for group_id, student_id, status in enrollment_result.all():
                enrolled_by_group[group_id].add(student_id)
                if status == StudentStatus.ACTIVE.value:
                    active_by_group[group_id].add(student_id)

        attendance_by_lesson: Dict[int, Set[int]] = defaultdict(set)
        attendance_result = await self.session.execute(
            select(Attendance.lesson_id, Attendance.student_id).where(
                Attendance.lesson_id.in_(lesson_ids)
            )
        )
        for lesson_id, student_id in attendance_result.all():
            attendance_by_lesson[lesson_id].add(student_id)

        feedback_by_lesson: Dict[int, Dict[int, int]] = defaultdict(dict)
        feedback_result = await self.session.execute(
            select(LessonFeedback.lesson_id, LessonFeedback.student_id, func.count(LessonFeedback.id))
            .where(LessonFeedback.lesson_id.in_(lesson_ids))
            .group_by(LessonFeedback.lesson_id, LessonFeedback.student_id)
        )
        for lesson_id, student_id, count in feedback_result.all():
            feedback_by_lesson[lesson_id][student_id] = count

        messages_by_lesson = defaultdict(list)
        message_result = await self.session.execute(
            select(ChatMessage.lesson_id, ChatMessage.kind, ChatMessage.sent_at, Chat.group_id)
            .join(Chat, Chat.id == ChatMessage.chat_id)
            .where(
                ChatMessage.lesson_id.in_(lesson_ids),
                ChatMessage.kind.in_([MessageKind.VOICE.value, MessageKind.TEXT.value]),
            )
        )
        for lesson_id, kind, sent_at, chat_group_id in message_result.all():
            messages_by_lesson[lesson_id].append((kind, sent_at, chat_group_id))

        records: Dict[int, LessonObligationRecords] = {}
        for lesson in lessons:
            enrolled = enrolled_by_group.get(lesson.group_id, set())
            active = active_by_group.get(lesson.group_id, set())
            kinds = {
                kind
                for kind, sent_at, chat_group_id in messages_by_lesson.get(lesson.lesson_id, [])
                if lesson.group_id is not None
                and chat_group_id == lesson.group_id
                and sent_at >= lesson.scheduled_at
            }
            records[lesson.lesson_id] = LessonObligationRecords(
                enrolled_student_ids=set(enrolled),
                active_student_ids=set(active),
                attendance_student_ids=attendance_by_lesson.get(lesson.lesson_id, set()),
                feedback_counts=feedback_by_lesson.get(lesson.lesson_id, {}),
                message_kinds=kinds,
            )

        logger.debug(
            "Obligation records loaded",
            lessons_count=len(lessons),
            groups_count=len(group_ids),
        )
        return records
