"""
Типизированные ошибки движка расчёта зарплат преподавателей.

Иерархия:

    CompensationError
    +-- InvalidConfigError            конфигурация весов обязательств (до использования)
    +-- InvalidLessonStateError       ошибка вызывающего кода
    +-- NotFoundError
    |   +-- TeacherNotFoundError
    |   +-- LessonNotFoundError
    |   +-- SalaryRecordNotFoundError
    +-- SalaryAlreadyFinalizedError   конфликт: запись уже выплачена
    +-- TransientPersistenceError     исчерпаны повторы записи

У каждой ошибки есть машинно-читаемый ``code``.
"""

from typing import Any, Dict, Optional


class CompensationError(Exception):
    """Базовая ошибка движка."""

    code: str = "COMPENSATION_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class InvalidConfigError(CompensationError):
    """Проценты обязательств вне [0, 100] или их сумма не равна 100."""

    code = "INVALID_CONFIG"

    def __init__(self, reason: str, percents: Optional[Dict[str, Any]] = None):
        self.reason = reason
        self.percents = dict(percents or {})
        super().__init__(f"Invalid obligation config: {reason}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["percents"] = self.percents
        return data


class InvalidLessonStateError(CompensationError):
    """Обязательства можно оценивать только у проведённого урока."""

    code = "INVALID_LESSON_STATE"

    def __init__(self, lesson_id: int, status: str):
        self.lesson_id = lesson_id
        self.status = status
        super().__init__(
            f"Lesson {lesson_id} has status {status}; only COMPLETED lessons can be evaluated"
        )


class NotFoundError(CompensationError):
    code = "NOT_FOUND"


class TeacherNotFoundError(NotFoundError):
    code = "TEACHER_NOT_FOUND"

    def __init__(self, teacher_id: int):
        self.teacher_id = teacher_id
        super().__init__(f"Teacher {teacher_id} not found")


class LessonNotFoundError(NotFoundError):
    code = "LESSON_NOT_FOUND"

    def __init__(self, lesson_id: int):
        self.lesson_id = lesson_id
        super().__init__(f"Lesson {lesson_id} not found")


class SalaryRecordNotFoundError(NotFoundError):
    code = "SALARY_RECORD_NOT_FOUND"

    def __init__(
        self,
        *,
        record_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ):
        self.record_id = record_id
        self.teacher_id = teacher_id
        self.year = year
        self.month = month
        if record_id is not None:
            message = f"Salary record {record_id} not found"
        else:
            message = f"Salary record for teacher {teacher_id}, {year}-{month:02d} not found"
        super().__init__(message)


class SalaryAlreadyFinalizedError(CompensationError):
    """Запись зарплаты уже в статусе PAID и не может быть пересчитана."""

    code = "SALARY_ALREADY_FINALIZED"

    def __init__(self, teacher_id: int, year: int, month: int, record_id: Optional[int] = None):
        self.teacher_id = teacher_id
        self.year = year
        self.month = month
        self.record_id = record_id
        super().__init__(
            f"Salary for teacher {teacher_id}, {year}-{month:02d} is already paid"
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            teacher_id=self.teacher_id,
            year=self.year,
            month=self.month,
            record_id=self.record_id,
        )
        return data


class TransientPersistenceError(CompensationError):
    """Не удалось зафиксировать запись после нескольких попыток."""

    code = "TRANSIENT_PERSISTENCE"

    def __init__(self, teacher_id: int, year: int, month: int, attempts: int):
        self.teacher_id = teacher_id
        self.year = year
        self.month = month
        self.attempts = attempts
        super().__init__(
            f"Could not persist salary for teacher {teacher_id}, {year}-{month:02d} "
            f"after {attempts} attempts; retry later"
        )
