"""Unit-тесты для соответствия доменных ошибок HTTP статусам."""

import pytest

from apps.api.app import status_code_for
from domain.exceptions import (
    CompensationError,
    InvalidConfigError,
    InvalidLessonStateError,
    LessonNotFoundError,
    SalaryAlreadyFinalizedError,
    SalaryRecordNotFoundError,
    TeacherNotFoundError,
    TransientPersistenceError,
)


@pytest.mark.parametrize(
    "error, status_code",
    [
        (SalaryAlreadyFinalizedError(1, 2026, 1), 409),
        (InvalidConfigError("percents must sum to 100, got 90"), 422),
        (TeacherNotFoundError(1), 404),
        (LessonNotFoundError(1), 404),
        (SalaryRecordNotFoundError(record_id=1), 404),
        (InvalidLessonStateError(1, "SCHEDULED"), 400),
        (TransientPersistenceError(1, 2026, 1, 3), 503),
        (CompensationError("unexpected"), 400),
    ],
)
def test_status_code_for(error, status_code):
    assert status_code_for(error) == status_code


def test_finalized_error_payload():
    payload = SalaryAlreadyFinalizedError(5, 2026, 2, record_id=9).to_dict()
    assert payload["code"] == "SALARY_ALREADY_FINALIZED"
    assert payload["record_id"] == 9
    assert payload["month"] == 2
