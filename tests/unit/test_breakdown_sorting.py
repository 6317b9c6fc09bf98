"""Unit-тесты для порядка строк расшифровки."""

import pytest
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from shared.services.salary_breakdown_service import sort_lines


def _line(lesson_id, day, name, net):
    return SimpleNamespace(
        lesson_id=lesson_id,
        lesson_date=datetime(2026, 1, day, 10, 0),
        lesson_name=name,
        gross_amount=Decimal("1000.00"),
        deduction_amount=Decimal("1000.00") - Decimal(net),
        net_amount=Decimal(net),
    )


@pytest.fixture
def lines():
    return [
        _line(4, 20, "Algebra", "750.00"),
        _line(2, 5, "Geometry", "1000.00"),
        _line(3, 5, "Algebra", "750.00"),
        _line(1, 12, "Physics", "500.00"),
    ]


def test_default_order_is_lesson_date_then_id(lines):
    assert [line.lesson_id for line in sort_lines(lines)] == [2, 3, 1, 4]


def test_sort_by_name_ties_broken_by_date(lines):
    assert [line.lesson_id for line in sort_lines(lines, "lesson_name")] == [3, 4, 2, 1]


def test_descending_keeps_ascending_tie_break(lines):
    ordered = sort_lines(lines, "net_amount", descending=True)
    assert [line.lesson_id for line in ordered] == [2, 3, 4, 1]


def test_sort_by_deduction(lines):
    ordered = sort_lines(lines, "deduction_amount")
    assert [line.lesson_id for line in ordered] == [2, 3, 4, 1]


def test_unknown_sort_field_is_rejected(lines):
    with pytest.raises(ValueError):
        sort_lines(lines, "teacher_id")
