"""Утилиты для работы с расчётными периодами (календарный месяц)."""

from datetime import date, datetime
from typing import Optional, Tuple

import pytz

from core.config.settings import settings
from core.logging.logger import logger

MIN_YEAR = 2000


def validate_period(year: int, month: int) -> None:
    """Проверяет год и месяц расчётного периода."""
    if isinstance(year, bool) or not isinstance(year, int) or year < MIN_YEAR:
        raise ValueError(f"Invalid year: {year!r}")
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month!r}. Expected 1-12")


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """
    Границы месяца в UTC: [первое число 00:00, первое число следующего месяца 00:00).

    Returns:
        Кортеж (начало, конец) без tzinfo, как хранится scheduled_at
    """
    validate_period(year, month)
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def local_today(timezone_str: Optional[str] = None) -> date:
    """Текущая дата в часовом поясе организации."""
    tz_name = timezone_str or settings.default_timezone
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {tz_name}, using UTC")
        tz = pytz.UTC
    return datetime.now(tz).date()


def previous_month(today: Optional[date] = None) -> Tuple[int, int]:
    """Предыдущий календарный месяц относительно даты (по умолчанию сегодня)."""
    today = today or local_today()
    if today.month == 1:
        return today.year - 1, 12
    return today.year, today.month - 1
