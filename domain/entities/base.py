"""
Базовый файл для всех доменных сущностей
Решает проблему циклических импортов
"""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

# Создаем общую Base для всех моделей
Base = declarative_base()

# JSONB в PostgreSQL, обычный JSON в остальных диалектах
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Текущее время UTC для Python-side default/onupdate."""
    return datetime.now(timezone.utc)
