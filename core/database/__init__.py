"""Модуль базы данных."""

from .session import (
    db_manager,
    get_async_session,
    get_db_session,
    close_database,
    DatabaseManager
)

__all__ = [
    "db_manager",
    "get_async_session",
    "get_db_session",
    "close_database",
    "DatabaseManager"
]
