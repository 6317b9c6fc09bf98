"""
Конфигурация pytest для тестов LessonPay
Фикстуры БД (in-memory SQLite) и фабрика тестовых данных
"""
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from domain.entities import Base
from tests.utils.factories import LessonDataFactory


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Фикстуры для работы с БД (интеграционные тесты)
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Тестовый движок: одна in-memory БД на тест."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Фабрика сессий; каждый вызов открывает новую сессию (как get_async_session)."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Сессия БД для теста."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def factory(db_session):
    """Фабрика учебных данных поверх db_session."""
    return LessonDataFactory(db_session)


@pytest.fixture
def sequential_generation(monkeypatch):
    """Пакетная генерация по одному преподавателю: SQLite делит одно соединение между сессиями."""
    from core.config.settings import settings
    monkeypatch.setattr(settings, "salary_generation_concurrency", 1)


# =============================================================================
# Моки для unit тестов
# =============================================================================

@pytest.fixture
def mock_db_session():
    """Мок сессии базы данных для unit тестов"""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session
