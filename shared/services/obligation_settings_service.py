"""Сервис весов обязательств преподавателя (singleton-настройка)."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.logging.logger import logger
from domain.entities.obligation_settings import ObligationSettings, SINGLETON_ID
from domain.values import ObligationConfig


class ObligationSettingsService:
    """Чтение снимка и валидированное обновление весов обязательств."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_config(self) -> ObligationConfig:
        """
        Возвращает снимок текущей конфигурации.

        Если настройка ещё не сохранялась, используются веса по умолчанию (25/25/25/25).
        Некорректная строка в БД приводит к InvalidConfigError.
        """
        row = await self.session.get(ObligationSettings, SINGLETON_ID)
        if row is None:
            return ObligationConfig.default()

        return ObligationConfig.from_mapping(
            {
                "absence_percent": row.absence_percent,
                "feedback_percent": row.feedback_percent,
                "voice_percent": row.voice_percent,
                "text_percent": row.text_percent,
            },
            version=row.version,
        )

    async def update_config(
        self,
        *,
        absence_percent: int,
        feedback_percent: int,
        voice_percent: int,
        text_percent: int,
        changed_by: Optional[str] = None,
    ) -> ObligationConfig:
        """
        Обновляет веса обязательств.

        Конфигурация проверяется до любой записи: при нарушении инварианта
        (проценты в [0, 100], сумма 100) выбрасывается InvalidConfigError.
        """
        candidate = ObligationConfig(
            absence_percent=absence_percent,
            feedback_percent=feedback_percent,
            voice_percent=voice_percent,
            text_percent=text_percent,
        )

        try:
            row = await self.session.get(ObligationSettings, SINGLETON_ID, with_for_update=True)
            old_values = None
            if row is None:
                row = ObligationSettings(id=SINGLETON_ID, version=1, **candidate.as_dict())
                self.session.add(row)
            else:
                old_values = {
                    "absence_percent": row.absence_percent,
                    "feedback_percent": row.feedback_percent,
                    "voice_percent": row.voice_percent,
                    "text_percent": row.text_percent,
                }
                row.absence_percent = candidate.absence_percent
                row.feedback_percent = candidate.feedback_percent
                row.voice_percent = candidate.voice_percent
                row.text_percent = candidate.text_percent
                row.version = row.version + 1
            row.updated_by = changed_by

            await self.session.flush()
            version = row.version
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating obligation settings: {e}")
            raise

        logger.info(
            "Obligation settings updated",
            version=version,
            old_values=old_values,
            new_values=candidate.as_dict(),
            changed_by=changed_by,
        )

        return ObligationConfig.from_mapping(candidate.as_dict(), version=version)
