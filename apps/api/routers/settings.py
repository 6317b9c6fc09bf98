"""
API роутер настроек весов обязательств
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database.session import get_db_session
from apps.api.schemas import ActionPercentsRequest, ActionPercentsResponse
from shared.services.obligation_settings_service import ObligationSettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


def _to_response(config) -> ActionPercentsResponse:
    return ActionPercentsResponse(version=config.version, **config.as_dict())


@router.get("/action-percents", response_model=ActionPercentsResponse)
async def get_action_percents(db: AsyncSession = Depends(get_db_session)):
    """Текущие веса обязательств."""
    service = ObligationSettingsService(db)
    return _to_response(await service.get_config())


@router.put("/action-percents", response_model=ActionPercentsResponse)
async def update_action_percents(
    request: ActionPercentsRequest,
    db: AsyncSession = Depends(get_db_session)
):
    """Обновление весов обязательств (сумма ровно 100)."""
    service = ObligationSettingsService(db)
    config = await service.update_config(
        absence_percent=request.absence_percent,
        feedback_percent=request.feedback_percent,
        voice_percent=request.voice_percent,
        text_percent=request.text_percent,
        changed_by=request.changed_by,
    )
    return _to_response(config)
