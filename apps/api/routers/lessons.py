"""
API роутер обязательств по урокам
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database.session import get_db_session
from apps.api.schemas import LessonObligationResponse
from shared.services.obligation_tracker import ObligationTracker

router = APIRouter(prefix="/lessons", tags=["lessons"])


@router.get("/{lesson_id}/obligations", response_model=LessonObligationResponse)
async def get_lesson_obligations(
    lesson_id: int,
    db: AsyncSession = Depends(get_db_session)
):
    """Текущее выполнение обязательств преподавателя по уроку."""
    tracker = ObligationTracker(db)
    return await tracker.get_lesson_obligation(lesson_id)
