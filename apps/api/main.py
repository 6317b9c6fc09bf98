"""
Главный API роутер LessonPay
"""
from fastapi import APIRouter

from apps.api.routers.lessons import router as lessons_router
from apps.api.routers.salaries import router as salaries_router
from apps.api.routers.settings import router as settings_router

# Создаем главный роутер
api_router = APIRouter(prefix="/api/v1")

# Подключаем роутеры
api_router.include_router(salaries_router)
api_router.include_router(lessons_router)
api_router.include_router(settings_router)
