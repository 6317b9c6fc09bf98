"""Celery приложение для LessonPay."""

from celery import Celery
from celery.schedules import crontab
from core.config.settings import settings
from core.logging.logger import logger, setup_logging

setup_logging()

# Создание Celery приложения
celery_app = Celery(
    "lessonpay",
    broker=settings.rabbitmq_url,
    backend=settings.redis_url,
    include=[
        "core.celery.tasks.salary_tasks",
    ]
)

# Конфигурация Celery
celery_app.conf.update(
    # Часовой пояс
    timezone=settings.default_timezone,
    enable_utc=True,

    # Сериализация
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Настройки задач
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 минут
    task_soft_time_limit=25 * 60,  # 25 минут

    # Настройки результатов
    result_expires=3600,  # 1 час
    result_backend_transport_options={
        'retry_policy': {
            'timeout': 5.0
        }
    },

    # Настройки worker'а
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    # Настройки планировщика
    beat_schedule={
        # Зарплаты за прошедший месяц: 1 числа в 04:00 (часовой пояс организации)
        'generate-monthly-salaries': {
            'task': 'generate_monthly_salaries',
            'schedule': crontab(hour=4, minute=0, day_of_month=1),
        },
    },

    # Маршрутизация задач
    task_routes={
        'core.celery.tasks.salary_tasks.*': {'queue': 'salaries'},
        'generate_monthly_salaries': {'queue': 'salaries'},
        'recalculate_teacher_salary': {'queue': 'salaries'},
    },
)

# Логирование запуска Celery
logger.info(f"Celery application configured - broker: {settings.rabbitmq_url}, backend: {settings.redis_url}")
