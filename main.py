#!/usr/bin/env python3
"""
Точка входа API LessonPay
"""

import uvicorn

from core.config.settings import settings, validate_settings


def main():
    """Основная функция запуска API."""
    validate_settings()
    uvicorn.run(
        "apps.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
