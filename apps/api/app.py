"""
FastAPI приложение LessonPay
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import uuid

from core.config.settings import settings
from core.database.session import close_database
from core.logging.logger import logger, setup_logging
from domain.exceptions import (
    CompensationError,
    InvalidConfigError,
    InvalidLessonStateError,
    NotFoundError,
    SalaryAlreadyFinalizedError,
    TransientPersistenceError,
)
from .main import api_router

# Ошибки движка → HTTP статус; порядок важен для подклассов
ERROR_STATUS_CODES = (
    (SalaryAlreadyFinalizedError, status.HTTP_409_CONFLICT),
    (InvalidConfigError, 422),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidLessonStateError, status.HTTP_400_BAD_REQUEST),
    (TransientPersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_code_for(exc: CompensationError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    logger.info("LessonPay API starting", environment=settings.environment)
    yield
    await close_database()
    logger.info("LessonPay API stopped")


def create_app() -> FastAPI:
    """Создание FastAPI приложения."""
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        description="API расчёта зарплат преподавателей с удержаниями за невыполненные обязательства",
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # В продакшене ограничить
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware для логирования запросов
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Логирование всех HTTP запросов."""
        request_id = str(uuid.uuid4())
        start_time = time.time()

        logger.info(
            "HTTP Request started",
            request_id=request_id,
            method=request.method,
            url=str(request.url),
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            logger.info(
                "HTTP Request completed",
                request_id=request_id,
                status_code=response.status_code,
                process_time=process_time
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = str(process_time)

            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "HTTP Request failed",
                request_id=request_id,
                error=str(e),
                process_time=process_time
            )
            raise

    # Обработчики ошибок
    @app.exception_handler(CompensationError)
    async def compensation_exception_handler(request: Request, exc: CompensationError):
        """Обработчик доменных ошибок расчёта."""
        status_code = status_code_for(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "Compensation error",
            code=exc.code,
            error=exc.message,
            status_code=status_code,
            path=request.url.path
        )

        return JSONResponse(status_code=status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Обработчик HTTP исключений."""
        logger.warning(
            "HTTP Exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "code": "HTTP_ERROR",
                "message": exc.detail,
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Обработчик ошибок валидации."""
        logger.warning(
            "Validation Error",
            errors=exc.errors(),
            path=request.url.path
        )

        return JSONResponse(
            status_code=422,
            content={
                "code": "VALIDATION_ERROR",
                "message": "Ошибка валидации данных",
                "details": jsonable_encoder(exc.errors()),
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Общий обработчик исключений."""
        logger.exception(
            "General Exception",
            error=str(exc),
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "code": "INTERNAL_ERROR",
                "message": "Внутренняя ошибка сервера"
            }
        )

    # Подключаем API роутеры
    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """Проверка состояния приложения."""
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": settings.version
        }

    return app


# Создаем экземпляр приложения
app = create_app()
