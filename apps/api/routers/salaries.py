"""
API роутер расчёта и выплаты зарплат преподавателей
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database.session import get_db_session
from domain.entities.salary_record import SalaryStatus
from apps.api.schemas import (
    GenerateSalaryRequest, GenerateMonthlyRequest, ProcessPaymentRequest,
    DeleteSalaryRecordsRequest, DeleteSalaryRecordsResponse,
    SalaryRecordResponse, SalaryRecordListResponse, MonthlyGenerationResponse,
    SalaryBreakdownResponse, TeacherSalarySummaryResponse,
)
from shared.services.salary_breakdown_service import SalaryBreakdownService, DEFAULT_SORT
from shared.services.salary_generation_service import SalaryGenerationService
from shared.services.salary_record_service import SalaryRecordService

router = APIRouter(prefix="/salaries", tags=["salaries"])


@router.post("/generate", response_model=SalaryRecordResponse)
async def generate_salary(
    request: GenerateSalaryRequest,
    db: AsyncSession = Depends(get_db_session)
):
    """Расчёт (или пересчёт PENDING) зарплаты преподавателя за месяц."""
    service = SalaryGenerationService(db)
    return await service.generate(request.teacher_id, request.year, request.month)


@router.post("/generate-monthly", response_model=MonthlyGenerationResponse)
async def generate_monthly_salaries(
    request: GenerateMonthlyRequest,
    db: AsyncSession = Depends(get_db_session)
):
    """Расчёт зарплат всех активных преподавателей за месяц."""
    service = SalaryGenerationService(db)
    report = await service.generate_monthly_salaries(request.year, request.month)
    return report.to_dict()


@router.get("", response_model=SalaryRecordListResponse)
async def list_salaries(
    teacher_id: Optional[int] = Query(None, description="Фильтр по преподавателю"),
    status_filter: Optional[SalaryStatus] = Query(None, alias="status", description="Фильтр по статусу"),
    year: Optional[int] = Query(None, description="Фильтр по году"),
    month: Optional[int] = Query(None, ge=1, le=12, description="Фильтр по месяцу"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    size: int = Query(50, ge=1, le=200, description="Размер страницы"),
    db: AsyncSession = Depends(get_db_session)
):
    """Список записей зарплаты с фильтрацией и пагинацией."""
    service = SalaryRecordService(db)
    items, total = await service.list_records(
        teacher_id=teacher_id,
        status=status_filter.value if status_filter else None,
        year=year,
        month=month,
        skip=(page - 1) * size,
        limit=size,
    )
    return SalaryRecordListResponse(
        items=[SalaryRecordResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        size=size,
        pages=(total + size - 1) // size,
    )


@router.get("/{teacher_id}/{year}/{month}/breakdown", response_model=SalaryBreakdownResponse)
async def get_salary_breakdown(
    teacher_id: int,
    year: int,
    month: int,
    sort_by: str = Query(DEFAULT_SORT, description="lesson_date | lesson_name | gross_amount | deduction_amount | net_amount"),
    descending: bool = Query(False, description="Сортировка по убыванию"),
    db: AsyncSession = Depends(get_db_session)
):
    """Расшифровка зарплаты по урокам (сохранённый расчёт)."""
    service = SalaryBreakdownService(db)
    try:
        return await service.get_salary_breakdown(
            teacher_id, year, month, sort_by=sort_by, descending=descending
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{record_id}/process", response_model=SalaryRecordResponse)
async def process_salary_payment(
    record_id: int,
    request: Optional[ProcessPaymentRequest] = None,
    db: AsyncSession = Depends(get_db_session)
):
    """Отметка записи как выплаченной (PENDING → PAID)."""
    service = SalaryRecordService(db)
    notes = request.notes if request else None
    return await service.process_payment(record_id, notes=notes)


@router.post("/delete-many", response_model=DeleteSalaryRecordsResponse)
async def delete_salary_records(
    request: DeleteSalaryRecordsRequest,
    db: AsyncSession = Depends(get_db_session)
):
    """Пакетное удаление невыплаченных записей."""
    service = SalaryRecordService(db)
    return await service.delete_records(request.ids)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_salary_record(
    record_id: int,
    db: AsyncSession = Depends(get_db_session)
):
    """Удаление записи зарплаты (только PENDING)."""
    service = SalaryRecordService(db)
    await service.delete_record(record_id)


@router.get("/teacher/{teacher_id}/summary", response_model=TeacherSalarySummaryResponse)
async def get_teacher_salary_summary(
    teacher_id: int,
    db: AsyncSession = Depends(get_db_session)
):
    """Сводка по зарплатам преподавателя."""
    service = SalaryRecordService(db)
    return await service.get_teacher_salary_summary(teacher_id)
