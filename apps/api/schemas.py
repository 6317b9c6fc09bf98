"""
Схемы Pydantic для API LessonPay
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.utils.period_helper import MIN_YEAR


class PeriodRequest(BaseModel):
    """Расчётный период."""
    year: int = Field(..., ge=MIN_YEAR, description="Год")
    month: int = Field(..., ge=1, le=12, description="Месяц (1-12)")


class GenerateSalaryRequest(PeriodRequest):
    """Запрос на расчёт зарплаты одного преподавателя."""
    teacher_id: int = Field(..., gt=0, description="ID преподавателя")


class GenerateMonthlyRequest(PeriodRequest):
    """Запрос на расчёт зарплат всех активных преподавателей."""


class ProcessPaymentRequest(BaseModel):
    """Отметка о выплате."""
    notes: Optional[str] = Field(None, max_length=2000, description="Комментарий к выплате")

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class DeleteSalaryRecordsRequest(BaseModel):
    """Пакетное удаление записей зарплаты."""
    ids: List[int] = Field(..., min_length=1, max_length=500, description="ID записей")


class DeleteSalaryRecordsResponse(BaseModel):
    deleted: List[int]
    skipped_paid: List[int]
    not_found: List[int]


class SalaryRecordResponse(BaseModel):
    """Запись зарплаты."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    teacher_id: int
    year: int
    month: int
    lessons_count: int
    gross_amount: Decimal
    deduction_amount: Decimal
    net_amount: Decimal
    status: str
    generated_at: datetime
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    config_version: int


class SalaryRecordListResponse(BaseModel):
    """Страница записей зарплаты."""
    items: List[SalaryRecordResponse]
    total: int
    page: int
    size: int
    pages: int


class MonthlyGenerationResponse(BaseModel):
    """Итог пакетного расчёта."""
    year: int
    month: int
    total_teachers: int
    generated_count: int
    failed_count: int
    generated: List[Dict[str, Any]]
    failed: List[Dict[str, Any]]


class ObligationFlags(BaseModel):
    absence_marked: bool
    feedback_complete: bool
    voice_sent: bool
    text_sent: bool


class BreakdownLineResponse(BaseModel):
    """Строка расшифровки по уроку."""
    lesson_id: int
    lesson_name: str
    lesson_date: datetime
    duration_minutes: int
    hourly_rate_snapshot: Decimal
    gross_amount: Decimal
    deduction_amount: Decimal
    net_amount: Decimal
    penalty_percent: int
    obligations: ObligationFlags
    missing_obligations: List[str]


class SalaryBreakdownResponse(BaseModel):
    """Расшифровка зарплаты за месяц."""
    salary_record_id: int
    teacher_id: int
    teacher_name: Optional[str] = None
    month: str = Field(..., description="Период в формате YYYY-MM")
    status: str
    lessons_count: int
    gross_amount: Decimal
    deduction_amount: Decimal
    net_amount: Decimal
    generated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    config_snapshot: Optional[Dict[str, Any]] = None
    lines: List[BreakdownLineResponse]


class TeacherSalarySummaryResponse(BaseModel):
    teacher_id: int
    total_records: int
    paid_records: int
    pending_records: int
    total_net_amount: Decimal
    paid_net_amount: Decimal
    pending_net_amount: Decimal


class LessonObligationResponse(BaseModel):
    """Текущее выполнение обязательств по уроку."""
    lesson_id: int
    status: str
    absence_marked: bool
    feedback_complete: bool
    voice_sent: bool
    text_sent: bool
    completed_count: int
    total: int


class ActionPercentsRequest(BaseModel):
    """Веса обязательств. Сумма должна быть ровно 100."""
    absence_percent: int = Field(..., ge=0, le=100)
    feedback_percent: int = Field(..., ge=0, le=100)
    voice_percent: int = Field(..., ge=0, le=100)
    text_percent: int = Field(..., ge=0, le=100)
    changed_by: Optional[str] = Field(None, max_length=255)


class ActionPercentsResponse(BaseModel):
    absence_percent: int
    feedback_percent: int
    voice_percent: int
    text_percent: int
    version: int


class ErrorResponse(BaseModel):
    """Схема ошибки."""
    code: str
    message: str
