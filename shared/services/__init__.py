"""Shared services package."""

from .deduction_rule_engine import DeductionRuleEngine
from .obligation_settings_service import ObligationSettingsService
from .obligation_tracker import ObligationTracker
from .salary_breakdown_service import SalaryBreakdownService
from .salary_generation_service import SalaryGenerationService, MonthlyGenerationReport
from .salary_record_service import SalaryRecordService

__all__ = [
    'DeductionRuleEngine',
    'ObligationSettingsService',
    'ObligationTracker',
    'SalaryBreakdownService',
    'SalaryGenerationService',
    'MonthlyGenerationReport',
    'SalaryRecordService',
]
