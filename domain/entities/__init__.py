"""
Модуль доменных сущностей LessonPay
"""

# Импортируем модели в правильном порядке
from .base import Base
from .teacher import Teacher
from .student import Student, StudentStatus
from .group import Group, GroupEnrollment
from .lesson import Lesson, LessonStatus
from .attendance import Attendance
from .feedback import LessonFeedback
from .chat import Chat, ChatMessage, MessageKind
from .obligation_settings import ObligationSettings
from .salary_record import SalaryRecord, SalaryStatus
from .salary_breakdown_line import SalaryBreakdownLine

__all__ = [
    "Base",
    "Teacher",
    "Student",
    "StudentStatus",
    "Group",
    "GroupEnrollment",
    "Lesson",
    "LessonStatus",
    "Attendance",
    "LessonFeedback",
    "Chat",
    "ChatMessage",
    "MessageKind",
    "ObligationSettings",
    "SalaryRecord",
    "SalaryStatus",
    "SalaryBreakdownLine",
]
