# Importing every model module registers all mappers on Base.metadata.
from app.models.user import User
from app.models.program import Program
from app.models.program_module import ProgramModule
from app.models.program_lesson import ProgramLesson
from app.models.program_resource import ProgramResource
from app.models.enrollment import Enrollment
from app.models.lesson_progress import LessonProgress
from app.models.program_progress import ProgramProgress
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "Program",
    "ProgramModule",
    "ProgramLesson",
    "ProgramResource",
    "Enrollment",
    "LessonProgress",
    "ProgramProgress",
    "AuditLog",
]
