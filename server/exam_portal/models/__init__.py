"""
Models package initialization
Import all models here to ensure they are registered with SQLAlchemy
"""

from exam_portal.models.user import User, UserRole
from exam_portal.models.content import Exam, ExamStatus, ExamType, File, Question, QuestionType
from exam_portal.models.session import Answer, AttemptStatus, ExamAttempt

__all__ = [
    "User",
    "UserRole",
    "Exam",
    "ExamStatus",
    "ExamType",
    "File",
    "Question",
    "QuestionType",
    "ExamAttempt",
    "AttemptStatus",
    "Answer",
]
