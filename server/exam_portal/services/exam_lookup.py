"""
Exam lookup by id or join code, with the lifecycle filters the join and
instructions flows apply.
"""
from datetime import datetime
from typing import Optional, Type

from exam_portal.errors import NotFound, PortalError, ValidationError
from exam_portal.models import Exam, ExamStatus
from exam_portal.repository import ExamRepository


def find_by_code(repo: ExamRepository, code: str, published_only: bool = False) -> Optional[Exam]:
    return repo.find_exam_by_code(code, ExamStatus.PUBLISHED if published_only else None)


def find_by_id_owned_by(repo: ExamRepository, exam_id: str, teacher_id: str) -> Optional[Exam]:
    return repo.find_exam_owned_by(exam_id, teacher_id)


def require_exam(exam: Optional[Exam], message: str = "Exam not found") -> Exam:
    if exam is None:
        raise NotFound(message)
    return exam


def check_active_window(exam: Exam, now: datetime, error: Type[PortalError] = ValidationError,
                        subject: str = "Exam") -> None:
    """Raise ``error`` when ``now`` falls outside [start_date, end_date]."""
    if now < exam.start_date:
        raise error(f"{subject} has not started yet")
    if now > exam.end_date:
        raise error(f"{subject} has already ended")


def find_joinable(repo: ExamRepository, code: str, now: datetime) -> Exam:
    """A published exam with join code ``code`` that is open at ``now``."""
    exam = require_exam(find_by_code(repo, code, published_only=True), "Exam not found or not available")
    check_active_window(exam, now)
    return exam
