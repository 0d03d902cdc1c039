"""
Attempt lifecycle: NoAttempt -> IN_PROGRESS -> COMPLETED.

Only the first transition happens here (joining); completion is done by
the submission flow.
"""
import logging
from datetime import datetime
from typing import Optional

from exam_portal.errors import AlreadyCompleted, DuplicateAttempt
from exam_portal.models import AttemptStatus, Exam, ExamAttempt, User
from exam_portal.repository import ExamRepository

logger = logging.getLogger(__name__)


def is_completed(attempt: Optional[ExamAttempt]) -> bool:
    return attempt is not None and attempt.is_completed


def find_completed(repo: ExamRepository, exam: Exam, student: User) -> Optional[ExamAttempt]:
    return repo.find_attempt(exam.id, student.id, status=AttemptStatus.COMPLETED)


def ensure_not_completed(repo: ExamRepository, exam: Exam, student: User) -> None:
    if find_completed(repo, exam, student) is not None:
        logger.info("Student %s has already completed exam %s", student.id, exam.id)
        raise AlreadyCompleted()


def join(repo: ExamRepository, exam: Exam, student: User, now: datetime) -> ExamAttempt:
    """
    Put ``student`` into ``exam``.

    Returns the student's attempt: the existing one when it is still in
    progress, otherwise a fresh IN_PROGRESS attempt started at ``now``.
    A completed attempt raises ``AlreadyCompleted`` without writing.
    """
    existing = repo.find_attempt(exam.id, student.id)
    if is_completed(existing):
        raise AlreadyCompleted()
    if existing is not None:
        logger.debug("Student %s rejoined exam %s (attempt %s)", student.id, exam.id, existing.id)
        return existing

    try:
        attempt = repo.create_attempt(exam.id, student.id, started_at=now)
    except DuplicateAttempt:
        # a concurrent join won the insert; use its attempt
        attempt = repo.find_attempt(exam.id, student.id)
        if attempt is None:
            raise
        if is_completed(attempt):
            raise AlreadyCompleted()
        return attempt

    logger.info("Student %s joined exam %s", student.id, exam.id)
    return attempt
