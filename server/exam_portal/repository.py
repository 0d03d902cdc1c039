"""
Repository interface over the exam store.

Handlers and services only talk to ``ExamRepository``; the SQLAlchemy
implementation lives here and the dictionary-backed one in
``exam_portal.storage``.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from exam_portal.config import settings
from exam_portal.database import SessionLocal
from exam_portal.errors import DuplicateAttempt
from exam_portal.models import (
    AttemptStatus,
    Exam,
    ExamAttempt,
    ExamStatus,
    File,
    Question,
    User,
)

logger = logging.getLogger(__name__)


class ExamRepository(ABC):
    """Lookup and create operations the request handlers need."""

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_exam(self, exam_id: str) -> Optional[Exam]:
        ...

    @abstractmethod
    def find_exam_by_code(self, code: str, status: Optional[ExamStatus] = None) -> Optional[Exam]:
        """Exam with join code ``code``; when ``status`` is given it must match."""

    @abstractmethod
    def find_exam_owned_by(self, exam_id: str, teacher_id: str) -> Optional[Exam]:
        ...

    @abstractmethod
    def list_questions(self, exam_id: str) -> List[Question]:
        ...

    @abstractmethod
    def count_questions(self, exam_id: str) -> int:
        ...

    @abstractmethod
    def find_attempt(
        self, exam_id: str, user_id: str, status: Optional[AttemptStatus] = None
    ) -> Optional[ExamAttempt]:
        ...

    @abstractmethod
    def create_attempt(self, exam_id: str, user_id: str, started_at: datetime) -> ExamAttempt:
        """
        Insert an IN_PROGRESS attempt.

        Raises ``DuplicateAttempt`` when the pair already has one; the store
        is what makes concurrent joins for the same pair safe.
        """

    @abstractmethod
    def list_attempts(self, exam_id: str, newest_first: bool = False) -> List[ExamAttempt]:
        """Attempts of an exam with their answers and users loaded."""

    @abstractmethod
    def add_file(self, filename: str, path: str, content_type: str, size: int,
                 exam_id: Optional[str] = None) -> File:
        ...


def _submitted_at(attempt: ExamAttempt) -> datetime:
    return attempt.ended_at or attempt.updated_at or attempt.started_at or datetime.min


def sort_newest_first(attempts: List[ExamAttempt]) -> List[ExamAttempt]:
    """Most recently submitted first; unfinished attempts fall back to their last update."""
    return sorted(attempts, key=_submitted_at, reverse=True)


class SqlExamRepository(ExamRepository):
    """``ExamRepository`` backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def find_exam(self, exam_id: str) -> Optional[Exam]:
        stmt = select(Exam).where(Exam.id == exam_id).options(selectinload(Exam.questions))
        return self.db.execute(stmt).scalar_one_or_none()

    def find_exam_by_code(self, code: str, status: Optional[ExamStatus] = None) -> Optional[Exam]:
        stmt = select(Exam).where(Exam.exam_code == code).options(selectinload(Exam.questions))
        exam = self.db.execute(stmt).scalar_one_or_none()
        if exam is not None and status is not None and exam.status is not status:
            return None
        return exam

    def find_exam_owned_by(self, exam_id: str, teacher_id: str) -> Optional[Exam]:
        stmt = (
            select(Exam)
            .where(Exam.id == exam_id, Exam.user_id == teacher_id)
            .options(selectinload(Exam.questions))
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_questions(self, exam_id: str) -> List[Question]:
        stmt = select(Question).where(Question.exam_id == exam_id).order_by(Question.position)
        return list(self.db.execute(stmt).scalars())

    def count_questions(self, exam_id: str) -> int:
        stmt = select(func.count(Question.id)).where(Question.exam_id == exam_id)
        return self.db.execute(stmt).scalar_one()

    def find_attempt(
        self, exam_id: str, user_id: str, status: Optional[AttemptStatus] = None
    ) -> Optional[ExamAttempt]:
        stmt = (
            select(ExamAttempt)
            .where(ExamAttempt.exam_id == exam_id, ExamAttempt.user_id == user_id)
            .options(selectinload(ExamAttempt.answers), selectinload(ExamAttempt.user))
        )
        attempt = self.db.execute(stmt).scalar_one_or_none()
        # status is filtered after loading so legacy casings still match
        if attempt is not None and status is not None and attempt.status is not status:
            return None
        return attempt

    def create_attempt(self, exam_id: str, user_id: str, started_at: datetime) -> ExamAttempt:
        attempt = ExamAttempt(
            exam_id=exam_id,
            user_id=user_id,
            status=AttemptStatus.IN_PROGRESS,
            started_at=started_at,
        )
        self.db.add(attempt)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateAttempt(exam_id, user_id) from exc
        self.db.refresh(attempt)
        logger.debug("Created attempt %s for exam %s user %s", attempt.id, exam_id, user_id)
        return attempt

    def list_attempts(self, exam_id: str, newest_first: bool = False) -> List[ExamAttempt]:
        stmt = (
            select(ExamAttempt)
            .where(ExamAttempt.exam_id == exam_id)
            .options(selectinload(ExamAttempt.answers), selectinload(ExamAttempt.user))
        )
        attempts = list(self.db.execute(stmt).scalars())
        return sort_newest_first(attempts) if newest_first else attempts

    def add_file(self, filename: str, path: str, content_type: str, size: int,
                 exam_id: Optional[str] = None) -> File:
        record = File(filename=filename, path=path, type=content_type, size=size, exam_id=exam_id)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record


_memory_repository: Optional[ExamRepository] = None


def get_repository():
    """Dependency: the configured ``ExamRepository`` for one request."""
    global _memory_repository
    if settings.storage_backend == "memory":
        if _memory_repository is None:
            from exam_portal.storage import InMemoryExamRepository
            _memory_repository = InMemoryExamRepository()
        yield _memory_repository
        return

    db = SessionLocal()
    try:
        yield SqlExamRepository(db)
    finally:
        db.close()
