"""
In-memory storage for users, exams, attempts and files.
Backs the API when ``storage_backend`` is "memory" and the test suite.
"""
import threading
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from exam_portal.database import utcnow
from exam_portal.errors import DuplicateAttempt
from exam_portal.models import (
    Answer,
    AttemptStatus,
    Exam,
    ExamAttempt,
    ExamStatus,
    File,
    Question,
    User,
)
from exam_portal.repository import ExamRepository, sort_newest_first


def _new_id() -> str:
    return uuid.uuid4().hex


class InMemoryExamRepository(ExamRepository):
    """Dictionary-backed ``ExamRepository`` holding transient ORM objects."""

    def __init__(self):
        # user_id -> user
        self.users_db: Dict[str, User] = {}
        # exam_id -> exam (questions hang off exam.questions)
        self.exams_db: Dict[str, Exam] = {}
        # (exam_id, user_id) -> attempt; the key is the uniqueness constraint
        self.attempts_db: Dict[Tuple[str, str], ExamAttempt] = {}
        # file_id -> file record
        self.files_db: Dict[str, File] = {}
        self._lock = threading.Lock()

    # -- seeding ---------------------------------------------------------

    def add_user(self, user: User) -> User:
        user.id = user.id or _new_id()
        self.users_db[user.id] = user
        return user

    def add_exam(self, exam: Exam, questions: Iterable[Question] = ()) -> Exam:
        exam.id = exam.id or _new_id()
        if exam.status is None:
            exam.status = ExamStatus.DRAFT
        exam.status = ExamStatus.normalize(exam.status)
        for position, question in enumerate(questions):
            question.id = question.id or _new_id()
            question.exam_id = exam.id
            if question.position is None:
                question.position = position
            if question.marks is None:
                question.marks = 1
            exam.questions.append(question)
        self.exams_db[exam.id] = exam
        return exam

    def add_attempt(self, attempt: ExamAttempt, answers: Iterable[Answer] = ()) -> ExamAttempt:
        key = (attempt.exam_id, attempt.user_id)
        with self._lock:
            if key in self.attempts_db:
                raise DuplicateAttempt(*key)
            self.attempts_db[key] = attempt
        attempt.id = attempt.id or _new_id()
        attempt.status = AttemptStatus.normalize(attempt.status or AttemptStatus.IN_PROGRESS)
        attempt.started_at = attempt.started_at or utcnow()
        attempt.updated_at = attempt.updated_at or attempt.ended_at or attempt.started_at
        attempt.user = self.users_db.get(attempt.user_id)
        for answer in answers:
            answer.id = answer.id or _new_id()
            answer.attempt_id = attempt.id
            answer.answer = answer.answer or ""
            answer.is_correct = bool(answer.is_correct)
            attempt.answers.append(answer)
        return attempt

    # -- ExamRepository ------------------------------------------------------

    def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self.users_db.values():
            if user.email == email:
                return user
        return None

    def find_exam(self, exam_id: str) -> Optional[Exam]:
        return self.exams_db.get(exam_id)

    def find_exam_by_code(self, code: str, status: Optional[ExamStatus] = None) -> Optional[Exam]:
        for exam in self.exams_db.values():
            if exam.exam_code != code:
                continue
            if status is not None and ExamStatus.normalize(exam.status) is not status:
                return None
            return exam
        return None

    def find_exam_owned_by(self, exam_id: str, teacher_id: str) -> Optional[Exam]:
        exam = self.exams_db.get(exam_id)
        if exam is None or exam.user_id != teacher_id:
            return None
        return exam

    def list_questions(self, exam_id: str) -> List[Question]:
        exam = self.exams_db.get(exam_id)
        if exam is None:
            return []
        return sorted(exam.questions, key=lambda q: q.position)

    def count_questions(self, exam_id: str) -> int:
        return len(self.list_questions(exam_id))

    def find_attempt(
        self, exam_id: str, user_id: str, status: Optional[AttemptStatus] = None
    ) -> Optional[ExamAttempt]:
        attempt = self.attempts_db.get((exam_id, user_id))
        if attempt is not None and status is not None and AttemptStatus.normalize(attempt.status) is not status:
            return None
        return attempt

    def create_attempt(self, exam_id: str, user_id: str, started_at: datetime) -> ExamAttempt:
        attempt = ExamAttempt(
            id=_new_id(),
            exam_id=exam_id,
            user_id=user_id,
            status=AttemptStatus.IN_PROGRESS,
            started_at=started_at,
            created_at=started_at,
            updated_at=started_at,
        )
        return self.add_attempt(attempt)

    def list_attempts(self, exam_id: str, newest_first: bool = False) -> List[ExamAttempt]:
        attempts = [a for (e_id, _), a in self.attempts_db.items() if e_id == exam_id]
        return sort_newest_first(attempts) if newest_first else attempts

    def add_file(self, filename: str, path: str, content_type: str, size: int,
                 exam_id: Optional[str] = None) -> File:
        record = File(
            id=_new_id(),
            filename=filename,
            path=path,
            type=content_type,
            size=size,
            exam_id=exam_id,
            created_at=utcnow(),
        )
        self.files_db[record.id] = record
        return record
