import os
import tempfile

# Settings are read at import time; keep the suite off the on-disk database.
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="exam-portal-uploads-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from exam_portal.database import init_db, utcnow
from exam_portal.main import app
from exam_portal.models import (
    Answer,
    AttemptStatus,
    Exam,
    ExamAttempt,
    ExamStatus,
    ExamType,
    Question,
    QuestionType,
    User,
    UserRole,
)
from exam_portal.repository import get_repository
from exam_portal.security import create_access_token
from exam_portal.storage import InMemoryExamRepository


def make_exam(owner: User, code: str, status=ExamStatus.PUBLISHED, starts_in=timedelta(hours=-1),
              ends_in=timedelta(hours=2), title="Algebra midterm") -> Exam:
    now = utcnow()
    return Exam(
        user_id=owner.id,
        exam_code=code,
        title=title,
        description="Chapters 1-4",
        type=ExamType.QUIZ,
        status=status,
        duration=60,
        total_marks=6,
        start_date=now + starts_in,
        end_date=now + ends_in,
        created_at=now,
        updated_at=now,
    )


def make_questions():
    return [
        Question(type=QuestionType.SINGLE_CHOICE, question="2 + 2 = ?", marks=2),
        Question(type=QuestionType.TRUE_FALSE, question="0 is even", marks=1),
        Question(type=QuestionType.SHORT_ANSWER, question="Define a group", marks=3),
    ]


@pytest.fixture
def repo():
    store = InMemoryExamRepository()
    store.teacher = store.add_user(User(email="teacher@school.test", name="Ms. Teach", role=UserRole.TEACHER))
    store.other_teacher = store.add_user(User(email="other@school.test", name="Mr. Other", role=UserRole.TEACHER))
    store.student = store.add_user(User(email="ada@school.test", name="Ada", role=UserRole.STUDENT))
    store.other_student = store.add_user(User(email="bob@school.test", name=None, role=UserRole.STUDENT))

    store.exam = store.add_exam(make_exam(store.teacher, "ALG-101"), make_questions())
    store.draft_exam = store.add_exam(make_exam(store.teacher, "DRAFT-1", status=ExamStatus.DRAFT))
    store.future_exam = store.add_exam(
        make_exam(store.teacher, "FUT-1", starts_in=timedelta(hours=1), ends_in=timedelta(hours=3))
    )
    store.past_exam = store.add_exam(
        make_exam(store.teacher, "OLD-1", starts_in=timedelta(hours=-3), ends_in=timedelta(hours=-1))
    )
    return store


def add_completed_attempt(store: InMemoryExamRepository, exam: Exam, student: User, marks, ended_at=None,
                          status=AttemptStatus.COMPLETED) -> ExamAttempt:
    questions = exam.questions
    answers = [
        Answer(question_id=questions[i % len(questions)].id if questions else f"q{i}", answer="x",
               marks_obtained=m)
        for i, m in enumerate(marks)
    ]
    started = utcnow() - timedelta(minutes=30)
    return store.add_attempt(
        ExamAttempt(
            exam_id=exam.id,
            user_id=student.id,
            status=status,
            started_at=started,
            ended_at=ended_at or utcnow(),
        ),
        answers,
    )


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.email)}"}


@pytest.fixture
def sql_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    yield factory
    engine.dispose()
