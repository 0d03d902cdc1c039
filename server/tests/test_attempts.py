from datetime import timedelta

import pytest

from exam_portal.database import utcnow
from exam_portal.errors import AlreadyCompleted, DuplicateAttempt, NotFound, ValidationError
from exam_portal.models import AttemptStatus, ExamAttempt
from exam_portal.services import attempts, exam_lookup

from conftest import add_completed_attempt


def test_join_creates_one_in_progress_attempt(repo):
    now = utcnow()
    first = attempts.join(repo, repo.exam, repo.student, now)
    second = attempts.join(repo, repo.exam, repo.student, now + timedelta(seconds=1))

    assert first is second
    assert first.status is AttemptStatus.IN_PROGRESS
    assert first.started_at == now
    assert len(repo.list_attempts(repo.exam.id)) == 1


def test_join_after_completion_fails_without_writes(repo):
    done = add_completed_attempt(repo, repo.exam, repo.student, [1, 1])

    with pytest.raises(AlreadyCompleted, match="already completed"):
        attempts.join(repo, repo.exam, repo.student, utcnow())

    assert repo.list_attempts(repo.exam.id) == [done]


def test_lower_case_completed_status_blocks_join(repo):
    add_completed_attempt(repo, repo.exam, repo.student, [], status="completed")

    with pytest.raises(AlreadyCompleted):
        attempts.join(repo, repo.exam, repo.student, utcnow())


def test_join_race_uses_the_winning_attempt(repo, monkeypatch):
    winner = ExamAttempt(exam_id=repo.exam.id, user_id=repo.student.id, status=AttemptStatus.IN_PROGRESS)
    original_find = repo.find_attempt
    calls = []

    def racing_find(exam_id, user_id, status=None):
        calls.append(exam_id)
        # first lookup sees nothing, then the other request inserts
        if len(calls) == 1:
            return None
        return original_find(exam_id, user_id, status)

    monkeypatch.setattr(repo, "find_attempt", racing_find)
    repo.add_attempt(winner)

    assert attempts.join(repo, repo.exam, repo.student, utcnow()) is winner
    assert len(repo.list_attempts(repo.exam.id)) == 1


def test_store_rejects_duplicate_pair(repo):
    repo.create_attempt(repo.exam.id, repo.student.id, utcnow())
    with pytest.raises(DuplicateAttempt):
        repo.create_attempt(repo.exam.id, repo.student.id, utcnow())


def test_ensure_not_completed(repo):
    attempts.ensure_not_completed(repo, repo.exam, repo.student)
    add_completed_attempt(repo, repo.exam, repo.student, [2])
    with pytest.raises(AlreadyCompleted):
        attempts.ensure_not_completed(repo, repo.exam, repo.student)


@pytest.mark.parametrize("code, error, message", [
    ("DRAFT-1", NotFound, "not available"),
    ("FUT-1", ValidationError, "has not started yet"),
    ("OLD-1", ValidationError, "has already ended"),
    ("NOPE", NotFound, "not available"),
])
def test_find_joinable_rejects_unavailable_exams(repo, code, error, message):
    with pytest.raises(error, match=message):
        exam_lookup.find_joinable(repo, code, utcnow())


def test_find_by_id_owned_by(repo):
    assert exam_lookup.find_by_id_owned_by(repo, repo.exam.id, repo.teacher.id) is repo.exam
    assert exam_lookup.find_by_id_owned_by(repo, repo.exam.id, repo.other_teacher.id) is None
