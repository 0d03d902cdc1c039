from datetime import timedelta

import pytest

from exam_portal.database import utcnow
from exam_portal.errors import NoAttempt
from exam_portal.models import Answer
from exam_portal.services import results

from conftest import add_completed_attempt


def test_score_treats_missing_marks_as_zero():
    answers = [Answer(marks_obtained=2), Answer(marks_obtained=None), Answer(marks_obtained=3)]
    assert results.score_answers(answers) == 5


def test_roster_entry_scores_and_counts(repo):
    attempt = add_completed_attempt(repo, repo.exam, repo.student, [2, None, 3])

    entry = results.roster_entry(repo.exam, attempt)

    assert entry.score == 5
    assert entry.total_marks == 3
    assert entry.max_marks == 6
    assert entry.student_name == "Ada"
    assert entry.student_email == "ada@school.test"
    assert entry.submitted_at == attempt.ended_at


def test_roster_placeholders_for_missing_profile(repo):
    attempt = add_completed_attempt(repo, repo.exam, repo.other_student, [1])
    attempt.user.email = None

    entry = results.roster_entry(repo.exam, attempt)

    assert entry.student_name == results.UNKNOWN_STUDENT
    assert entry.student_email == results.NO_EMAIL


def test_roster_is_most_recent_first(repo):
    now = utcnow()
    older = add_completed_attempt(repo, repo.exam, repo.student, [1], ended_at=now - timedelta(hours=1))
    newer = add_completed_attempt(repo, repo.exam, repo.other_student, [2], ended_at=now)

    roster = results.aggregate_for_teacher_roster(repo, repo.exam)

    assert [entry.id for entry in roster] == [newer.id, older.id]


def test_roster_statistics():
    assert results.roster_statistics([]).total_students == 0

    entries = [
        results.RosterEntry(id=str(i), student_id=str(i), student_name="n", student_email="e",
                            score=s, total_marks=1, max_marks=1, status="COMPLETED")
        for i, s in enumerate([4, 5, 9])
    ]
    stats = results.roster_statistics(entries)
    assert stats.total_students == 3
    assert stats.average_score == 6.0
    assert stats.highest_score == 9
    assert stats.lowest_score == 4


def test_aggregate_for_student(repo):
    attempt = add_completed_attempt(repo, repo.exam, repo.student, [2, 1])

    result = results.aggregate_for_student(repo, repo.exam, repo.student.id)

    assert result.attempt.id == attempt.id
    assert result.attempt.user.name == "Ada"
    assert len(result.attempt.answers) == 2
    assert len(result.exam.questions) == 3


def test_aggregate_for_student_without_attempt(repo):
    with pytest.raises(NoAttempt):
        results.aggregate_for_student(repo, repo.exam, repo.student.id)
