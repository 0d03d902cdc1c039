"""
Result aggregation for a single student and for a teacher's roster.

Callers must already have passed the authorization guard for the exam (and
student) they ask about.
"""
from typing import Iterable, List, Optional

from exam_portal.errors import NoAttempt
from exam_portal.models import Answer, Exam, ExamAttempt
from exam_portal.repository import ExamRepository
from exam_portal.schemas import (
    AttemptResponse,
    ExamResponse,
    RosterEntry,
    RosterStatistics,
    StudentResultResponse,
)

UNKNOWN_STUDENT = "Unknown Student"
NO_EMAIL = "No Email"


def score_answers(answers: Iterable[Answer]) -> float:
    """Sum of marks obtained; unmarked answers count as zero."""
    return sum(answer.marks_obtained or 0 for answer in answers)


def max_marks(exam: Exam, answers: Iterable[Answer]) -> int:
    """Marks available for the questions the attempt answered."""
    marks_by_question = {q.id: q.marks or 0 for q in exam.questions}
    return sum(marks_by_question.get(answer.question_id, 0) for answer in answers)


def roster_entry(exam: Exam, attempt: ExamAttempt) -> RosterEntry:
    user = attempt.user
    answers = list(attempt.answers)
    return RosterEntry(
        id=attempt.id,
        student_id=attempt.user_id,
        student_name=(user.name if user else None) or UNKNOWN_STUDENT,
        student_email=(user.email if user else None) or NO_EMAIL,
        score=score_answers(answers),
        total_marks=len(answers),
        max_marks=max_marks(exam, answers),
        submitted_at=attempt.ended_at or attempt.updated_at,
        status=attempt.status,
    )


def aggregate_for_teacher_roster(repo: ExamRepository, exam: Exam) -> List[RosterEntry]:
    """One entry per attempt, most recent submission first."""
    return [roster_entry(exam, attempt) for attempt in repo.list_attempts(exam.id, newest_first=True)]


def roster_statistics(entries: List[RosterEntry]) -> RosterStatistics:
    if not entries:
        return RosterStatistics()
    scores = [entry.score for entry in entries]
    return RosterStatistics(
        total_students=len(entries),
        average_score=round(sum(scores) / len(scores), 1),
        highest_score=max(scores),
        lowest_score=min(scores),
    )


def find_student_attempt(repo: ExamRepository, exam: Exam, student_id: str) -> Optional[ExamAttempt]:
    return repo.find_attempt(exam.id, student_id)


def aggregate_for_student(repo: ExamRepository, exam: Exam, student_id: str,
                          missing_message: str = "No attempt found for this student") -> StudentResultResponse:
    """The exam with its questions and the student's attempt with answers."""
    attempt = find_student_attempt(repo, exam, student_id)
    if attempt is None:
        raise NoAttempt(missing_message)
    return StudentResultResponse(
        exam=ExamResponse.model_validate(exam),
        attempt=AttemptResponse.model_validate(attempt),
    )
