from typing import Optional

from fastapi import APIRouter, Depends, Query

from exam_portal.database import utcnow
from exam_portal.errors import Forbidden, ValidationError, guarded
from exam_portal.models import UserRole
from exam_portal.repository import ExamRepository, get_repository
from exam_portal.schemas import (
    AttemptResponse,
    ErrorResponse,
    ExamDetailsResponse,
    ExamResponse,
    StudentExamResponse,
    StudentResultResponse,
)
from exam_portal.security import Identity, resolve_identity
from exam_portal.services import attempts, exam_lookup, results
from exam_portal.services.authorization import is_subject, resolve_caller

router = APIRouter(tags=["Student"], responses={
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
})


@router.get("/student-exams/{code}", response_model=StudentExamResponse)
@guarded("Error fetching exam")
async def get_student_exam(
    code: str,
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    A published exam by join code, while it is open, with the caller's attempts
    """
    user = resolve_caller(repo, identity)
    exam = exam_lookup.require_exam(
        exam_lookup.find_by_code(repo, code, published_only=True), "Exam not found or not available"
    )
    exam_lookup.check_active_window(exam, utcnow(), Forbidden, subject="This exam")

    attempt = repo.find_attempt(exam.id, user.id)
    return StudentExamResponse(
        **ExamResponse.model_validate(exam).model_dump(),
        attempts=[AttemptResponse.model_validate(attempt)] if attempt else [],
    )


@router.get("/student-exams/{code}/details", response_model=ExamDetailsResponse)
@guarded("Error fetching exam details")
async def get_exam_details(
    code: str,
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    Instructions page data for a published exam, without its questions
    """
    student = resolve_caller(
        repo, identity, UserRole.STUDENT, denied_message="Only students can access exam details"
    )
    exam = exam_lookup.require_exam(exam_lookup.find_by_code(repo, code, published_only=True))
    attempts.ensure_not_completed(repo, exam, student)

    return ExamDetailsResponse(
        id=exam.id,
        title=exam.title,
        description=exam.description,
        type=exam.type,
        duration=exam.duration,
        total_marks=exam.total_marks,
        start_date=exam.start_date,
        end_date=exam.end_date,
        questions_count=repo.count_questions(exam.id),
    )


@router.get("/student-exam-results/{student_id}", response_model=StudentResultResponse)
@guarded("Failed to fetch student exam result")
async def get_student_exam_result(
    student_id: str,
    exam_id: Optional[str] = Query(None, alias="examId"),
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    Same as ``/api/exam/{exam_id}/student/{student_id}`` with the exam in the query
    """
    if not exam_id:
        raise ValidationError("Missing examId query parameter")

    resolve_caller(
        repo, identity, UserRole.TEACHER, is_subject(student_id),
        denied_message="Forbidden: You do not have permission to view this result",
    )
    exam = exam_lookup.require_exam(repo.find_exam(exam_id))
    return results.aggregate_for_student(repo, exam, student_id)


@router.get("/student-exams/{code}/results", response_model=StudentResultResponse)
@guarded("Error fetching exam result")
async def get_own_exam_result(
    code: str,
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    The caller's own attempt on the exam with join code ``code``
    """
    user = resolve_caller(repo, identity)
    exam = exam_lookup.require_exam(exam_lookup.find_by_code(repo, code))
    return results.aggregate_for_student(repo, exam, user.id, "No attempt found for this exam")
