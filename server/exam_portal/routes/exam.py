import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from exam_portal.database import utcnow
from exam_portal.errors import Forbidden, NotFound, ValidationError, guarded
from exam_portal.models import UserRole
from exam_portal.repository import ExamRepository, get_repository
from exam_portal.schemas import (
    ErrorResponse,
    ExamResponse,
    ExamResultsResponse,
    JoinExamRequest,
    JoinExamResponse,
    StudentResultResponse,
)
from exam_portal.security import Identity, resolve_identity
from exam_portal.services import attempts, exam_lookup, results
from exam_portal.services.authorization import is_subject, resolve_caller

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Exam"], responses={
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
})


@router.post("/join", response_model=JoinExamResponse, responses={400: {"model": ErrorResponse}})
@guarded("Error joining exam")
async def join_exam(
    request: Optional[JoinExamRequest] = Body(None),
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    Student joins a published exam by its code.
    Joining again while the attempt is in progress is a no-op.
    """
    exam_code = (request.exam_code or "").strip() if request else ""
    if not exam_code:
        raise ValidationError("Exam code is required")

    student = resolve_caller(repo, identity, UserRole.STUDENT, denied_message="Only students can join exams")
    logger.info("Student %s joining exam code %s", student.id, exam_code)

    now = utcnow()
    exam = exam_lookup.find_joinable(repo, exam_code, now)
    attempts.join(repo, exam, student, now)

    return JoinExamResponse(message="Successfully joined exam", exam_code=exam.exam_code)


@router.get("/{exam_id}/results", response_model=ExamResultsResponse)
@guarded("Failed to fetch exam results")
async def get_exam_results(
    exam_id: str,
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    Teacher gets all student results for an exam they created
    """
    teacher = resolve_caller(
        repo, identity, UserRole.TEACHER,
        denied_message="Access denied. Only teachers can view exam results.",
    )

    # another teacher's exam is reported as missing, not forbidden
    exam = exam_lookup.find_by_id_owned_by(repo, exam_id, teacher.id)
    if exam is None:
        raise NotFound("Exam not found or you do not have permission to view it")

    roster = results.aggregate_for_teacher_roster(repo, exam)
    return ExamResultsResponse(
        exam_id=exam.id,
        title=exam.title,
        results=roster,
        statistics=results.roster_statistics(roster),
    )


@router.get("/{exam_id}/student/{student_id}", response_model=StudentResultResponse)
@guarded("Failed to fetch student exam result")
async def get_student_result(
    exam_id: str,
    student_id: str,
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    A teacher, or the student themself, gets one student's attempt
    """
    resolve_caller(
        repo, identity, UserRole.TEACHER, is_subject(student_id),
        denied_message="Forbidden: You do not have permission to view this result",
    )
    exam = exam_lookup.require_exam(repo.find_exam(exam_id))
    return results.aggregate_for_student(repo, exam, student_id)


@router.get("/{exam_id}/details", response_model=ExamResponse)
@guarded("Failed to fetch exam details")
async def get_exam_details(
    exam_id: str,
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    The full exam with its questions, for the teacher who created it
    """
    teacher = resolve_caller(
        repo, identity, UserRole.TEACHER,
        denied_message="Forbidden: Only teachers can view detailed exam information",
    )
    exam = exam_lookup.require_exam(repo.find_exam(exam_id))
    if exam.user_id != teacher.id:
        raise Forbidden("Forbidden: You are not authorized to view this exam")
    return ExamResponse.model_validate(exam)
