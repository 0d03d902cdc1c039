from typing import Optional

from fastapi import APIRouter, Depends

from exam_portal.errors import guarded
from exam_portal.models import UserRole
from exam_portal.repository import ExamRepository, get_repository
from exam_portal.schemas import AttemptResponse, ErrorResponse, ExamAttemptsResponse, ExamResponse
from exam_portal.security import Identity, resolve_identity
from exam_portal.services import exam_lookup
from exam_portal.services.authorization import resolve_caller

router = APIRouter(tags=["Teacher"], responses={
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
})


@router.get("/teacher-exams/{code}/results", response_model=ExamAttemptsResponse)
@guarded("Error fetching exam results")
async def get_exam_attempts(
    code: str,
    identity: Optional[Identity] = Depends(resolve_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    Fetch all student attempts for the exam with join code ``code`` (teacher only)
    """
    resolve_caller(
        repo, identity, UserRole.TEACHER,
        denied_message="Forbidden - Only teachers can access this resource",
    )
    exam = exam_lookup.require_exam(exam_lookup.find_by_code(repo, code))

    return ExamAttemptsResponse(
        exam=ExamResponse.model_validate(exam),
        attempts=[AttemptResponse.model_validate(a) for a in repo.list_attempts(exam.id)],
    )
