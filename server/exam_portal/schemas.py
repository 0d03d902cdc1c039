from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from exam_portal.models import AttemptStatus, ExamStatus, ExamType, QuestionType


class ApiModel(BaseModel):
    """Reads ORM objects, writes camelCase JSON"""

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class ErrorResponse(BaseModel):
    message: str


# User Schemas
class UserSummary(ApiModel):
    id: str
    name: Optional[str] = None
    email: str


# Exam Schemas
class QuestionResponse(ApiModel):
    id: str
    exam_id: str
    position: int
    type: QuestionType
    question: str
    options: Optional[str] = None
    correct_answer: Optional[str] = None
    marks: int


class ExamResponse(ApiModel):
    id: str
    user_id: str
    exam_code: str
    title: str
    description: str
    type: ExamType
    status: ExamStatus
    duration: int
    total_marks: int
    start_date: datetime
    end_date: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    questions: List[QuestionResponse] = []


class ExamDetailsResponse(ApiModel):
    """What a student sees on the instructions page; no questions"""
    id: str
    title: str
    description: str
    type: ExamType
    duration: int
    total_marks: int
    start_date: datetime
    end_date: datetime
    questions_count: int


# Attempt Schemas
class AnswerResponse(ApiModel):
    id: str
    attempt_id: str
    question_id: str
    answer: str
    is_correct: bool = False
    marks_obtained: Optional[float] = None
    test_results: Optional[str] = None


class AttemptResponse(ApiModel):
    id: str
    exam_id: str
    user_id: str
    status: AttemptStatus
    started_at: datetime
    ended_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    answers: List[AnswerResponse] = []
    user: Optional[UserSummary] = None


class StudentResultResponse(ApiModel):
    exam: ExamResponse
    attempt: AttemptResponse


class ExamAttemptsResponse(ApiModel):
    exam: ExamResponse
    attempts: List[AttemptResponse]


class StudentExamResponse(ExamResponse):
    """A published exam with the caller's own attempts"""
    attempts: List[AttemptResponse] = []


# Roster Schemas
class RosterEntry(ApiModel):
    id: str
    student_id: str
    student_name: str
    student_email: str
    score: float
    total_marks: int  # number of answers, one mark assumed per answer
    max_marks: int  # sum of the answered questions' marks
    submitted_at: Optional[datetime] = None
    status: AttemptStatus


class RosterStatistics(ApiModel):
    total_students: int = 0
    average_score: float = 0
    highest_score: float = 0
    lowest_score: float = 0


class ExamResultsResponse(ApiModel):
    exam_id: str
    title: str
    results: List[RosterEntry]
    statistics: RosterStatistics


# Join Schemas
class JoinExamRequest(ApiModel):
    exam_code: Optional[str] = None


class JoinExamResponse(ApiModel):
    message: str
    exam_code: str


# Upload Schemas
class UploadResponse(ApiModel):
    id: str
    filename: str
    path: str
    type: str
    size: int = Field(ge=0)
