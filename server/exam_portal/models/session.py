import uuid

from sqlalchemy import Column, Float, String, Text, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship

from exam_portal.database import Base, utcnow
from exam_portal.models.types import EnumString, NormalizedEnum


class AttemptStatus(str, NormalizedEnum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ExamAttempt(Base):
    """One student's run at an exam; at most one per (exam, student)"""
    __tablename__ = "exam_attempts"
    __table_args__ = (
        UniqueConstraint("exam_id", "user_id", name="uq_exam_attempts_exam_user"),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    exam_id = Column(String(36), ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(EnumString(AttemptStatus), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False, default=utcnow)
    ended_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    
    # Relationships
    exam = relationship("Exam", back_populates="attempts")
    user = relationship("User", back_populates="attempts")
    answers = relationship("Answer", back_populates="attempt", cascade="all, delete-orphan")
    
    @property
    def is_completed(self) -> bool:
        return AttemptStatus.normalize(self.status) is AttemptStatus.COMPLETED


class Answer(Base):
    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_answers_attempt_question"),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    attempt_id = Column(String(36), ForeignKey("exam_attempts.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    answer = Column(Text, nullable=False, default="")
    is_correct = Column(Boolean, nullable=False, default=False)
    marks_obtained = Column(Float, nullable=True)
    test_results = Column(Text, nullable=True)
    
    attempt = relationship("ExamAttempt", back_populates="answers")
