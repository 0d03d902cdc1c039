import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from exam_portal.database import Base, utcnow
from exam_portal.models.types import EnumString, NormalizedEnum


class ExamStatus(str, NormalizedEnum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ExamType(str, NormalizedEnum):
    QUIZ = "QUIZ"
    CODING = "CODING"
    ASSIGNMENT = "ASSIGNMENT"


class QuestionType(str, NormalizedEnum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    SINGLE_CHOICE = "SINGLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"
    LONG_ANSWER = "LONG_ANSWER"
    CODING = "CODING"


class Exam(Base):
    """Exams created by teachers"""
    __tablename__ = "exams"
    __table_args__ = (
        Index("ix_exams_window", "start_date", "end_date"),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)  # owning teacher
    exam_code = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(EnumString(ExamType), nullable=False, default=ExamType.QUIZ)
    status = Column(EnumString(ExamStatus), nullable=False, default=ExamStatus.DRAFT, index=True)
    duration = Column(Integer, nullable=False)  # Minutes
    total_marks = Column(Integer, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    
    # Relationships
    owner = relationship("User", back_populates="exams")
    questions = relationship(
        "Question", back_populates="exam", order_by="Question.position", cascade="all, delete-orphan"
    )
    attempts = relationship("ExamAttempt", back_populates="exam", cascade="all, delete-orphan")
    files = relationship("File", back_populates="exam", cascade="all, delete-orphan")


class Question(Base):
    """A single question of an exam, kept in exam order by ``position``"""
    __tablename__ = "questions"
    
    id = Column(String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    exam_id = Column(String(36), ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    type = Column(EnumString(QuestionType), nullable=False)
    question = Column(Text, nullable=False)
    options = Column(Text, nullable=True)  # JSON-encoded choices
    correct_answer = Column(Text, nullable=True)
    marks = Column(Integer, nullable=False, default=1)
    
    exam = relationship("Exam", back_populates="questions")


class File(Base):
    """Files uploaded by users, optionally attached to an exam"""
    __tablename__ = "files"
    
    id = Column(String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    filename = Column(String, nullable=False)
    path = Column(String, nullable=False)
    type = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    exam_id = Column(String(36), ForeignKey("exams.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    
    exam = relationship("Exam", back_populates="files")
