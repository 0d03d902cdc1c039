import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from exam_portal.database import Base, utcnow
from exam_portal.models.types import EnumString, NormalizedEnum


class UserRole(str, NormalizedEnum):
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class User(Base):
    __tablename__ = "users"
    
    id = Column(String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    role = Column(EnumString(UserRole), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    
    exams = relationship("Exam", back_populates="owner")
    attempts = relationship("ExamAttempt", back_populates="user")
    
    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
