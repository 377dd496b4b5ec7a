from sqlalchemy import Column, Integer, String, Text, Boolean, JSON, Enum as SQLEnum
from examflow.database import Base, UTCDateTime, utcnow
import enum


class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    SHORT_ANSWER = "short-answer"


class ExamStatus(str, enum.Enum):
    """Administrative status, set by staff. Not derived from the clock."""
    SCHEDULED = "scheduled"
    DELAYED = "delayed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Question(Base):
    """Question bank entry"""
    __tablename__ = "questions"
    
    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    type = Column(SQLEnum(QuestionType), nullable=False)
    options = Column(JSON, nullable=True)  # For multiple choice: ["A. ...", "B. ...", ...]
    correct_answer = Column(JSON, nullable=False)
    points = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)


class Exam(Base):
    """Scheduled exam"""
    __tablename__ = "exams"
    
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    difficulty = Column(String, nullable=False, default="medium")
    scheduled_at = Column(UTCDateTime, nullable=False)  # Authoritative start instant
    duration_minutes = Column(Integer, nullable=False)
    max_students = Column(Integer, nullable=False, default=30)
    status = Column(SQLEnum(ExamStatus), nullable=False, default=ExamStatus.SCHEDULED)
    creator_id = Column(Integer, nullable=True, index=True)
    question_ids = Column(JSON, nullable=False, default=list)  # Ordered list of question IDs
    is_dummy = Column(Boolean, nullable=False, default=False)  # Practice exam, not graded for record
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Exam {self.id} {self.title!r} ({self.status.value})>"
