"""
Models package initialization
Import all models here to ensure they are registered with SQLAlchemy
"""

from examflow.models.user import Student
from examflow.models.content import Question, Exam, QuestionType, ExamStatus
from examflow.models.session import ExamAssignment, ExamResult

__all__ = [
    "Student",
    "Question",
    "Exam",
    "QuestionType",
    "ExamStatus",
    "ExamAssignment",
    "ExamResult",
]
