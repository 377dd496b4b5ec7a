from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from examflow.models.content import ExamStatus, QuestionType
from examflow.services.session_clock import SessionStatus, WindowState


# Student Schemas
class StudentRegisterRequest(BaseModel):
    name: str
    roll_number: Optional[str] = None
    email: Optional[str] = None


class StudentResponse(BaseModel):
    id: int
    name: str
    roll_number: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Question Schemas
class QuestionCreate(BaseModel):
    text: str
    type: str
    options: Optional[List[str]] = None
    correct_answer: Any
    points: int = 1


class QuestionUpdate(BaseModel):
    text: Optional[str] = None
    type: Optional[str] = None
    options: Optional[List[str]] = None
    correct_answer: Optional[Any] = None
    points: Optional[int] = None


class QuestionResponse(BaseModel):
    id: int
    text: str
    type: QuestionType
    options: Optional[List[str]] = None
    correct_answer: Any
    points: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Exam Schemas
class ExamCreate(BaseModel):
    title: str
    subject: str
    scheduled_at: datetime
    duration_minutes: Optional[int] = None  # Falls back to settings.default_duration_minutes
    description: str = ""
    difficulty: str = "medium"
    max_students: Optional[int] = None
    status: str = ExamStatus.SCHEDULED.value
    creator_id: Optional[int] = None
    question_ids: List[int] = []
    is_dummy: bool = False


class ExamUpdate(BaseModel):
    """Partial update; omitted fields are left alone."""
    title: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    difficulty: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    max_students: Optional[int] = None
    creator_id: Optional[int] = None
    question_ids: Optional[List[int]] = None
    is_dummy: Optional[bool] = None


class ExamStatusUpdate(BaseModel):
    status: str
    new_scheduled_at: Optional[datetime] = None  # Required when status is "delayed"


class ExamResponse(BaseModel):
    id: int
    title: str
    subject: str
    description: str
    difficulty: str
    scheduled_at: datetime
    duration_minutes: int
    max_students: int
    status: ExamStatus
    creator_id: Optional[int] = None
    question_ids: List[int]
    is_dummy: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ExamDetailResponse(ExamResponse):
    questions: List[QuestionResponse] = []


class ExamDeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted_assignments: int


# Assignment / Session Schemas
class AssignResponse(BaseModel):
    success: bool = True
    message: str
    assigned_at: datetime


class AssignedStudent(BaseModel):
    id: int
    name: str
    roll_number: Optional[str] = None
    email: Optional[str] = None


class SessionStartResponse(BaseModel):
    success: bool = True
    message: str = "Exam session started"
    started_at: datetime


class StudentSessionResponse(BaseModel):
    student_id: int
    student_name: str
    student_roll_number: str
    session_status: SessionStatus
    started_at: Optional[datetime] = None
    remaining_time: Optional[int] = None  # seconds
    assigned_at: Optional[datetime] = None
    score: Optional[float] = None
    percentage_score: Optional[float] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExamStatusResponse(BaseModel):
    exam_id: int
    exam_title: str
    exam_state: WindowState
    exam_start_time: datetime
    exam_end_time: datetime
    exam_duration: int  # minutes
    current_time: datetime
    student_sessions: List[StudentSessionResponse]

    class Config:
        from_attributes = True


# Result Schemas
class QuestionSnapshot(BaseModel):
    """Question as the student saw it at submission time."""
    id: Optional[int] = None
    text: Optional[str] = None
    type: Optional[str] = None
    correct_answer: Any = None
    points: Optional[float] = Field(default=None, gt=0)


class SubmitAnswersRequest(BaseModel):
    exam_id: int
    student_id: int
    answers: Dict[int, Any]  # {question_index: answer}
    questions: List[QuestionSnapshot]
    is_time_up: bool = False


class GradeResponse(BaseModel):
    total_questions: int
    correct_answers: int
    earned_points: float
    total_points: float
    percentage_score: float  # Rounded to 2 decimals


class ExamResultResponse(BaseModel):
    id: int
    exam_id: int
    student_id: int
    answers: Dict[int, Any]
    submitted_at: datetime
    is_time_up: bool
    total_questions: int
    correct_answers: int
    earned_points: float
    total_points: float
    percentage_score: float
    question_results: Dict[int, bool]
    graded_at: datetime

    class Config:
        from_attributes = True
