"""
Exam status board: one synthesized session status per assigned student.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from examflow.database import utcnow
from examflow.errors import NotFound
from examflow.repositories import AssignmentRepository, ExamRepository, ResultRepository, StudentRepository
from examflow.services.grading import round_half_up
from examflow.services.session_clock import SessionStatus, WindowState, exam_window, session_status

UNKNOWN_STUDENT = "Unknown"


@dataclass(frozen=True)
class StudentSession:
    student_id: int
    student_name: str
    student_roll_number: str
    session_status: SessionStatus
    started_at: Optional[datetime]
    remaining_time: Optional[int]  # seconds
    assigned_at: Optional[datetime]
    score: Optional[float] = None
    percentage_score: Optional[float] = None
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExamStatusReport:
    exam_id: int
    exam_title: str
    exam_state: WindowState
    exam_start_time: datetime
    exam_end_time: datetime
    exam_duration: int  # minutes
    current_time: datetime
    student_sessions: List[StudentSession] = field(default_factory=list)


class ExamStatusAggregator:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.exams = ExamRepository(db)
        self.assignments = AssignmentRepository(db)
        self.results = ResultRepository(db)
        self.students = StudentRepository(db)

    def get_exam_status(self, exam_id: int) -> ExamStatusReport:
        """Exam window plus per-student sessions, in no guaranteed order."""
        exam = self.exams.get(exam_id)
        if exam is None:
            raise NotFound(f"Exam {exam_id} not found")

        now = self.clock()
        window = exam_window(exam.scheduled_at, exam.duration_minutes, now)

        assignments = self.assignments.find_by_exam(exam_id)
        students = {s.id: s for s in self.students.find_by_ids(a.student_id for a in assignments)}
        results = {r.student_id: r for r in self.results.find_by_exam(exam_id)}

        sessions = []
        for assignment in assignments:
            student = students.get(assignment.student_id)
            result = results.get(assignment.student_id)
            snapshot = session_status(
                window.state,
                exam.duration_minutes,
                assignment.started_at,
                result is not None,
                now,
            )
            completed = snapshot.status == SessionStatus.COMPLETED

            sessions.append(StudentSession(
                student_id=assignment.student_id,
                student_name=(student.name or UNKNOWN_STUDENT) if student else UNKNOWN_STUDENT,
                student_roll_number=(student.roll_number or "") if student else "",
                session_status=snapshot.status,
                started_at=assignment.started_at,
                remaining_time=snapshot.remaining_seconds,
                assigned_at=assignment.assigned_at,
                score=result.earned_points if completed else None,
                percentage_score=round_half_up(result.percentage_score) if completed else None,
                completed_at=result.submitted_at if completed else None,
            ))

        return ExamStatusReport(
            exam_id=exam.id,
            exam_title=exam.title,
            exam_state=window.state,
            exam_start_time=window.start,
            exam_end_time=window.end,
            exam_duration=exam.duration_minutes,
            current_time=now,
            student_sessions=sessions,
        )
