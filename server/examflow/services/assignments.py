"""
Exam <-> student assignments and session start.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from examflow.database import utcnow
from examflow.errors import NotFound
from examflow.models import Exam, ExamAssignment
from examflow.repositories import AssignmentRepository, ExamRepository


@dataclass(frozen=True)
class AssignOutcome:
    assignment: ExamAssignment
    created: bool


class AssignmentTracker:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.exams = ExamRepository(db)
        self.assignments = AssignmentRepository(db)

    def assign(self, exam_id: int, student_id: int) -> AssignOutcome:
        """Link a student to an exam. Assigning twice is not an error."""
        existing = self.assignments.get(exam_id, student_id)
        if existing is not None:
            return AssignOutcome(existing, created=False)

        if self.exams.get(exam_id) is None:
            raise NotFound(f"Exam {exam_id} not found")

        assignment = ExamAssignment(
            exam_id=exam_id,
            student_id=student_id,
            assigned_at=self.clock(),
            started_at=None,
        )
        try:
            self.assignments.add(assignment)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent assign for the same pair
            self.db.rollback()
            return AssignOutcome(self.assignments.get(exam_id, student_id), created=False)
        return AssignOutcome(assignment, created=True)

    def unassign(self, exam_id: int, student_id: int) -> None:
        assignment = self.assignments.get(exam_id, student_id)
        if assignment is None:
            raise NotFound(f"Student {student_id} is not assigned to exam {exam_id}")
        self.assignments.delete(assignment)
        self.db.commit()

    def start_session(self, exam_id: int, student_id: int) -> datetime:
        """Record the session start once and return the effective start instant.

        Repeated calls (client retries, several tabs) return the first
        recorded value. Concurrent first calls are settled by the
        conditional update, so every caller sees the same winner.
        """
        if self.assignments.get(exam_id, student_id) is None:
            raise NotFound(f"Student {student_id} is not assigned to exam {exam_id}")

        self.assignments.set_started_at_if_absent(exam_id, student_id, self.clock())
        self.db.commit()

        # Re-read: the row may have been set by this call or an earlier one
        self.db.expire_all()
        assignment = self.assignments.get(exam_id, student_id)
        if assignment is None:
            raise NotFound(f"Student {student_id} is not assigned to exam {exam_id}")
        return assignment.started_at

    def list_assigned_students(self, exam_id: int) -> List[int]:
        return [a.student_id for a in self.assignments.find_by_exam(exam_id)]

    def list_assigned_exams(self, student_id: int) -> List[Exam]:
        exam_ids = [a.exam_id for a in self.assignments.find_by_student(student_id)]
        return self.exams.find_by_ids(exam_ids)
