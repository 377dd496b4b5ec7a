"""
Exam creation, schedule edits, administrative status and deletion.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from examflow.config import settings
from examflow.database import as_utc, utcnow
from examflow.errors import InvalidInput, InvalidSchedule, InvalidStatus, NotFound
from examflow.models import Exam, ExamStatus, Question
from examflow.repositories import AssignmentRepository, ExamRepository, QuestionRepository

# Fields update_schedule may touch. Status only changes through set_status.
EDITABLE_FIELDS = (
    "title",
    "subject",
    "description",
    "difficulty",
    "scheduled_at",
    "duration_minutes",
    "max_students",
    "creator_id",
    "question_ids",
    "is_dummy",
)


@dataclass(frozen=True)
class ExamDeletion:
    exam_id: int
    deleted_assignments: int


def parse_status(value: Any) -> ExamStatus:
    if isinstance(value, ExamStatus):
        return value
    try:
        return ExamStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ExamStatus)
        raise InvalidStatus(f"Invalid status {value!r}; expected one of: {allowed}")


def _check_duration(duration_minutes: Any) -> int:
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise InvalidInput("Duration must be a positive integer number of minutes")
    return duration_minutes


def _check_schedule(scheduled_at: Any) -> datetime:
    if not isinstance(scheduled_at, datetime):
        raise InvalidSchedule("A valid exam date and time is required")
    return as_utc(scheduled_at)


class ExamLifecycleManager:
    """Owns the Exam record and its administrative status."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.exams = ExamRepository(db)
        self.questions = QuestionRepository(db)
        self.assignments = AssignmentRepository(db)

    def get(self, exam_id: int) -> Exam:
        exam = self.exams.get(exam_id)
        if exam is None:
            raise NotFound(f"Exam {exam_id} not found")
        return exam

    def list_exams(self, creator_id: Optional[int] = None) -> List[Exam]:
        return self.exams.find(creator_id=creator_id)

    def questions_for(self, exam: Exam) -> List[Question]:
        """The exam's question records in exam order; unknown ids are skipped."""
        ids = list(exam.question_ids or [])
        by_id = {q.id: q for q in self.questions.find_by_ids(ids)}
        return [by_id[qid] for qid in ids if qid in by_id]

    def create(
        self,
        title: str,
        subject: str,
        scheduled_at: datetime,
        duration_minutes: Optional[int] = None,
        description: str = "",
        difficulty: str = "medium",
        max_students: Optional[int] = None,
        status: Any = ExamStatus.SCHEDULED,
        creator_id: Optional[int] = None,
        question_ids: Optional[Sequence[int]] = None,
        is_dummy: bool = False,
    ) -> Exam:
        if not title or not subject:
            raise InvalidInput("Title and subject are required")
        if duration_minutes is None:
            duration_minutes = settings.default_duration_minutes
        now = self.clock()

        exam = Exam(
            title=title,
            subject=subject,
            description=description or "",
            difficulty=difficulty or "medium",
            scheduled_at=_check_schedule(scheduled_at),
            duration_minutes=_check_duration(duration_minutes),
            max_students=max_students if max_students is not None else settings.default_max_students,
            status=parse_status(status),
            creator_id=creator_id,
            question_ids=list(question_ids or []),
            is_dummy=bool(is_dummy),
            created_at=now,
            updated_at=now,
        )
        self.exams.add(exam)
        self.db.commit()
        return exam

    def update_schedule(self, exam_id: int, **changes) -> Exam:
        """Partial update of exam details. Never changes the status."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidInput(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        exam = self.get(exam_id)
        fields = {name: value for name, value in changes.items() if value is not None}
        if "scheduled_at" in fields:
            fields["scheduled_at"] = _check_schedule(fields["scheduled_at"])
        if "duration_minutes" in fields:
            _check_duration(fields["duration_minutes"])
        if "question_ids" in fields:
            fields["question_ids"] = list(fields["question_ids"])
        fields["updated_at"] = self.clock()

        self.exams.update(exam, **fields)
        self.db.commit()
        return exam

    def set_status(self, exam_id: int, status: Any, new_scheduled_at: Optional[datetime] = None) -> Exam:
        """Move the exam to any administrative status.

        Entering ``delayed`` requires a new start instant, which replaces the
        schedule. No other transition is restricted.
        """
        target = parse_status(status)
        exam = self.get(exam_id)

        fields = {"status": target, "updated_at": self.clock()}
        if target == ExamStatus.DELAYED:
            if new_scheduled_at is None:
                raise InvalidSchedule("A new date is required to delay an exam")
            fields["scheduled_at"] = _check_schedule(new_scheduled_at)

        self.exams.update(exam, **fields)
        self.db.commit()
        return exam

    def delete(self, exam_id: int) -> ExamDeletion:
        """Delete the exam and its assignments. Results are kept."""
        exam = self.get(exam_id)
        self.exams.delete(exam)
        deleted = self.assignments.delete_by_exam(exam_id)
        self.db.commit()
        return ExamDeletion(exam_id=exam_id, deleted_assignments=deleted)
