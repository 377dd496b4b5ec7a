"""
Record store access for the exam services.

Each repository wraps one table and offers the same few shapes:
get by id, find by filter, add, update and delete. Services commit;
repositories only flush.
"""
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from examflow.errors import Conflict
from examflow.models import Exam, ExamAssignment, ExamResult, Question, Student


class ExamRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, exam_id: int) -> Optional[Exam]:
        return self.db.get(Exam, exam_id)

    def find(self, creator_id: Optional[int] = None) -> List[Exam]:
        stmt = select(Exam)
        if creator_id is not None:
            stmt = stmt.where(Exam.creator_id == creator_id)
        stmt = stmt.order_by(Exam.created_at.desc(), Exam.id.desc())
        return list(self.db.scalars(stmt))

    def find_by_ids(self, exam_ids: Iterable[int]) -> List[Exam]:
        ids = list(exam_ids)
        if not ids:
            return []
        stmt = select(Exam).where(Exam.id.in_(ids)).order_by(Exam.scheduled_at.desc())
        return list(self.db.scalars(stmt))

    def add(self, exam: Exam) -> Exam:
        self.db.add(exam)
        self.db.flush()
        return exam

    def update(self, exam: Exam, **fields) -> Exam:
        for name, value in fields.items():
            setattr(exam, name, value)
        self.db.flush()
        return exam

    def delete(self, exam: Exam) -> None:
        self.db.delete(exam)
        self.db.flush()


class QuestionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, question_id: int) -> Optional[Question]:
        return self.db.get(Question, question_id)

    def find_by_ids(self, question_ids: Iterable[int]) -> List[Question]:
        ids = list(question_ids)
        if not ids:
            return []
        return list(self.db.scalars(select(Question).where(Question.id.in_(ids))))

    def add(self, question: Question) -> Question:
        self.db.add(question)
        self.db.flush()
        return question

    def update(self, question: Question, **fields) -> Question:
        for name, value in fields.items():
            setattr(question, name, value)
        self.db.flush()
        return question

    def delete(self, question: Question) -> None:
        self.db.delete(question)
        self.db.flush()


class StudentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, student_id: int) -> Optional[Student]:
        return self.db.get(Student, student_id)

    def find_by_ids(self, student_ids: Iterable[int]) -> List[Student]:
        ids = list(student_ids)
        if not ids:
            return []
        return list(self.db.scalars(select(Student).where(Student.id.in_(ids))))

    def add(self, student: Student) -> Student:
        self.db.add(student)
        self.db.flush()
        return student


class AssignmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, exam_id: int, student_id: int) -> Optional[ExamAssignment]:
        stmt = select(ExamAssignment).where(
            ExamAssignment.exam_id == exam_id,
            ExamAssignment.student_id == student_id,
        )
        return self.db.scalars(stmt).first()

    def find_by_exam(self, exam_id: int) -> List[ExamAssignment]:
        stmt = select(ExamAssignment).where(ExamAssignment.exam_id == exam_id)
        return list(self.db.scalars(stmt))

    def find_by_student(self, student_id: int) -> List[ExamAssignment]:
        stmt = select(ExamAssignment).where(ExamAssignment.student_id == student_id)
        return list(self.db.scalars(stmt))

    def add(self, assignment: ExamAssignment) -> ExamAssignment:
        """Insert; raises IntegrityError if the pair already exists."""
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def set_started_at_if_absent(self, exam_id: int, student_id: int, started_at: datetime) -> bool:
        """Conditionally set started_at. Returns True if this call set it."""
        stmt = (
            update(ExamAssignment)
            .where(
                ExamAssignment.exam_id == exam_id,
                ExamAssignment.student_id == student_id,
                ExamAssignment.started_at.is_(None),
            )
            .values(started_at=started_at)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def delete(self, assignment: ExamAssignment) -> None:
        self.db.delete(assignment)
        self.db.flush()

    def delete_by_exam(self, exam_id: int) -> int:
        stmt = (
            delete(ExamAssignment)
            .where(ExamAssignment.exam_id == exam_id)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount


class ResultRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, exam_id: int, student_id: int) -> Optional[ExamResult]:
        stmt = select(ExamResult).where(
            ExamResult.exam_id == exam_id,
            ExamResult.student_id == student_id,
        )
        return self.db.scalars(stmt).first()

    def find_by_exam(self, exam_id: int) -> List[ExamResult]:
        stmt = select(ExamResult).where(ExamResult.exam_id == exam_id)
        return list(self.db.scalars(stmt))

    def find_by_student(self, student_id: int) -> List[ExamResult]:
        stmt = (
            select(ExamResult)
            .where(ExamResult.student_id == student_id)
            .order_by(ExamResult.submitted_at.desc())
        )
        return list(self.db.scalars(stmt))

    def add(self, result: ExamResult) -> ExamResult:
        """Create-only insert; a second result for the same pair is a Conflict.

        Rolls the session back on conflict, so it must be the only pending
        write in the unit of work.
        """
        self.db.add(result)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict(
                f"Exam {result.exam_id} has already been graded for student {result.student_id}"
            ) from e
        return result
