"""
Minimal student roster, used for display identity on the status board.
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from examflow.errors import Conflict, InvalidInput, NotFound
from examflow.models import Student
from examflow.repositories import StudentRepository


class StudentRoster:
    def __init__(self, db: Session):
        self.db = db
        self.students = StudentRepository(db)

    def register(self, name: str, roll_number: Optional[str] = None, email: Optional[str] = None) -> Student:
        name = (name or "").strip()
        if not name:
            raise InvalidInput("Student name is required")
        try:
            student = self.students.add(Student(name=name, roll_number=roll_number, email=email))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict(f"A student with email {email!r} already exists") from e
        return student

    def get(self, student_id: int) -> Student:
        student = self.students.get(student_id)
        if student is None:
            raise NotFound(f"Student {student_id} not found")
        return student
