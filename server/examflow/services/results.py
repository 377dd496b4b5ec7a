"""
Answer submission and graded result lookups.
"""
import re
from datetime import datetime
from typing import Any, Callable, List, Mapping, Sequence

from sqlalchemy.orm import Session

from examflow.database import utcnow
from examflow.errors import Conflict, InvalidInput, NotFound
from examflow.models import ExamResult
from examflow.repositories import ExamRepository, ResultRepository
from examflow.services.grading import GradedQuestion, GradeResult, grade

INDEX_KEY = re.compile(r"-?[0-9]+")


def _answer_indices(answers: Mapping[Any, Any], question_count: int) -> dict:
    """Normalise answer keys to question indices.

    Keys must be ints or decimal digit strings (JSON object keys arrive as
    strings). Floats and booleans are rejected, as are two keys naming the
    same question, e.g. ``"1"`` and ``1``.
    """
    indexed = {}
    for key, value in answers.items():
        if isinstance(key, int) and not isinstance(key, bool):
            index = key
        elif isinstance(key, str) and INDEX_KEY.fullmatch(key):
            index = int(key)
        else:
            raise InvalidInput(f"Answer key {key!r} is not a question index")
        if index < 0 or index >= question_count:
            raise InvalidInput(f"Answer key {index} is outside the {question_count} submitted questions")
        if index in indexed:
            raise InvalidInput(f"Question {index} is answered more than once")
        indexed[index] = value
    return indexed


class ResultService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.exams = ExamRepository(db)
        self.results = ResultRepository(db)

    def submit_answers(
        self,
        exam_id: int,
        student_id: int,
        answers: Mapping[Any, Any],
        questions: Sequence[GradedQuestion],
        is_time_up: bool = False,
    ) -> GradeResult:
        """Grade a submission against the question snapshot sent with it and store it.

        Only one result may exist per (exam, student); a resubmission raises
        Conflict and leaves the stored result untouched.
        """
        if questions is None or answers is None:
            raise InvalidInput("Both questions and answers are required")
        if self.exams.get(exam_id) is None:
            raise NotFound(f"Exam {exam_id} not found")

        indexed = _answer_indices(answers, len(questions))
        if self.results.get(exam_id, student_id) is not None:
            raise Conflict(f"Exam {exam_id} has already been graded for student {student_id}")

        graded = grade(questions, indexed)
        now = self.clock()
        result = ExamResult(
            exam_id=exam_id,
            student_id=student_id,
            answers={str(i): v for i, v in indexed.items()},
            submitted_at=now,
            is_time_up=bool(is_time_up),
            total_questions=graded.total_questions,
            correct_answers=graded.correct_answers,
            earned_points=graded.earned_points,
            total_points=graded.total_points,
            percentage_score=graded.percentage_score,
            question_results={str(i): ok for i, ok in graded.question_results.items()},
            graded_at=now,
        )
        self.results.add(result)
        self.db.commit()
        return graded

    def get_result(self, exam_id: int, student_id: int) -> ExamResult:
        result = self.results.get(exam_id, student_id)
        if result is None:
            raise NotFound(f"No result for student {student_id} on exam {exam_id}")
        return result

    def list_for_student(self, student_id: int) -> List[ExamResult]:
        return self.results.find_by_student(student_id)

    def list_for_exam(self, exam_id: int) -> List[ExamResult]:
        return self.results.find_by_exam(exam_id)
