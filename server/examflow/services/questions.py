"""
Question bank.

Editing a question never changes an existing grade: submissions carry
their own question snapshot.
"""
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from examflow.database import utcnow
from examflow.errors import InvalidInput, NotFound
from examflow.models import Question, QuestionType
from examflow.repositories import QuestionRepository

EDITABLE_FIELDS = ("text", "type", "options", "correct_answer", "points")


def parse_question_type(value: Any) -> QuestionType:
    try:
        return QuestionType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in QuestionType)
        raise InvalidInput(f"Invalid question type {value!r}; expected one of: {allowed}")


def _check_points(points: Any) -> int:
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise InvalidInput("Points must be a positive integer")
    return points


class QuestionBank:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.questions = QuestionRepository(db)

    def create(
        self,
        text: str,
        type: Any,
        correct_answer: Any,
        options: Optional[List[str]] = None,
        points: int = 1,
    ) -> Question:
        if not text:
            raise InvalidInput("Question text is required")
        if correct_answer is None or correct_answer == "":
            raise InvalidInput("Correct answer is required")
        now = self.clock()
        question = Question(
            text=text,
            type=parse_question_type(type),
            options=options,
            correct_answer=correct_answer,
            points=_check_points(points),
            created_at=now,
            updated_at=now,
        )
        self.questions.add(question)
        self.db.commit()
        return question

    def get(self, question_id: int) -> Question:
        question = self.questions.get(question_id)
        if question is None:
            raise NotFound(f"Question {question_id} not found")
        return question

    def get_many(self, question_ids: Sequence[int]) -> List[Question]:
        if not question_ids:
            raise InvalidInput("No valid question IDs provided")
        return self.questions.find_by_ids(question_ids)

    def update(self, question_id: int, **changes) -> Question:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidInput(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        question = self.get(question_id)
        fields = {name: value for name, value in changes.items() if value is not None}
        if "type" in fields:
            fields["type"] = parse_question_type(fields["type"])
        if "points" in fields:
            _check_points(fields["points"])
        fields["updated_at"] = self.clock()

        self.questions.update(question, **fields)
        self.db.commit()
        return question

    def delete(self, question_id: int) -> None:
        self.questions.delete(self.get(question_id))
        self.db.commit()
