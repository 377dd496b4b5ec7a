"""
Auto-grading of submitted answers.

Pure functions only: no storage access, so a grade depends on nothing but
the question snapshot and the answers passed in.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from numbers import Number
from typing import Any, Dict, Mapping, Optional, Sequence

DEFAULT_POINTS = 1


def round_half_up(value: float, places: int = 2) -> float:
    """Round halves away from zero (3.125 -> 3.13), unlike built-in round()."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class GradedQuestion:
    """The slice of a question that grading needs."""
    correct_answer: Any
    points: Optional[float] = None

    @property
    def weight(self) -> float:
        return DEFAULT_POINTS if self.points is None else self.points


@dataclass(frozen=True)
class GradeResult:
    total_questions: int
    correct_answers: int
    earned_points: float
    total_points: float
    percentage_score: float  # Unrounded, 0-100
    question_results: Dict[int, bool] = field(default_factory=dict)

    @property
    def rounded_percentage(self) -> float:
        return round_half_up(self.percentage_score)


def answers_match(submitted: Any, correct: Any) -> bool:
    """Exact equality with no normalisation.

    A missing answer never matches. Booleans only match booleans and
    strings only match strings, so ``"1"``, ``1`` and ``True`` stay distinct.
    Ints and floats compare by value. Lists match element by element under
    the same rules; other containers fall back to plain ``==`` once their
    types agree.
    """
    if submitted is None:
        return False
    if isinstance(submitted, bool) or isinstance(correct, bool):
        return isinstance(submitted, bool) and isinstance(correct, bool) and submitted is correct
    if isinstance(submitted, Number) and isinstance(correct, Number):
        return submitted == correct
    if type(submitted) is not type(correct):
        return False
    if isinstance(submitted, (list, tuple)):
        return len(submitted) == len(correct) and all(
            answers_match(s, c) for s, c in zip(submitted, correct)
        )
    return submitted == correct


def grade(questions: Sequence[GradedQuestion], answers: Mapping[int, Any]) -> GradeResult:
    """Grade answers (keyed by question index) against an ordered question list."""
    total_questions = len(questions)
    correct_answers = 0
    earned_points = 0
    total_points = 0
    question_results: Dict[int, bool] = {}

    for index, question in enumerate(questions):
        weight = question.weight
        total_points += weight

        is_correct = answers_match(answers.get(index), question.correct_answer)
        if is_correct:
            correct_answers += 1
            earned_points += weight

        question_results[index] = is_correct

    percentage = (correct_answers / total_questions * 100) if total_questions > 0 else 0.0

    return GradeResult(
        total_questions=total_questions,
        correct_answers=correct_answers,
        earned_points=earned_points,
        total_points=total_points,
        percentage_score=percentage,
        question_results=question_results,
    )
