import pytest

from examflow.errors import Conflict, InvalidInput, NotFound
from examflow.services import ResultService
from examflow.services.grading import GradedQuestion

from conftest import T0

QUESTIONS = [
    GradedQuestion("A", 1),
    GradedQuestion("B", 1),
    GradedQuestion(True, 2),
    GradedQuestion("Paris", 1),
]


class TestSubmitAnswers:
    def test_grades_and_stores(self, db, clock, make_exam):
        exam = make_exam()
        service = ResultService(db, clock)

        graded = service.submit_answers(exam.id, 7, {0: "A", 1: "X", 2: True}, QUESTIONS, is_time_up=True)

        assert (graded.correct_answers, graded.earned_points, graded.total_points) == (2, 3, 5)
        assert graded.rounded_percentage == 50.00

        stored = service.get_result(exam.id, 7)
        assert stored.submitted_at == T0
        assert stored.is_time_up is True
        assert stored.percentage_score == 50.0
        assert stored.answers_by_index() == {0: "A", 1: "X", 2: True}
        assert stored.question_results_by_index() == {0: True, 1: False, 2: True, 3: False}

    def test_string_keys_are_indices(self, db, clock, make_exam):
        exam = make_exam()
        graded = ResultService(db, clock).submit_answers(exam.id, 7, {"0": "A", "3": "Paris"}, QUESTIONS)
        assert graded.correct_answers == 2

    def test_second_submission_conflicts(self, db, clock, make_exam):
        exam = make_exam()
        service = ResultService(db, clock)
        service.submit_answers(exam.id, 7, {0: "A"}, QUESTIONS)

        clock.advance(minutes=1)
        with pytest.raises(Conflict):
            service.submit_answers(exam.id, 7, {0: "A", 1: "B", 2: True, 3: "Paris"}, QUESTIONS)

        stored = service.get_result(exam.id, 7)
        assert stored.correct_answers == 1
        assert stored.submitted_at == T0

    def test_unique_constraint_backs_the_check(self, db, clock, make_exam, monkeypatch):
        exam = make_exam()
        service = ResultService(db, clock)
        service.submit_answers(exam.id, 7, {0: "A"}, QUESTIONS)

        # Simulate a concurrent submission that slipped past the existence check
        monkeypatch.setattr(service.results, "get", lambda exam_id, student_id: None)
        with pytest.raises(Conflict):
            service.submit_answers(exam.id, 7, {0: "B"}, QUESTIONS)

        assert len(ResultService(db).list_for_exam(exam.id)) == 1

    def test_unknown_exam(self, db, clock):
        with pytest.raises(NotFound):
            ResultService(db, clock).submit_answers(999, 7, {}, QUESTIONS)

    @pytest.mark.parametrize("answers", [
        {4: "A"},
        {-1: "A"},
        {"-1": "A"},
        {"first": "A"},
        {1.9: "B"},
        {True: "B"},
        {"1": "A", 1: "B"},
    ])
    def test_answer_keys_must_index_questions(self, db, clock, make_exam, answers):
        exam = make_exam()
        with pytest.raises(InvalidInput):
            ResultService(db, clock).submit_answers(exam.id, 7, answers, QUESTIONS)

    def test_grading_uses_submitted_snapshot(self, db, clock, make_exam):
        exam = make_exam()
        service = ResultService(db, clock)
        service.submit_answers(exam.id, 7, {0: "A"}, [GradedQuestion("A")])
        service.submit_answers(exam.id, 8, {0: "A"}, [GradedQuestion("B")])

        assert service.get_result(exam.id, 7).percentage_score == 100
        assert service.get_result(exam.id, 8).percentage_score == 0


class TestLookups:
    def test_missing_result(self, db, make_exam):
        exam = make_exam()
        with pytest.raises(NotFound):
            ResultService(db).get_result(exam.id, 7)

    def test_lists(self, db, clock, make_exam):
        algebra, physics = make_exam(), make_exam(title="Physics")
        service = ResultService(db, clock)
        service.submit_answers(algebra.id, 7, {0: "A"}, QUESTIONS)
        service.submit_answers(algebra.id, 8, {0: "A"}, QUESTIONS)
        service.submit_answers(physics.id, 7, {0: "A"}, QUESTIONS)

        assert {r.student_id for r in service.list_for_exam(algebra.id)} == {7, 8}
        assert {r.exam_id for r in service.list_for_student(7)} == {algebra.id, physics.id}
        assert service.list_for_student(9) == []
