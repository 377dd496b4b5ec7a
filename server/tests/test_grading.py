import pytest

from examflow.services.grading import GradedQuestion, answers_match, grade, round_half_up


def q(correct, points=None):
    return GradedQuestion(correct_answer=correct, points=points)


class TestGrade:
    def test_weighted_points_example(self):
        questions = [q("A", 1), q("B", 1), q(True, 2), q("Paris", 1)]
        answers = {0: "A", 1: "C", 2: True, 3: "paris"}

        result = grade(questions, answers)

        assert result.total_questions == 4
        assert result.correct_answers == 2
        assert result.earned_points == 3
        assert result.total_points == 5
        assert result.percentage_score == 50.0
        assert result.rounded_percentage == 50.00
        assert result.question_results == {0: True, 1: False, 2: True, 3: False}

    def test_points_default_to_one(self):
        result = grade([q("A"), q("B")], {0: "A"})
        assert result.total_points == 2
        assert result.earned_points == 1

    def test_missing_answers_are_wrong(self):
        result = grade([q("A"), q("B"), q("C")], {})
        assert result.correct_answers == 0
        assert result.question_results == {0: False, 1: False, 2: False}
        assert result.percentage_score == 0

    def test_empty_question_set_scores_zero(self):
        result = grade([], {})
        assert result.total_questions == 0
        assert result.total_points == 0
        assert result.percentage_score == 0

    def test_percentage_counts_questions_not_points(self):
        result = grade([q("A", 10), q("B", 1), q("C", 1)], {1: "B"})
        assert result.earned_points == 1
        assert result.total_points == 12
        assert round(result.percentage_score, 4) == 33.3333
        assert result.rounded_percentage == 33.33

    def test_is_deterministic_and_bounded(self):
        questions = [q("A"), q("B"), q("C")]
        answers = {0: "A", 1: "B", 2: "C"}
        first = grade(questions, answers)
        second = grade(questions, answers)
        assert first == second
        assert 0 <= first.percentage_score <= 100
        assert first.percentage_score == 100

    def test_percentage_rounds_half_up(self):
        result = grade([q("A")] * 32, {0: "A"})
        assert result.percentage_score == 3.125
        assert result.rounded_percentage == 3.13


class TestAnswersMatch:
    def test_exact_string_match_only(self):
        assert answers_match("Paris", "Paris")
        assert not answers_match("paris", "Paris")
        assert not answers_match(" Paris", "Paris")

    def test_none_never_matches(self):
        assert not answers_match(None, None)
        assert not answers_match(None, "A")

    def test_types_are_not_coerced(self):
        assert not answers_match("1", 1)
        assert not answers_match(1, True)
        assert not answers_match("true", True)
        assert answers_match(False, False)

    def test_numbers_compare_by_value(self):
        assert answers_match(2, 2)
        assert answers_match(2, 2.0)
        assert not answers_match(2, 3)

    def test_lists_compare_element_by_element(self):
        assert answers_match(["a", 1], ["a", 1])
        assert answers_match([1, 2.0], [1, 2])
        assert not answers_match([1], [True])
        assert not answers_match(["1"], [1])
        assert not answers_match(["a"], ["a", "b"])
        assert not answers_match(["a", "b"], ("a", "b"))


class TestRoundHalfUp:
    @pytest.mark.parametrize("value, expected", [
        (3.125, 3.13),
        (0.005, 0.01),
        (2.675, 2.68),
        (33.33333, 33.33),
        (100.0, 100.0),
        (0.0, 0.0),
    ])
    def test_two_places(self, value, expected):
        assert round_half_up(value) == expected
