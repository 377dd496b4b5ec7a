from datetime import timedelta

import pytest

from examflow.errors import NotFound
from examflow.models import ExamAssignment
from examflow.repositories import AssignmentRepository
from examflow.services import AssignmentTracker

from conftest import T0


class TestAssign:
    def test_creates_assignment(self, db, clock, make_exam):
        exam = make_exam()
        outcome = AssignmentTracker(db, clock).assign(exam.id, 42)

        assert outcome.created is True
        assert outcome.assignment.assigned_at == T0
        assert outcome.assignment.started_at is None

    def test_assigning_twice_is_idempotent(self, db, clock, make_exam):
        exam = make_exam()
        tracker = AssignmentTracker(db, clock)
        first = tracker.assign(exam.id, 42)
        clock.advance(minutes=5)
        second = tracker.assign(exam.id, 42)

        assert second.created is False
        assert second.assignment.id == first.assignment.id
        assert second.assignment.assigned_at == T0
        assert db.query(ExamAssignment).count() == 1

    def test_unknown_exam(self, db, clock):
        with pytest.raises(NotFound):
            AssignmentTracker(db, clock).assign(999, 42)


class TestUnassign:
    def test_removes_assignment(self, db, clock, make_exam):
        exam = make_exam()
        tracker = AssignmentTracker(db, clock)
        tracker.assign(exam.id, 42)

        tracker.unassign(exam.id, 42)

        assert tracker.list_assigned_students(exam.id) == []

    def test_missing_assignment(self, db, clock, make_exam):
        exam = make_exam()
        with pytest.raises(NotFound):
            AssignmentTracker(db, clock).unassign(exam.id, 42)


class TestStartSession:
    def test_records_start(self, db, clock, make_exam):
        exam = make_exam()
        tracker = AssignmentTracker(db, clock)
        tracker.assign(exam.id, 42)
        clock.advance(minutes=3)

        started_at = tracker.start_session(exam.id, 42)

        assert started_at == T0 + timedelta(minutes=3)
        assert AssignmentRepository(db).get(exam.id, 42).started_at == started_at

    def test_second_start_returns_original(self, db, clock, make_exam):
        exam = make_exam()
        tracker = AssignmentTracker(db, clock)
        tracker.assign(exam.id, 42)

        first = tracker.start_session(exam.id, 42)
        clock.advance(minutes=20)
        second = tracker.start_session(exam.id, 42)

        assert first == second == T0

    def test_racing_sessions_agree(self, session_factory, clock, make_exam):
        exam = make_exam()
        setup = session_factory()
        AssignmentTracker(setup, clock).assign(exam.id, 42)
        setup.close()

        tab_one, tab_two = session_factory(), session_factory()
        try:
            first = AssignmentTracker(tab_one, clock).start_session(exam.id, 42)
            clock.advance(seconds=1)
            second = AssignmentTracker(tab_two, clock).start_session(exam.id, 42)
        finally:
            tab_one.close()
            tab_two.close()

        assert first == second

    def test_conditional_update_reports_winner(self, db, clock, make_exam):
        exam = make_exam()
        AssignmentTracker(db, clock).assign(exam.id, 42)
        repo = AssignmentRepository(db)

        assert repo.set_started_at_if_absent(exam.id, 42, T0) is True
        assert repo.set_started_at_if_absent(exam.id, 42, T0 + timedelta(minutes=1)) is False

    def test_requires_assignment(self, db, clock, make_exam):
        exam = make_exam()
        with pytest.raises(NotFound):
            AssignmentTracker(db, clock).start_session(exam.id, 42)


class TestLookups:
    def test_students_and_exams(self, db, clock, make_exam):
        algebra, physics = make_exam(), make_exam(title="Physics", scheduled_at=T0 + timedelta(days=1))
        tracker = AssignmentTracker(db, clock)
        tracker.assign(algebra.id, 1)
        tracker.assign(algebra.id, 2)
        tracker.assign(physics.id, 1)

        assert sorted(tracker.list_assigned_students(algebra.id)) == [1, 2]
        assert [e.id for e in tracker.list_assigned_exams(1)] == [physics.id, algebra.id]
        assert [e.id for e in tracker.list_assigned_exams(2)] == [algebra.id]
        assert tracker.list_assigned_exams(3) == []
