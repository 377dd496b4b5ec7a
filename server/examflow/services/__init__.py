"""
Exam services.

grading and session_clock are pure; the rest read and write through the
repositories and raise examflow.errors on failure.
"""
from examflow.services.assignments import AssignmentTracker
from examflow.services.exam_lifecycle import ExamLifecycleManager
from examflow.services.exam_status import ExamStatusAggregator
from examflow.services.questions import QuestionBank
from examflow.services.roster import StudentRoster
from examflow.services.results import ResultService

__all__ = [
    "AssignmentTracker",
    "ExamLifecycleManager",
    "ExamStatusAggregator",
    "QuestionBank",
    "StudentRoster",
    "ResultService",
]
