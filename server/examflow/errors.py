"""
Error kinds raised by the exam services.

The services raise these and never translate them; the HTTP layer maps
each kind to a status code.
"""


class ExamError(Exception):
    """Base class for all exam service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ExamError):
    """Exam, assignment, question, student or result does not exist."""


class InvalidInput(ExamError):
    """Missing or malformed duration, schedule, status, question or answer set."""


class InvalidStatus(InvalidInput):
    """Target status is not an administrative exam status."""


class InvalidSchedule(InvalidInput):
    """Schedule is missing or unusable, e.g. `delayed` without a new date."""


class Conflict(ExamError):
    """Duplicate submission for an already graded (exam, student) pair."""
