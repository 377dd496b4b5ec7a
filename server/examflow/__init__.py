"""ExamFlow: exam scheduling, session timing and auto-grading service."""

__version__ = "0.1.0"
