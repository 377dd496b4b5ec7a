"""
Exam window and per-student session timing.

Nothing here is stored or ticked. Every status is recomputed from the
exam schedule, the recorded start instant and the current time, so the
answer is the same on any worker and survives restarts.
"""
import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from examflow.database import as_utc


class WindowState(str, enum.Enum):
    """Phase of the exam itself, from its schedule alone."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class SessionStatus(str, enum.Enum):
    """Per-student state derived on each read."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    TIME_UP = "time_up"
    COMPLETED = "completed"
    FINISHED = "finished"


@dataclass(frozen=True)
class ExamWindow:
    start: datetime
    end: datetime
    state: WindowState


@dataclass(frozen=True)
class SessionSnapshot:
    status: SessionStatus
    remaining_seconds: Optional[int] = None  # Set only for in_progress and time_up


def exam_end(scheduled_at: datetime, duration_minutes: int) -> datetime:
    return as_utc(scheduled_at) + timedelta(minutes=duration_minutes)


def exam_window(scheduled_at: datetime, duration_minutes: int, now: datetime) -> ExamWindow:
    start = as_utc(scheduled_at)
    end = exam_end(start, duration_minutes)
    now = as_utc(now)

    if now < start:
        state = WindowState.SCHEDULED
    elif now < end:
        state = WindowState.IN_PROGRESS
    else:
        state = WindowState.FINISHED
    return ExamWindow(start=start, end=end, state=state)


def remaining_ms(started_at: datetime, duration_minutes: int, now: datetime) -> int:
    """Milliseconds left on a session; negative once the deadline has passed."""
    elapsed = as_utc(now) - as_utc(started_at)
    elapsed_ms = (elapsed.days * 86_400 + elapsed.seconds) * 1000 + elapsed.microseconds // 1000
    return duration_minutes * 60_000 - elapsed_ms


def session_status(
    window_state: WindowState,
    duration_minutes: int,
    started_at: Optional[datetime],
    has_result: bool,
    now: datetime,
) -> SessionSnapshot:
    """Derive one student's session status. First matching rule wins.

    Remaining time on a live session is the floor of the milliseconds left,
    except that it never drops below 1 second: 1 ms before the deadline
    reports ``in_progress`` with 1 second, and 0 belongs to ``time_up``.
    """
    if has_result:
        return SessionSnapshot(SessionStatus.COMPLETED)

    if started_at is not None:
        remaining = remaining_ms(started_at, duration_minutes, now)
        if remaining <= 0:
            return SessionSnapshot(SessionStatus.TIME_UP, remaining_seconds=0)
        # Floored, but a live session never reports 0 seconds left
        return SessionSnapshot(SessionStatus.IN_PROGRESS, remaining_seconds=max(1, remaining // 1000))

    if window_state == WindowState.FINISHED:
        return SessionSnapshot(SessionStatus.FINISHED)
    return SessionSnapshot(SessionStatus.NOT_STARTED)
