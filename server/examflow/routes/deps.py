"""
Shared FastAPI dependencies.
"""
from datetime import datetime
from typing import Callable

from examflow.database import utcnow


def get_clock() -> Callable[[], datetime]:
    """Wall clock used by the services; overridden in tests."""
    return utcnow
