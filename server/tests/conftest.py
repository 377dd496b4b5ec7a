from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from examflow.database import Base, get_db
from examflow.main import app
from examflow.models import Student
from examflow.routes.deps import get_clock
from examflow.services import AssignmentTracker, ExamLifecycleManager

T0 = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def make_exam(db, clock):
    def _make_exam(**overrides):
        fields = {
            "title": "Algebra midterm",
            "subject": "math",
            "scheduled_at": T0,
            "duration_minutes": 60,
        }
        fields.update(overrides)
        return ExamLifecycleManager(db, clock).create(**fields)
    return _make_exam


@pytest.fixture
def make_student(db):
    def _make_student(name="Ada", roll_number=None):
        student = Student(name=name, roll_number=roll_number)
        db.add(student)
        db.commit()
        return student
    return _make_student


@pytest.fixture
def assign(db, clock):
    def _assign(exam_id, student_id):
        return AssignmentTracker(db, clock).assign(exam_id, student_id).assignment
    return _assign


@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
