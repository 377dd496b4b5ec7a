import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from examflow.database import get_db
from examflow.repositories import StudentRepository
from examflow.routes.deps import get_clock
from examflow.schemas import (
    AssignedStudent,
    AssignResponse,
    ExamCreate,
    ExamDeleteResponse,
    ExamDetailResponse,
    ExamResponse,
    ExamStatusResponse,
    ExamStatusUpdate,
    ExamUpdate,
    QuestionResponse,
    SessionStartResponse,
)
from examflow.services import AssignmentTracker, ExamLifecycleManager, ExamStatusAggregator
from examflow.services.exam_status import UNKNOWN_STUDENT

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Exams"])


@router.post("/", response_model=ExamResponse, status_code=201)
def create_exam(request: ExamCreate, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Schedule a new exam"""
    exam = ExamLifecycleManager(db, clock).create(**request.model_dump())
    logger.info("Created exam %s (%r) at %s for %s min", exam.id, exam.title, exam.scheduled_at.isoformat(), exam.duration_minutes)
    return exam


@router.get("/", response_model=List[ExamResponse])
def list_exams(creator_id: Optional[int] = None, db: Session = Depends(get_db)):
    """All exams, newest first, optionally for one creator"""
    return ExamLifecycleManager(db).list_exams(creator_id=creator_id)


@router.get("/student/{student_id}", response_model=List[ExamResponse])
def list_student_exams(student_id: int, db: Session = Depends(get_db)):
    """Exams a student is assigned to"""
    return AssignmentTracker(db).list_assigned_exams(student_id)


@router.get("/{exam_id}", response_model=ExamDetailResponse)
def get_exam(exam_id: int, db: Session = Depends(get_db)):
    """Exam with its questions populated"""
    manager = ExamLifecycleManager(db)
    exam = manager.get(exam_id)
    return ExamDetailResponse(
        **ExamResponse.model_validate(exam).model_dump(),
        questions=[QuestionResponse.model_validate(q) for q in manager.questions_for(exam)],
    )


@router.put("/{exam_id}", response_model=ExamResponse)
def update_exam(exam_id: int, request: ExamUpdate, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Edit exam details and schedule; status is changed through /status"""
    changes = request.model_dump(exclude_unset=True)
    exam = ExamLifecycleManager(db, clock).update_schedule(exam_id, **changes)
    logger.info("Updated exam %s: %s", exam_id, ", ".join(sorted(changes)) or "no fields")
    return exam


@router.patch("/{exam_id}/status", response_model=ExamResponse)
def set_exam_status(exam_id: int, request: ExamStatusUpdate, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Set the administrative status; "delayed" requires new_scheduled_at"""
    exam = ExamLifecycleManager(db, clock).set_status(exam_id, request.status, request.new_scheduled_at)
    logger.info("Exam %s status -> %s (starts %s)", exam_id, exam.status.value, exam.scheduled_at.isoformat())
    return exam


@router.delete("/{exam_id}", response_model=ExamDeleteResponse)
def delete_exam(exam_id: int, db: Session = Depends(get_db)):
    """Delete an exam and its assignments; graded results are kept"""
    deletion = ExamLifecycleManager(db).delete(exam_id)
    logger.info("Deleted exam %s and %d assignment(s)", exam_id, deletion.deleted_assignments)
    return ExamDeleteResponse(
        message="Exam deleted successfully",
        deleted_assignments=deletion.deleted_assignments,
    )


@router.post("/{exam_id}/assign/{student_id}", response_model=AssignResponse)
def assign_student(exam_id: int, student_id: int, db: Session = Depends(get_db), clock=Depends(get_clock)):
    outcome = AssignmentTracker(db, clock).assign(exam_id, student_id)
    if not outcome.created:
        return AssignResponse(message="Student already assigned to exam", assigned_at=outcome.assignment.assigned_at)
    logger.info("Assigned student %s to exam %s", student_id, exam_id)
    return AssignResponse(message="Student assigned to exam successfully", assigned_at=outcome.assignment.assigned_at)


@router.delete("/{exam_id}/assign/{student_id}")
def unassign_student(exam_id: int, student_id: int, db: Session = Depends(get_db)):
    AssignmentTracker(db).unassign(exam_id, student_id)
    logger.info("Unassigned student %s from exam %s", student_id, exam_id)
    return {"success": True, "message": "Student unassigned from exam successfully"}


@router.get("/{exam_id}/students", response_model=List[AssignedStudent])
def list_assigned_students(exam_id: int, db: Session = Depends(get_db)):
    """Students assigned to an exam; ids missing from the roster are still listed"""
    student_ids = AssignmentTracker(db).list_assigned_students(exam_id)
    known = {s.id: s for s in StudentRepository(db).find_by_ids(student_ids)}

    students = []
    for student_id in student_ids:
        student = known.get(student_id)
        if student is None:
            students.append(AssignedStudent(id=student_id, name=UNKNOWN_STUDENT))
        else:
            students.append(AssignedStudent(
                id=student.id,
                name=student.name,
                roll_number=student.roll_number,
                email=student.email,
            ))
    return students


@router.post("/{exam_id}/start/{student_id}", response_model=SessionStartResponse)
def start_session(exam_id: int, student_id: int, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Record when a student opens the exam. Repeat calls keep the first start."""
    started_at = AssignmentTracker(db, clock).start_session(exam_id, student_id)
    logger.info("Student %s session on exam %s started at %s", student_id, exam_id, started_at.isoformat())
    return SessionStartResponse(started_at=started_at)


@router.get("/{exam_id}/status", response_model=ExamStatusResponse)
def get_exam_status(exam_id: int, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Exam window state and every assigned student's session timer"""
    report = ExamStatusAggregator(db, clock).get_exam_status(exam_id)
    return ExamStatusResponse(**asdict(report))
