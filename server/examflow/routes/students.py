import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from examflow.database import get_db
from examflow.schemas import StudentRegisterRequest, StudentResponse
from examflow.services import StudentRoster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Students"])


@router.post("/register", response_model=StudentResponse, status_code=201)
def register_student(request: StudentRegisterRequest, db: Session = Depends(get_db)):
    """Add a student to the roster so they show up by name on status boards"""
    student = StudentRoster(db).register(request.name, request.roll_number, request.email)
    logger.info("Registered student %s (%s)", student.id, student.name)
    return student


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(student_id: int, db: Session = Depends(get_db)):
    return StudentRoster(db).get(student_id)
