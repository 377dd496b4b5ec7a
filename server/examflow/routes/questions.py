import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from examflow.database import get_db
from examflow.errors import InvalidInput
from examflow.routes.deps import get_clock
from examflow.schemas import QuestionCreate, QuestionResponse, QuestionUpdate
from examflow.services import QuestionBank

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Questions"])


def _parse_ids(ids: str) -> List[int]:
    parsed = []
    for part in ids.split(","):
        part = part.strip()
        if part.isdigit():
            parsed.append(int(part))
    if not parsed:
        raise InvalidInput("No valid IDs provided")
    return parsed


@router.post("/", response_model=QuestionResponse, status_code=201)
def create_question(request: QuestionCreate, db: Session = Depends(get_db), clock=Depends(get_clock)):
    question = QuestionBank(db, clock).create(**request.model_dump())
    logger.info("Created %s question %s", question.type.value, question.id)
    return question


@router.get("/ids", response_model=List[QuestionResponse])
def get_questions_by_ids(ids: str, db: Session = Depends(get_db)):
    """Fetch several questions: /ids?ids=1,2,3"""
    return QuestionBank(db).get_many(_parse_ids(ids))


@router.get("/{question_id}", response_model=QuestionResponse)
def get_question(question_id: int, db: Session = Depends(get_db)):
    return QuestionBank(db).get(question_id)


@router.put("/{question_id}", response_model=QuestionResponse)
def update_question(question_id: int, request: QuestionUpdate, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """Past grades are unaffected: submissions carry their own question snapshot"""
    return QuestionBank(db, clock).update(question_id, **request.model_dump(exclude_unset=True))


@router.delete("/{question_id}")
def delete_question(question_id: int, db: Session = Depends(get_db)):
    QuestionBank(db).delete(question_id)
    logger.info("Deleted question %s", question_id)
    return {"success": True, "message": "Question deleted successfully"}
