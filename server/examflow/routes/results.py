import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from examflow.database import get_db
from examflow.models import ExamResult
from examflow.routes.deps import get_clock
from examflow.schemas import ExamResultResponse, GradeResponse, SubmitAnswersRequest
from examflow.services import ResultService
from examflow.services.grading import GradedQuestion, round_half_up

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Results"])


def _result_response(result: ExamResult) -> ExamResultResponse:
    response = ExamResultResponse.model_validate(result)
    return response.model_copy(update={
        "answers": result.answers_by_index(),
        "question_results": result.question_results_by_index(),
        "percentage_score": round_half_up(result.percentage_score),
    })


@router.post("/submit", response_model=GradeResponse, status_code=201)
def submit_answers(request: SubmitAnswersRequest, db: Session = Depends(get_db), clock=Depends(get_clock)):
    """
    Student submits answers; graded immediately against the submitted questions.
    A second submission for the same exam and student is rejected with 409.
    """
    questions = [GradedQuestion(correct_answer=q.correct_answer, points=q.points) for q in request.questions]
    graded = ResultService(db, clock).submit_answers(
        request.exam_id,
        request.student_id,
        request.answers,
        questions,
        is_time_up=request.is_time_up,
    )
    logger.info(
        "Graded exam %s for student %s: %d/%d correct, %.2f%%%s",
        request.exam_id,
        request.student_id,
        graded.correct_answers,
        graded.total_questions,
        graded.rounded_percentage,
        " (time up)" if request.is_time_up else "",
    )
    return GradeResponse(
        total_questions=graded.total_questions,
        correct_answers=graded.correct_answers,
        earned_points=graded.earned_points,
        total_points=graded.total_points,
        percentage_score=graded.rounded_percentage,
    )


@router.get("/exam/{exam_id}/student/{student_id}", response_model=ExamResultResponse)
def get_result(exam_id: int, student_id: int, db: Session = Depends(get_db)):
    return _result_response(ResultService(db).get_result(exam_id, student_id))


@router.get("/student/{student_id}", response_model=List[ExamResultResponse])
def list_student_results(student_id: int, db: Session = Depends(get_db)):
    return [_result_response(r) for r in ResultService(db).list_for_student(student_id)]


@router.get("/exam/{exam_id}", response_model=List[ExamResultResponse])
def list_exam_results(exam_id: int, db: Session = Depends(get_db)):
    return [_result_response(r) for r in ResultService(db).list_for_exam(exam_id)]
