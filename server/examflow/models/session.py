from sqlalchemy import Column, Integer, Float, Boolean, JSON, UniqueConstraint
from examflow.database import Base, UTCDateTime, utcnow


class ExamAssignment(Base):
    """Links one student to one exam and records when their session started"""
    __tablename__ = "exam_assignments"
    __table_args__ = (UniqueConstraint("exam_id", "student_id", name="uq_assignment_exam_student"),)
    
    id = Column(Integer, primary_key=True, index=True)
    # No FK to exams: assignments are removed explicitly when the exam is deleted
    exam_id = Column(Integer, nullable=False, index=True)
    student_id = Column(Integer, nullable=False, index=True)
    assigned_at = Column(UTCDateTime, nullable=False, default=utcnow)
    started_at = Column(UTCDateTime, nullable=True)  # Set once, on first session start


class ExamResult(Base):
    """Graded submission, at most one per (exam, student)"""
    __tablename__ = "exam_results"
    __table_args__ = (UniqueConstraint("exam_id", "student_id", name="uq_result_exam_student"),)
    
    id = Column(Integer, primary_key=True, index=True)
    # Results outlive their exam, so this is not a foreign key
    exam_id = Column(Integer, nullable=False, index=True)
    student_id = Column(Integer, nullable=False, index=True)
    answers = Column(JSON, nullable=False, default=dict)  # {question_index: answer}
    submitted_at = Column(UTCDateTime, nullable=False, default=utcnow)
    is_time_up = Column(Boolean, nullable=False, default=False)
    
    # Grading output
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    earned_points = Column(Float, nullable=False)
    total_points = Column(Float, nullable=False)
    percentage_score = Column(Float, nullable=False)
    question_results = Column(JSON, nullable=False, default=dict)  # {question_index: bool}
    graded_at = Column(UTCDateTime, nullable=False, default=utcnow)

    def answers_by_index(self) -> dict:
        """JSON object keys come back as strings."""
        return {int(k): v for k, v in (self.answers or {}).items()}

    def question_results_by_index(self) -> dict:
        return {int(k): bool(v) for k, v in (self.question_results or {}).items()}
