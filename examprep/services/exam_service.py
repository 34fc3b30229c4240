"""Exam history over stored results"""
import math
from typing import Optional

from sqlalchemy.orm import Session

from examprep.errors.exceptions import NotFoundException
from examprep.models.exam_result import ExamResult
from examprep.models.subscription import ExamMode


def generate_feedback(score: float, total: float) -> str:
    """Canned feedback banded on the percentage score"""
    percentage = (score / total) * 100 if total else 0
    if percentage >= 80:
        return "Excellent work! You've mastered this subject. Keep it up!"
    if percentage >= 60:
        return "Good job! You have a solid understanding, but there's room for improvement in some areas."
    if percentage >= 50:
        return "You passed, but barely. Review the topics you missed to strengthen your knowledge."
    if percentage >= 40:
        return "You're close to passing. Focus on your weak areas and try again."
    return "Don't give up. Identify your weak subjects and dedicate more time to study them before the next attempt."


class ExamService:
    def __init__(self, db: Session):
        self.db = db

    def get_exam_history(
        self,
        user_id: int,
        mode: Optional[ExamMode] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        query = self.db.query(ExamResult).filter(ExamResult.user_id == user_id)
        if mode:
            query = query.filter(ExamResult.mode == mode)

        total = query.count()
        exams = (
            query.order_by(ExamResult.created_at.desc(), ExamResult.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {"exams": exams, "total": total, "pages": math.ceil(total / limit) if limit else 0}

    def get_exam_detail(self, exam_id: int, user_id: int) -> ExamResult:
        """Raises NotFound for missing exams and for exams owned by someone else."""
        exam = self.db.query(ExamResult).filter(
            ExamResult.id == exam_id,
            ExamResult.user_id == user_id,
        ).first()
        if exam is None:
            raise NotFoundException("Exam result not found")
        return exam

    def get_exam_detail_with_feedback(self, exam_id: int, user_id: int) -> tuple:
        exam = self.get_exam_detail(exam_id, user_id)
        feedback = exam.feedback or generate_feedback(exam.score, exam.total_obtainable)
        return exam, feedback

    def get_retake_config(self, exam_id: int, user_id: int) -> dict:
        exam = self.get_exam_detail(exam_id, user_id)
        return {
            "mode": exam.mode,
            "subjects": [s.get("subject") for s in (exam.subjects or []) if isinstance(s, dict)],
        }
