"""Dashboard analytics aggregated from exam results"""
import math

from sqlalchemy.orm import Session

from examprep.models.exam_result import ExamResult


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db

    def get_user_analytics(self, user_id: int) -> dict:
        """
        Counts of written/passed/failed exams and the mean percentage score
        over *passed* exams only, rounded half up (0 when none passed).
        """
        base = self.db.query(ExamResult).filter(ExamResult.user_id == user_id)
        total = base.count()
        passed = base.filter(ExamResult.is_passed.is_(True)).count()
        failed = base.filter(ExamResult.is_passed.is_(False)).count()

        passed_scores = (
            self.db.query(ExamResult.score, ExamResult.total_obtainable)
            .filter(ExamResult.user_id == user_id, ExamResult.is_passed.is_(True))
            .all()
        )
        percentages = [score / obtainable * 100 for score, obtainable in passed_scores if obtainable]
        average = math.floor(sum(percentages) / len(percentages) + 0.5) if percentages else 0

        return {
            "total_exams_written": total,
            "exams_passed": passed,
            "exams_failed": failed,
            "performance_average": average,
        }
