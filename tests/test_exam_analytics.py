from datetime import timedelta

import pytest

from examprep.db.base import utcnow
from examprep.errors.exceptions import NotFoundException
from examprep.models.exam_result import ExamResult
from examprep.models.subscription import ExamMode
from examprep.services.analytics_service import AnalyticsService
from examprep.services.exam_service import ExamService, generate_feedback


@pytest.fixture
def add_exam(db):
    def _add_exam(user, score, total=400, passed=None, mode=ExamMode.PURE_JAMB, feedback=None):
        now = utcnow()
        exam = ExamResult(
            user_id=user.id,
            mode=mode,
            score=score,
            total_obtainable=total,
            is_passed=score / total >= 0.5 if passed is None else passed,
            subjects=[{"subject": "English", "score": score}, {"subject": "Physics", "score": 0}],
            answers=[{"question_id": 1, "selected": "A", "correct": "A"}],
            start_time=now - timedelta(hours=2),
            end_time=now,
            duration_seconds=7200,
            feedback=feedback,
        )
        db.add(exam)
        db.commit()
        db.refresh(exam)
        return exam

    return _add_exam


class TestFeedback:
    """Percentage bands"""

    @pytest.mark.parametrize("score,expected", [
        (90, "Excellent"),
        (80, "Excellent"),
        (65, "Good job"),
        (55, "barely"),
        (45, "close to passing"),
        (10, "Don't give up"),
    ])
    def test_bands(self, score, expected):
        assert expected in generate_feedback(score, 100)

    def test_zero_total(self):
        assert "Don't give up" in generate_feedback(0, 0)


class TestExamHistory:
    """History listing, detail and retake"""

    def test_history_newest_first_and_paged(self, db, make_user, add_exam):
        user = make_user()
        exams = [add_exam(user, s) for s in (100, 200, 300)]

        result = ExamService(db).get_exam_history(user.id, page=1, limit=2)
        assert result["total"] == 3
        assert result["pages"] == 2
        assert [e.id for e in result["exams"]] == [exams[2].id, exams[1].id]

    def test_history_filtered_by_mode(self, db, make_user, add_exam):
        user = make_user()
        add_exam(user, 250, mode=ExamMode.PURE_JAMB)
        ai_exam = add_exam(user, 250, mode=ExamMode.JAMB_AI)

        result = ExamService(db).get_exam_history(user.id, mode=ExamMode.JAMB_AI)
        assert [e.id for e in result["exams"]] == [ai_exam.id]

    def test_detail_of_other_users_exam_is_not_found(self, db, make_user, add_exam):
        owner = make_user()
        other = make_user(email="other@example.com")
        exam = add_exam(owner, 300)

        with pytest.raises(NotFoundException):
            ExamService(db).get_exam_detail(exam.id, other.id)

    def test_stored_feedback_wins(self, db, make_user, add_exam):
        user = make_user()
        exam = add_exam(user, 300, feedback="Keep practising Physics")

        _, feedback = ExamService(db).get_exam_detail_with_feedback(exam.id, user.id)
        assert feedback == "Keep practising Physics"

    def test_generated_feedback(self, db, make_user, add_exam):
        user = make_user()
        exam = add_exam(user, 360)

        _, feedback = ExamService(db).get_exam_detail_with_feedback(exam.id, user.id)
        assert feedback.startswith("Excellent")

    def test_retake_config(self, db, make_user, add_exam):
        user = make_user()
        exam = add_exam(user, 200, mode=ExamMode.JAMB_AI)

        config = ExamService(db).get_retake_config(exam.id, user.id)
        assert config == {"mode": ExamMode.JAMB_AI, "subjects": ["English", "Physics"]}


class TestAnalytics:
    """Dashboard aggregation"""

    def test_no_exams(self, db, make_user):
        user = make_user()
        assert AnalyticsService(db).get_user_analytics(user.id) == {
            "total_exams_written": 0,
            "exams_passed": 0,
            "exams_failed": 0,
            "performance_average": 0,
        }

    def test_average_over_passed_exams_only(self, db, make_user, add_exam):
        user = make_user()
        add_exam(user, 300)   # 75%
        add_exam(user, 250)   # 62.5%
        add_exam(user, 40)    # failed, ignored

        analytics = AnalyticsService(db).get_user_analytics(user.id)
        assert analytics["total_exams_written"] == 3
        assert analytics["exams_passed"] == 2
        assert analytics["exams_failed"] == 1
        # mean 68.75 rounds to 69
        assert analytics["performance_average"] == 69

    def test_half_rounds_up(self, db, make_user, add_exam):
        user = make_user()
        add_exam(user, 50, total=100)
        add_exam(user, 51, total=100)

        assert AnalyticsService(db).get_user_analytics(user.id)["performance_average"] == 51

    def test_other_users_not_counted(self, db, make_user, add_exam):
        user = make_user()
        other = make_user(email="other@example.com")
        add_exam(other, 300)

        assert AnalyticsService(db).get_user_analytics(user.id)["total_exams_written"] == 0
