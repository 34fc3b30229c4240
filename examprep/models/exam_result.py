"""Exam results written by the exam-taking flow; read here for history and analytics."""
from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, JSON, Text, Enum as SQLEnum

from examprep.db.base import Base, utcnow
from examprep.models.subscription import ExamMode


class ExamResult(Base):
    __tablename__ = "exam_results"
    __table_args__ = (
        Index("ix_exam_results_user_mode_created", "user_id", "mode", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mode = Column(SQLEnum(ExamMode, name="exammode"), nullable=False, index=True)
    score = Column(Float, nullable=False)
    total_obtainable = Column(Float, nullable=False)
    is_passed = Column(Boolean, nullable=False, index=True)

    # [{"subject": str, "score": number, "total": number}]
    subjects = Column(JSON, nullable=False, default=list)
    # [{"question_id", "selected_option", "correct_option", "is_correct"}]
    answers = Column(JSON, nullable=False, default=list)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    duration_seconds = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

    def __repr__(self):
        return f"<ExamResult(id={self.id}, user_id={self.user_id}, mode={self.mode}, score={self.score})>"
