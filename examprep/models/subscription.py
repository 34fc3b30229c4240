"""Subscription model and plan/exam-mode enums."""
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, JSON, String, Enum as SQLEnum

from examprep.db.base import Base, utcnow


class PlanType(str, Enum):
    FREE = "FREE"
    STARTER = "STARTER"
    STANDARD = "STANDARD"
    ANNUAL = "ANNUAL"


class ExamMode(str, Enum):
    PURE_JAMB = "PURE_JAMB"
    JAMB_AI = "JAMB_AI"
    SINGLE_SUBJECT = "SINGLE_SUBJECT"


class Subscription(Base):
    """
    A plan period owned by a user.

    At most one row per user is *current* (``is_active`` and ``end_date`` in
    the future); activation deactivates all earlier active rows first.
    """
    __tablename__ = "subscriptions"
    __table_args__ = (
        Index("ix_subscriptions_user_active", "user_id", "is_active"),
        Index("ix_subscriptions_end_active", "end_date", "is_active"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_type = Column(SQLEnum(PlanType, name="plantype"), nullable=False)
    amount = Column(Float, nullable=False, default=0)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    auto_renew = Column(Boolean, default=False, nullable=False)

    # Exam modes whose single free trial is spent (FREE plan only)
    free_trials_used = Column(JSON, nullable=False, default=list)

    payment_reference = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

    def __repr__(self):
        return (
            f"<Subscription(id={self.id}, user_id={self.user_id}, plan={self.plan_type}, "
            f"active={self.is_active}, end={self.end_date})>"
        )
