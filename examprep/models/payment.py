"""Payment database model."""
from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, ForeignKey, Index, Enum as SQLEnum
from enum import Enum
from examprep.db.base import Base, utcnow
from examprep.models.subscription import PlanType


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    USSD = "USSD"


class Payment(Base):
    """Tracks every payment attempt made by users for subscription plans."""
    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subscription_id = Column(Integer, ForeignKey("subscriptions.id", ondelete="SET NULL"), nullable=True)

    # Transaction identifiers
    payment_reference = Column(String(100), unique=True, nullable=False, index=True)
    payment_gateway_reference = Column(String(255), nullable=True)

    # What was purchased
    plan_type = Column(SQLEnum(PlanType, name="plantype"), nullable=False)
    amount = Column(Float, nullable=False)
    payment_method = Column(SQLEnum(PaymentMethod, name="paymentmethod"), nullable=False)

    status = Column(
        SQLEnum(PaymentStatus, name="paymentstatus"),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )

    metadata_ = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return (
            f"<Payment(id={self.id}, user_id={self.user_id}, "
            f"reference={self.payment_reference}, status={self.status})>"
        )
