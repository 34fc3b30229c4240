"""Support tickets raised by users."""
import secrets
import string
import time
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, Enum as SQLEnum

from examprep.db.base import Base, utcnow

_BASE36 = string.digits + string.ascii_uppercase


class IssueType(str, Enum):
    TECHNICAL = "TECHNICAL"
    BILLING = "BILLING"
    ACCOUNT = "ACCOUNT"
    SUBSCRIPTION = "SUBSCRIPTION"
    FEEDBACK = "FEEDBACK"
    OTHER = "OTHER"


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_ticket_number() -> str:
    """``PRJ-<base36 ms timestamp>-<4 random base36 chars>``"""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"PRJ-{timestamp}-{suffix}"


class SupportTicket(Base):
    __tablename__ = "support_tickets"
    __table_args__ = (
        Index("ix_support_tickets_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ticket_number = Column(String(40), unique=True, nullable=False, index=True, default=generate_ticket_number)
    issue_type = Column(SQLEnum(IssueType, name="issuetype"), nullable=False)
    description = Column(Text, nullable=False)
    attachment_url = Column(String(500), nullable=True)
    status = Column(SQLEnum(TicketStatus, name="ticketstatus"), default=TicketStatus.OPEN, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

    def __repr__(self) -> str:
        return f"<SupportTicket(ticket_number={self.ticket_number!r}, status={self.status})>"
