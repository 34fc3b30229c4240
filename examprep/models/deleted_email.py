"""Tombstone for deleted accounts."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String

from examprep.db.base import Base, utcnow


class DeletedEmail(Base):
    """
    Outlives the deleted user so the same email cannot claim a second free
    trial on re-registration. Rows are never deleted.
    """

    __tablename__ = "deleted_emails"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    has_used_free_trial = Column(Boolean, default=False, nullable=False)
    delete_reason = Column(String(500), nullable=True)
    deleted_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<DeletedEmail(email={self.email!r}, has_used_free_trial={self.has_used_free_trial})>"
