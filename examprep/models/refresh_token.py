"""Server-side refresh token sessions."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from examprep.db.base import Base, utcnow


class RefreshToken(Base):
    """One row per live session. Only the SHA-256 digest of the token is stored."""

    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<RefreshToken(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"
