"""Per-user display preferences."""
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Enum as SQLEnum

from examprep.db.base import Base, utcnow


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    DEFAULT_FONT_SIZE = 2

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    font_size = Column(Integer, default=DEFAULT_FONT_SIZE, nullable=False)  # 1-5
    theme = Column(
        SQLEnum(Theme, name="theme", values_callable=lambda obj: [e.value for e in obj]),
        default=Theme.AUTO,
        nullable=False,
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

    def __repr__(self) -> str:
        return f"<UserPreferences(user_id={self.user_id}, font_size={self.font_size}, theme={self.theme})>"
