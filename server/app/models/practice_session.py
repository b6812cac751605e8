import enum
from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UserOwnedMixin, UUIDMixin


class SessionType(str, enum.Enum):
    ROLEPLAY = "roleplay"
    RATE = "rate"


class PracticeSession(Base, UUIDMixin, TimestampMixin, UserOwnedMixin):
    __tablename__ = "practice_sessions"

    type: Mapped[str] = mapped_column(
        String(20),
        default=SessionType.ROLEPLAY.value,
        nullable=False,
    )
    scenario_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    scenario_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Current roleplay phase; NULL until the first coach turn
    phase: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Relationships
    messages = relationship(
        "Message",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )
    feedback = relationship(
        "Feedback",
        back_populates="session",
        uselist=False,
        cascade="all, delete-orphan",
    )
