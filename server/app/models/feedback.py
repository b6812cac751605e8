from typing import Optional

from sqlalchemy import ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin, UserOwnedMixin, UUIDMixin


class Feedback(Base, UUIDMixin, TimestampMixin, UserOwnedMixin):
    __tablename__ = "feedback"

    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("practice_sessions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    scores: Mapped[dict] = mapped_column(JSON, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    actions: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    practice_next: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Optional list fields are stored as NULL when empty
    weaknesses: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    strengths: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    suggested_rewrite: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    drill: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    primary_leak: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    secondary_leak: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    leak_explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    leak_evidence: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # Relationships
    session = relationship("PracticeSession", back_populates="feedback", lazy="selectin")
