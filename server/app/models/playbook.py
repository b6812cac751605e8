from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UserOwnedMixin, UUIDMixin
from app.services.playbooks import PlaybookType


class Playbook(Base, UUIDMixin, TimestampMixin, UserOwnedMixin):
    __tablename__ = "playbooks"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # Newline-separated bullets, parsed on demand
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    type: Mapped[str] = mapped_column(
        String(30),
        default=PlaybookType.OPENING_HOOKS.value,
        nullable=False,
    )
