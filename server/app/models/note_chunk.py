from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UserOwnedMixin, UUIDMixin


class NoteChunk(Base, UUIDMixin, TimestampMixin, UserOwnedMixin):
    __tablename__ = "note_chunks"

    source_title: Mapped[str] = mapped_column(String(255), nullable=False)
    # Position of the chunk within its ingested text
    chunk_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
