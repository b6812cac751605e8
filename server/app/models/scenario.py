from typing import Optional

from sqlalchemy import Boolean, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDMixin
from app.services.phases import PHASE_ORDER


class ScenarioPreset(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "scenario_presets"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phases: Mapped[list] = mapped_column(JSON, default=lambda: list(PHASE_ORDER), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
