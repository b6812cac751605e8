from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.session import MessageResponse


class CoachRequest(BaseModel):
    session_id: str = Field(min_length=1)
    content: str = Field(min_length=2)
    mode: Optional[str] = None


class NoteSource(BaseModel):
    source_title: str
    snippet: str
    score: Optional[int] = None


class CoachResponse(BaseModel):
    assistant_message: MessageResponse
    next_phase: Optional[str] = None
    suggested_next_user_message: str
    one_thing_to_fix: str
    drill: str
    phase_rationale: Optional[str] = None
    note_sources: list[NoteSource] = []
    used_fallback: bool = False
