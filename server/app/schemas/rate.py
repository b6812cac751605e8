from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.session import SessionResponse


class PhaseScores(BaseModel):
    opening: int
    discovery: int
    pitch: int
    objection: int
    close: int


class RateRequest(BaseModel):
    transcript: str = Field(min_length=1)
    scenario_title: Optional[str] = None
    mode: Optional[str] = None


class FeedbackResponse(BaseModel):
    id: str
    session_id: str
    scores: PhaseScores
    overall: int
    summary: str
    actions: list[str]
    practice_next: Optional[str]
    weaknesses: list[str]
    strengths: list[str]
    suggested_rewrite: Optional[str]
    drill: Optional[str]
    primary_leak: Optional[str]
    secondary_leak: Optional[str]
    leak_explanation: Optional[str]
    leak_evidence: list[str]
    created_at: datetime


class RateResponse(BaseModel):
    session: SessionResponse
    feedback: FeedbackResponse
    used_fallback: bool = False


class LeakCount(BaseModel):
    leak: str
    count: int


class WeaknessCount(BaseModel):
    weakness: str
    count: int


class RecentSession(BaseModel):
    session_id: str
    type: str
    scenario_title: Optional[str]
    created_at: datetime
    overall_score: int


class FeedbackSummaryResponse(BaseModel):
    feedbacks: list[FeedbackResponse]
    top_weaknesses: list[str]
    top_weaknesses_with_count: list[WeaknessCount]
    top_primary_leaks: list[LeakCount]
    top_secondary_leaks: list[LeakCount]
    average_overall_score: int
    last_five_sessions: list[RecentSession]
