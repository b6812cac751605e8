import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_user_id
from app.models.base import get_db
from app.models.feedback import Feedback
from app.models.message import Message, MessageRole
from app.models.practice_session import PracticeSession, SessionType
from app.schemas.rate import (
    FeedbackResponse,
    FeedbackSummaryResponse,
    PhaseScores,
    RateRequest,
    RateResponse,
)
from app.schemas.session import SessionResponse
from app.services.coaching_service import rate_transcript
from app.services.insights import overall_from_scores, summarize_feedback

logger = logging.getLogger(__name__)

router = APIRouter()

SUMMARY_WINDOW = 20


def _or_none(items: list) -> list | None:
    """Optional list columns are stored as NULL rather than []."""
    return items if items else None


def feedback_response(feedback: Feedback) -> FeedbackResponse:
    return FeedbackResponse(
        id=feedback.id,
        session_id=feedback.session_id,
        scores=PhaseScores(**feedback.scores),
        overall=overall_from_scores(feedback.scores),
        summary=feedback.summary,
        actions=feedback.actions or [],
        practice_next=feedback.practice_next,
        weaknesses=feedback.weaknesses or [],
        strengths=feedback.strengths or [],
        suggested_rewrite=feedback.suggested_rewrite,
        drill=feedback.drill,
        primary_leak=feedback.primary_leak,
        secondary_leak=feedback.secondary_leak,
        leak_explanation=feedback.leak_explanation,
        leak_evidence=feedback.leak_evidence or [],
        created_at=feedback.created_at,
    )


@router.post("/rate", response_model=RateResponse)
async def rate_conversation(
    payload: RateRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    transcript = payload.transcript.strip()
    if not transcript:
        raise HTTPException(status_code=400, detail="transcript is required")

    session = PracticeSession(
        user_id=user_id,
        type=SessionType.RATE.value,
        scenario_title=(payload.scenario_title or "").strip() or None,
    )
    db.add(session)
    await db.flush()
    db.add(Message(session_id=session.id, role=MessageRole.USER.value, content=transcript))

    result, used_fallback = await rate_transcript(payload.mode, transcript)

    feedback = Feedback(
        user_id=user_id,
        session_id=session.id,
        scores=result.scores,
        summary=result.summary,
        actions=result.actions,
        practice_next=result.practice_next,
        weaknesses=_or_none(result.weaknesses),
        strengths=_or_none(result.strengths),
        suggested_rewrite=result.suggested_rewrite or None,
        drill=result.drill or None,
        primary_leak=result.primary_leak,
        secondary_leak=result.secondary_leak,
        leak_explanation=result.leak_explanation,
        leak_evidence=_or_none(result.leak_evidence),
    )
    db.add(feedback)
    await db.flush()
    await db.refresh(session)
    await db.refresh(feedback)

    logger.info(
        f"Rated transcript for session {session.id}: overall={result.overall}, "
        f"primary_leak={result.primary_leak}, fallback={used_fallback}"
    )
    return RateResponse(
        session=SessionResponse.model_validate(session),
        feedback=feedback_response(feedback),
        used_fallback=used_fallback,
    )


@router.get("/feedback/summary", response_model=FeedbackSummaryResponse)
async def feedback_summary(
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Feedback)
        .where(Feedback.user_id == user_id)
        .order_by(Feedback.created_at.desc())
        .limit(SUMMARY_WINDOW)
    )
    feedbacks = result.scalars().all()
    return FeedbackSummaryResponse(
        feedbacks=[feedback_response(f) for f in feedbacks],
        **summarize_feedback(feedbacks),
    )
