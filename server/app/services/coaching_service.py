"""Chooses between the AI-backed path and the deterministic core.

The AI path is only tried in "ai" mode with a Gemini key configured. Any
failure there is logged and the deterministic result is returned instead,
flagged with ``used_fallback`` so the client can tell the user.
"""

import logging
from typing import Mapping, Optional, Sequence

from app.config import settings
from app.services.leak_diagnostic import build_leak_diagnostic
from app.services.roleplay_coach import CoachTurnResult, coach_reply
from app.services.transcript_evaluator import EvaluationResult, evaluate_transcript

logger = logging.getLogger(__name__)

MOCK_MODE = "mock"
AI_MODE = "ai"

# "openai" is what older clients send for the AI mode
_MODE_ALIASES = {"ai": AI_MODE, "openai": AI_MODE, "mock": MOCK_MODE}

NO_AI_ANSWER = (
    "AI not configured (showing matched notes). "
    "Ask again in AI mode once a Gemini API key is set."
)
AI_UNAVAILABLE_ANSWER = "AI is unavailable. Here are your matched notes instead."
NO_NOTES_ANSWER = "No notes matched your question. Ingest some notes from the Notes page first."


def resolve_mode(mode: Optional[str]) -> str:
    value = (mode or settings.default_coach_mode or MOCK_MODE).strip().lower()
    return _MODE_ALIASES.get(value, MOCK_MODE)


def get_ai_coach():
    """Build the AI coach, or None when no API key is configured."""
    if not settings.gemini_api_key:
        return None
    from app.services.ai_coach import AICoach
    from app.services.llm_client import LLMClient

    return AICoach(LLMClient(settings.gemini_api_key, model=settings.gemini_model))


async def get_coach_reply(
    mode: Optional[str],
    current_phase: Optional[str],
    phases: Sequence[str],
    playbooks_by_type: Mapping[str, Sequence[str]],
    user_message: str,
    recent_messages: Sequence[dict] = (),
    note_snippets: Sequence = (),
) -> tuple[CoachTurnResult, bool]:
    """Returns (result, used_fallback)."""
    ai_coach = get_ai_coach() if resolve_mode(mode) == AI_MODE else None
    if ai_coach is not None:
        try:
            result = await ai_coach.coach_reply(
                current_phase=current_phase,
                phases=phases,
                playbooks_by_type=playbooks_by_type,
                recent_messages=recent_messages,
                user_message=user_message,
                note_snippets=note_snippets,
            )
            return result, False
        except Exception as e:
            logger.error(f"AI coach reply failed, using mock coach: {e}")

    result = coach_reply(
        current_phase,
        phases,
        playbooks_by_type,
        user_message,
        note_snippets=note_snippets,
    )
    return result, ai_coach is not None


async def rate_transcript(mode: Optional[str], transcript: str) -> tuple[EvaluationResult, bool]:
    """Returns (result, used_fallback). Leaks are always computed locally.

    Unlike the coach, a rating asked for in AI mode is flagged as a fallback
    whenever the mock evaluator produced it, including when no key is set.
    """
    ai_requested = resolve_mode(mode) == AI_MODE
    ai_coach = get_ai_coach() if ai_requested else None
    if ai_coach is not None:
        try:
            data = await ai_coach.rate_transcript(transcript)
            leaks = build_leak_diagnostic(transcript)
            scores = data["scores"]
            return EvaluationResult(
                scores=scores,
                overall=round(sum(scores.values()) / len(scores)),
                summary=data["summary"],
                actions=data["actions"],
                practice_next=data["drill"],
                weaknesses=data["weaknesses"],
                strengths=data["strengths"],
                suggested_rewrite=data["suggested_rewrite"],
                drill=data["drill"],
                primary_leak=leaks.primary_leak,
                secondary_leak=leaks.secondary_leak,
                leak_explanation=leaks.leak_explanation,
                leak_evidence=leaks.leak_evidence,
            ), False
        except Exception as e:
            logger.error(f"AI transcript rating failed, using mock evaluator: {e}")

    return evaluate_transcript(transcript), ai_requested


async def answer_question(mode: Optional[str], question: str, chunks: Sequence) -> tuple[str, bool]:
    """Returns (answer, answered_by_ai)."""
    ai_coach = get_ai_coach() if resolve_mode(mode) == AI_MODE else None
    if ai_coach is not None:
        try:
            answer = await ai_coach.answer_question(question, chunks)
            return answer or "No answer generated.", True
        except Exception as e:
            logger.error(f"AI answer failed, returning matched notes: {e}")
            return AI_UNAVAILABLE_ANSWER, False

    return (NO_AI_ANSWER if chunks else NO_NOTES_ANSWER), False
