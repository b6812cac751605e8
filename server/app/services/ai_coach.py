import json
import logging
from typing import Mapping, Optional, Sequence

from app.services.llm_client import LLMClient
from app.services.phases import PHASE_ORDER
from app.services.roleplay_coach import CoachTurnResult

logger = logging.getLogger(__name__)

COACH_SYSTEM_PROMPT = """You are a sales coach. The user is doing a roleplay: they play the seller, you play the prospect.
Stay in character as a realistic prospect in your reply, then step out of character for the coaching fields.

Respond ONLY with valid JSON matching this exact schema:
{
  "assistantReply": "string (the prospect's next line, 1-3 sentences)",
  "suggestedNextUserMessage": "string (one thing the seller could say next)",
  "oneThingToFix": "string (single most important improvement)",
  "drill": "string (one concrete practice drill)",
  "nextPhase": "string or null (one of the phases listed, or null to stay)",
  "phaseRationale": "string (why the conversation is in this phase)"
}"""

RATE_SYSTEM_PROMPT = """You are a sales coach. Evaluate the sales conversation transcript you are given.

Respond ONLY with valid JSON with these exact keys:
- scores (object): five keys exactly: opening, discovery, pitch, objection, close. Each value a number 0-100.
- summary (string): 1-2 sentences overall assessment.
- actions (array of strings): 2-4 specific improvements (e.g. "Add 2 open questions in discovery.").
- weaknesses (array of strings): 1-3 top weaknesses (short phrases).
- strengths (array of strings): 1-3 strengths (short phrases).
- suggestedRewrite (string): one example of a better next message the seller could have said.
- drill (string): one concrete practice drill based on the weakest area."""

ASK_SYSTEM_PROMPT = """You are a sales coach. Answer the user's question using ONLY the following notes.
If the notes don't contain enough information, say so briefly. Do not make up details.

Notes:
{notes}"""

MAX_TRANSCRIPT_CHARS = 6000
DEFAULT_PHASE_SCORE = 50


class AIResponseError(ValueError):
    """The model answered, but not with the JSON we asked for."""


def _parse_json_response(response_text: str) -> dict:
    text = response_text.strip()
    if text.startswith("```"):
        # Gemini sometimes wraps JSON in a markdown code block
        lines = text.split("\n")
        text = "\n".join(
            line for line in lines
            if not line.strip().startswith("```")
        )
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Raw response: {response_text[:500]}")
        raise AIResponseError(f"Response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AIResponseError("Response JSON is not an object")
    return data


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


def normalize_scores(raw) -> dict[str, int]:
    """Clamp model scores into 0-100 ints; missing or bad phases get 50."""
    raw = raw if isinstance(raw, dict) else {}
    scores = {}
    for phase in PHASE_ORDER:
        value = raw.get(phase)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value == value:
            scores[phase] = int(round(max(0, min(100, value))))
        else:
            scores[phase] = DEFAULT_PHASE_SCORE
    return scores


def format_notes(chunks: Sequence) -> str:
    return "\n\n---\n\n".join(f"[{c.source_title}]\n{c.content}" for c in chunks)


class AICoach:
    """LLM-backed variants of the coach, rater and notes Q&A.

    Every method raises on failure; callers fall back to the deterministic
    implementations.
    """

    def __init__(self, llm_client: LLMClient):
        self.llm = llm_client

    async def coach_reply(
        self,
        current_phase: Optional[str],
        phases: Sequence[str],
        playbooks_by_type: Mapping[str, Sequence[str]],
        recent_messages: Sequence[dict],
        user_message: str,
        note_snippets: Sequence = (),
    ) -> CoachTurnResult:
        context = self._build_coach_context(
            current_phase, phases, playbooks_by_type, recent_messages, user_message, note_snippets
        )
        response_text = await self.llm.generate(
            system_prompt=COACH_SYSTEM_PROMPT,
            contents=context,
            max_tokens=600,
            temperature=0.7,
            json_output=True,
        )
        data = _parse_json_response(response_text)

        reply = str(data.get("assistantReply") or "").strip()
        if not reply:
            raise AIResponseError("Response has no assistantReply")

        next_phase = data.get("nextPhase")
        if next_phase not in phases:
            next_phase = None
        rationale = data.get("phaseRationale")

        return CoachTurnResult(
            assistant_reply=reply,
            suggested_next_user_message=str(data.get("suggestedNextUserMessage") or "").strip(),
            one_thing_to_fix=str(data.get("oneThingToFix") or "").strip(),
            drill=str(data.get("drill") or "").strip(),
            next_phase=next_phase,
            phase_rationale=str(rationale).strip() if rationale else None,
        )

    async def rate_transcript(self, transcript: str) -> dict:
        response_text = await self.llm.generate(
            system_prompt=RATE_SYSTEM_PROMPT,
            contents=f"Transcript:\n---\n{transcript[:MAX_TRANSCRIPT_CHARS]}\n---",
            max_tokens=800,
            temperature=0.4,
            json_output=True,
        )
        data = _parse_json_response(response_text)
        return {
            "scores": normalize_scores(data.get("scores")),
            "summary": str(data.get("summary") or "").strip() or "Review the conversation.",
            "actions": _string_list(data.get("actions")),
            "weaknesses": _string_list(data.get("weaknesses")),
            "strengths": _string_list(data.get("strengths")),
            "suggested_rewrite": str(data.get("suggestedRewrite") or "").strip(),
            "drill": str(data.get("drill") or "").strip(),
        }

    async def answer_question(self, question: str, chunks: Sequence) -> str:
        notes = format_notes(chunks) if chunks else "(No relevant notes found.)"
        answer = await self.llm.generate(
            system_prompt=ASK_SYSTEM_PROMPT.format(notes=notes),
            contents=question,
            max_tokens=500,
            temperature=0.3,
        )
        return answer.strip()

    def _build_coach_context(
        self,
        current_phase: Optional[str],
        phases: Sequence[str],
        playbooks_by_type: Mapping[str, Sequence[str]],
        recent_messages: Sequence[dict],
        user_message: str,
        note_snippets: Sequence,
    ) -> str:
        """Assemble the roleplay state into a prompt body."""
        parts = []

        phase = current_phase or (phases[0] if phases else "opening")
        parts.append(f"Current phase: {phase}")
        parts.append(f"Phases in order: {', '.join(phases)}")
        parts.append("")

        bullets = [
            f"- {p_type}: {' | '.join(list(items)[:5])}"
            for p_type, items in playbooks_by_type.items()
            if items
        ]
        if bullets:
            parts.append("## Playbook bullets (use where relevant)")
            parts.extend(bullets)
            parts.append("")

        if note_snippets:
            parts.append("## Relevant notes (the user's own knowledge; prefer these over generic advice)")
            parts.append(format_notes(note_snippets))
            parts.append("")

        parts.append("## Recent conversation")
        convo = [f"{m.get('role')}: {m.get('content')}" for m in list(recent_messages)[-6:]]
        parts.extend(convo or ["(none yet)"])
        parts.append("")

        parts.append(f"Latest seller message: {user_message}")
        return "\n".join(parts)
