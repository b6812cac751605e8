"""Deterministic roleplay coach (mock mode).

Plays the prospect for one turn, weaving in the user's own playbook bullets
and the best matching note, and hands back a single coaching tip for the
current phase. Output depends only on the arguments and the template tables
below, so identical turns always get identical replies.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from app.services.phases import PHASE_ORDER
from app.services.playbooks import PlaybookType

logger = logging.getLogger(__name__)

PHASE_TO_PLAYBOOK_TYPE = MappingProxyType({
    "opening": PlaybookType.OPENING_HOOKS,
    "discovery": PlaybookType.DISCOVERY_QUESTIONS,
    "pitch": PlaybookType.OBJECTION_RESPONSES,
    "objection": PlaybookType.OBJECTION_RESPONSES,
    "close": PlaybookType.CLOSING_NEXT_STEPS,
})

PROSPECT_REPLIES = MappingProxyType({
    "opening": "Hi, thanks for reaching out. What's this call about?",
    "discovery": (
        "We're looking to improve follow-ups. Our main pain is losing leads after the demo. "
        "What do you typically see?"
    ),
    "pitch": (
        "That sounds relevant. Can you walk me through how your solution would help? "
        "We're also a bit concerned about price."
    ),
    "objection": (
        "I hear you. Our budget is tight this quarter—what would it take to get something "
        "we could start with?"
    ),
    "close": "Okay, I'm open to trying it. What's the next step on your side?",
})

SUGGESTED_NEXT = MappingProxyType({
    "opening": "Ask what their biggest challenge is right now.",
    "discovery": "Ask: 'What would need to be true for this to become a priority?'",
    "pitch": "Tie one feature to the pain they shared, then ask if that would help.",
    "objection": "Acknowledge the concern, then reframe: 'If we could show X, would that change things?'",
    "close": "Propose one concrete next step: 'Can we schedule a 15-min follow-up next Tuesday?'",
})

ONE_THING_TO_FIX = MappingProxyType({
    "opening": "Try leading with one clear value prop before asking a question.",
    "discovery": "Ask one more open question before moving to the pitch.",
    "pitch": "Tie your next sentence directly to something they said.",
    "objection": "Acknowledge their words first ('I hear you') before reframing.",
    "close": "Name the exact next step instead of leaving it vague.",
})

DRILLS = MappingProxyType({
    "opening": "Practice opening with: state your one-sentence value prop, then ask one open question.",
    "discovery": "Drill: Ask 3 discovery questions in a row without pitching. Then rate yourself.",
    "pitch": "Roleplay: After they state a need, reply with only one feature tied to that need.",
    "objection": "Drill: Say 'I hear you' + repeat their concern, then one reframe. Record and replay.",
    "close": "Practice: End your next 3 roleplays with 'So the next step is [concrete action].'",
})

PHASE_RATIONALE = MappingProxyType({
    "opening": "We're in the opening; prospect is sizing you up.",
    "discovery": "Discovery phase; they're sharing context.",
    "pitch": "Pitch phase; time to tie solution to needs.",
    "objection": "They raised an objection; acknowledge then reframe.",
    "close": "Closing; lock in a clear next step.",
})

NOTE_SNIPPET_CHARS = 80
SUGGESTION_CHARS = 120


@dataclass(frozen=True)
class CoachTemplates:
    """Per-phase text tables with the fallbacks used for unknown phases."""

    playbook_types: Mapping[str, PlaybookType] = field(default_factory=lambda: PHASE_TO_PLAYBOOK_TYPE)
    prospect_replies: Mapping[str, str] = field(default_factory=lambda: PROSPECT_REPLIES)
    suggested_next: Mapping[str, str] = field(default_factory=lambda: SUGGESTED_NEXT)
    one_thing_to_fix: Mapping[str, str] = field(default_factory=lambda: ONE_THING_TO_FIX)
    drills: Mapping[str, str] = field(default_factory=lambda: DRILLS)
    phase_rationale: Mapping[str, str] = field(default_factory=lambda: PHASE_RATIONALE)
    fallback_reply: str = "I'm following along. Tell me more."
    fallback_suggestion: str = "Ask one clear follow-up question."
    fallback_fix: str = "Keep the conversation moving toward a clear next step."
    fallback_drill: str = "Record yourself and rate the conversation."


DEFAULT_TEMPLATES = CoachTemplates()


@dataclass
class NoteSnippet:
    source_title: str
    content: str
    score: int


@dataclass
class CoachTurnResult:
    assistant_reply: str
    suggested_next_user_message: str
    one_thing_to_fix: str
    drill: str
    next_phase: Optional[str] = None
    phase_rationale: Optional[str] = None
    selected_bullets: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def parse_phases(raw: str | Sequence[str] | None) -> list[str]:
    """Phase sequence of a scenario preset, default order when unset or invalid."""
    if not raw:
        return list(PHASE_ORDER)
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid phases JSON, using defaults: {raw[:100]}")
            return list(PHASE_ORDER)
    if not isinstance(raw, (list, tuple)) or len(raw) == 0:
        return list(PHASE_ORDER)
    return [str(p) for p in raw]


def get_next_phase(current: Optional[str], phases: Sequence[str]) -> Optional[str]:
    if not current:
        return phases[0] if phases else None
    if current not in phases:
        return None
    i = list(phases).index(current)
    if i >= len(phases) - 1:
        return None
    return phases[i + 1]


def pick_bullets(bullets: Sequence[str], count: int, seed: int) -> list[str]:
    """Pick up to two bullets by seed; the second is skipped if it collides."""
    if not bullets:
        return []
    idx = seed % len(bullets)
    picked = [bullets[idx]]
    if count >= 2 and len(bullets) > 1:
        idx2 = (seed + 1) % len(bullets)
        if idx2 != idx:
            picked.append(bullets[idx2])
    return picked


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ("…" if len(text) > limit else "")


def _notes_suffix(note_snippets: Optional[Sequence[NoteSnippet]]) -> str:
    if not note_snippets:
        return ""
    relevant = [n for n in note_snippets if n.score > 0]
    if not relevant:
        return ""
    top = relevant[0]
    text = top.content[:NOTE_SNIPPET_CHARS].strip()
    if len(top.content) > NOTE_SNIPPET_CHARS:
        text += "…"
    return f" [From your notes: {text}]"


def coach_reply(
    current_phase: Optional[str],
    phases: Sequence[str],
    playbooks_by_type: Mapping[str, Sequence[str]],
    user_message: str,
    note_snippets: Optional[Sequence[NoteSnippet]] = None,
    templates: CoachTemplates = DEFAULT_TEMPLATES,
) -> CoachTurnResult:
    """Produce the prospect's next line and coaching for one roleplay turn.

    *note_snippets* must already be ranked best first; only the first one
    with a positive score is quoted.
    """
    phases = list(phases)
    if current_phase and current_phase in phases:
        phase = current_phase
    else:
        phase = phases[0] if phases else "opening"
    next_phase = get_next_phase(phase, phases)

    playbook_type = templates.playbook_types.get(phase, PlaybookType.OPENING_HOOKS)
    bullets = list(playbooks_by_type.get(playbook_type.value, []) or [])
    seed = len(user_message) + len(current_phase or "")
    selected = pick_bullets(bullets, 2, seed)

    reply = templates.prospect_replies.get(phase, templates.fallback_reply)
    if selected:
        reply += f" [Your playbook: {' | '.join(selected)}]"
    reply += _notes_suffix(note_snippets)

    if phase == "discovery" and selected:
        suggestion = _truncate(selected[0], SUGGESTION_CHARS)
    else:
        suggestion = templates.suggested_next.get(phase, templates.fallback_suggestion)

    return CoachTurnResult(
        assistant_reply=reply,
        suggested_next_user_message=suggestion,
        one_thing_to_fix=templates.one_thing_to_fix.get(phase, templates.fallback_fix),
        drill=templates.drills.get(phase, templates.fallback_drill),
        next_phase=next_phase,
        phase_rationale=templates.phase_rationale.get(phase),
        selected_bullets=selected,
    )
