import logging
from dataclasses import asdict, dataclass, field
from typing import Optional

from app.services.leak_diagnostic import build_leak_diagnostic
from app.services.phases import PHASE_ORDER

logger = logging.getLogger(__name__)

OPENING_WORDS = ("hi", "hello", "thanks for", "good morning", "good afternoon", "hey")
DISCOVERY_WORDS = ("tell me", "what's", "how do", "why", "when", "which", "who", "where")
OBJECTION_WORDS = ("price", "expensive", "budget", "cost", "too much", "cheaper", "discount", "afford")
NEXT_STEP_WORDS = (
    "next step", "follow up", "schedule", "calendar",
    "send", "meeting", "call back", "let's do",
)

WEAK_BELOW = 60
STRONG_FROM = 75
TIP_BELOW = 70

_WEAKNESS_TIPS = {
    "discovery": "ask more questions",
    "close": "suggest a clear next step",
    "objection": "address concerns explicitly",
}

_PRACTICE_TIPS = {
    "discovery": "Ask 5 questions before pitching.",
    "close": "End every practice with 'So the next step is…'.",
}

_DRILLS = {
    "discovery": "Practice: Ask 5 discovery questions in your next call before mentioning your product.",
    "close": (
        "Practice: End your next 3 conversations with one concrete next step "
        "(e.g. 'Can we schedule a 15-min follow-up Tuesday?')."
    ),
    "objection": "Practice: When they mention price or concern, say 'I hear you' then reframe with one benefit.",
}

GENERIC_PRACTICE_NEXT = "Drill: Record yourself on a cold open and rate again."


@dataclass
class EvaluationResult:
    scores: dict[str, int]
    overall: int
    summary: str
    actions: list[str]
    practice_next: str
    weaknesses: list[str]
    strengths: list[str]
    suggested_rewrite: str
    drill: str
    primary_leak: Optional[str] = None
    secondary_leak: Optional[str] = None
    leak_explanation: Optional[str] = None
    leak_evidence: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _count_present(text: str, words: tuple[str, ...]) -> int:
    """Number of distinct keywords that appear in *text* at least once."""
    return sum(1 for w in words if w in text)


class TranscriptEvaluator:
    """Scores a pasted sales conversation with keyword heuristics."""

    def __init__(self, transcript: str):
        self.transcript = transcript.strip()
        self.normalized = self.transcript.lower()
        self.word_count = len(self.normalized.split())
        self.question_count = self.transcript.count("?")

    def score_phases(self) -> dict[str, int]:
        """Score the five phases 0-100. Every phase is always present."""
        opening = min(100, 35 + _count_present(self.normalized, OPENING_WORDS) * 10)
        discovery = min(
            100,
            40 + self.question_count * 4 + _count_present(self.normalized, DISCOVERY_WORDS) * 5,
        )
        pitch = min(100, 50 + min(20, self.word_count // 50))
        objection = min(100, 40 + _count_present(self.normalized, OBJECTION_WORDS) * 15)
        close = min(100, 30 + _count_present(self.normalized, NEXT_STEP_WORDS) * 12)

        raw = {
            "opening": opening,
            "discovery": discovery,
            "pitch": pitch,
            "objection": objection,
            "close": close,
        }
        return {k: max(0, min(100, int(round(v)))) for k, v in raw.items()}

    def evaluate(self) -> EvaluationResult:
        scores = self.score_phases()
        # Sum of five integers / 5 never lands on .5, so round() is exact here
        overall = round(sum(scores.values()) / len(scores))

        weak = [p for p in PHASE_ORDER if scores[p] < WEAK_BELOW]
        strong = [p for p in PHASE_ORDER if scores[p] >= STRONG_FROM]

        practice_next = self._practice_next(weak)
        leaks = build_leak_diagnostic(self.transcript)

        result = EvaluationResult(
            scores=scores,
            overall=overall,
            summary=self._summary(overall),
            actions=self._actions(scores),
            practice_next=practice_next,
            weaknesses=self._weaknesses(weak, overall),
            strengths=self._strengths(strong),
            suggested_rewrite=self._suggested_rewrite(scores),
            drill=self._drill(weak, practice_next),
            primary_leak=leaks.primary_leak,
            secondary_leak=leaks.secondary_leak,
            leak_explanation=leaks.leak_explanation,
            leak_evidence=leaks.leak_evidence,
        )
        logger.debug(
            f"Evaluated transcript: words={self.word_count}, "
            f"questions={self.question_count}, overall={overall}"
        )
        return result

    def _weaknesses(self, weak: list[str], overall: int) -> list[str]:
        weaknesses = [
            f"Need more in {p}: {_WEAKNESS_TIPS.get(p, 'develop this phase')}." for p in weak
        ]
        if not weaknesses and overall < 70:
            weaknesses.append("Overall flow could be tighter; try one clear next step per conversation.")
        return weaknesses

    def _strengths(self, strong: list[str]) -> list[str]:
        strengths = [f"{p.capitalize()} was strong." for p in strong]
        if not strengths:
            strengths.append("You covered multiple phases; focus on one or two to improve next.")
        return strengths

    def _actions(self, scores: dict[str, int]) -> list[str]:
        actions = []
        if scores["discovery"] < TIP_BELOW:
            actions.append("Add 2–3 open questions in discovery.")
        if scores["objection"] < TIP_BELOW:
            actions.append("Acknowledge price/objection and reframe with value.")
        if scores["close"] < TIP_BELOW:
            actions.append("End with one concrete next step (e.g. calendar link or follow-up date).")
        if self.word_count < 100:
            actions.append("Practice longer roleplays to build depth.")
        if not actions:
            actions.append("Keep structure; try varying your opening hook.")
        return actions

    @staticmethod
    def _summary(overall: int) -> str:
        if overall >= 75:
            return "Solid conversation with clear structure. Small tweaks will make it even stronger."
        if overall >= 60:
            return "Good base. Focus on the suggested improvements to score higher next time."
        return "Practice the drills below and re-run a similar conversation to see improvement."

    @staticmethod
    def _practice_next(weak: list[str]) -> str:
        if not weak:
            return GENERIC_PRACTICE_NEXT
        first = weak[0]
        tip = _PRACTICE_TIPS.get(first, "Roleplay this phase twice with a peer.")
        return f"Drill: {first} — {tip}"

    @staticmethod
    def _drill(weak: list[str], practice_next: str) -> str:
        if not weak:
            return practice_next
        first = weak[0]
        return _DRILLS.get(first, f"Practice: Focus on {first}—roleplay that phase twice.")

    @staticmethod
    def _suggested_rewrite(scores: dict[str, int]) -> str:
        if scores["close"] < TIP_BELOW:
            return "So the next step is [concrete action, e.g. a 15-min call next week]. Does that work?"
        if scores["discovery"] < TIP_BELOW:
            return "What would need to be true for this to become a priority for you?"
        if scores["objection"] < TIP_BELOW:
            return "I hear you. If we could show [specific outcome], would that change how you see it?"
        return "Great—what's one thing you'd want to see before making a decision?"


def evaluate_transcript(transcript: str) -> EvaluationResult:
    return TranscriptEvaluator(transcript).evaluate()
