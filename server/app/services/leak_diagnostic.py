"""Frame / Leverage / Precision leak diagnostic for a pasted transcript.

Each category gets a small integer severity plus human-readable evidence.
The evidence strings embed the measured values so a reviewer can see why a
leak was flagged.
"""

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


class LeakCategory(str, enum.Enum):
    FRAME = "Frame"
    LEVERAGE = "Leverage"
    PRECISION = "Precision"


SOFT_PHRASES = ("maybe", "just", "i think", "sort of", "kind of")

NEXT_STEP_PHRASES = (
    "next step", "follow up", "schedule", "calendar",
    "send", "meeting", "call back", "let's do",
)

TIME_BOUND_PHRASES = (
    "next week", "tuesday", "wednesday", "thursday", "friday",
    "monday", "15 min", "tomorrow", "this week", "next month",
)

MONOLOGUE_WORDS = 120

_SELLER_PREFIX = re.compile(r"^(seller|salesperson|sales rep|rep|you|s):\s*", re.IGNORECASE)
# The other side of the call; any other "Word:" line is part of the seller turn
_PROSPECT_PREFIX = re.compile(
    r"^(prospect|buyer|customer|client|lead|them|p|b|c):\s*", re.IGNORECASE
)

_EXPLANATIONS = {
    LeakCategory.FRAME: (
        "Frame leak suggests authority or confidence may be softening—long "
        "monologues or hedging language reduce presence."
    ),
    LeakCategory.LEVERAGE: (
        "Leverage leak indicates unclear commitment—without next steps or "
        "time-bound language, the prospect has no clear path forward."
    ),
    LeakCategory.PRECISION: (
        "Precision leak points to insufficient discovery—too few questions "
        "limit understanding of the prospect's needs and priorities."
    ),
}

NO_LEAK_EXPLANATION = (
    "No major Frame, Leverage, or Precision leaks detected. "
    "Conversation shows solid structure."
)


@dataclass
class LeakSignal:
    category: LeakCategory
    score: int = 0
    evidence: list[str] = field(default_factory=list)


@dataclass
class LeakDiagnostic:
    primary_leak: Optional[str]
    secondary_leak: Optional[str]
    leak_explanation: str
    leak_evidence: list[str]


def count_words(text: str) -> int:
    return len(text.split())


def extract_seller_blocks(transcript: str) -> list[str]:
    """Group seller turns into blocks of text.

    A block starts at a line with a seller prefix ("Seller:", "Rep:", "S:" ...)
    and absorbs continuation lines until the next seller or prospect label.
    Lines like "Here is the plan:" stay in the block. With no seller prefixes
    at all the whole transcript is one block.
    """
    lines = [line.strip() for line in transcript.split("\n")]
    lines = [line for line in lines if line]

    blocks: list[str] = []
    current: list[str] = []
    for line in lines:
        if _SELLER_PREFIX.match(line):
            if current:
                blocks.append(" ".join(current))
                current = []
            current.append(_SELLER_PREFIX.sub("", line, count=1).strip())
        elif _PROSPECT_PREFIX.match(line):
            if current:
                blocks.append(" ".join(current))
                current = []
        elif current:
            current.append(line)
    if current:
        blocks.append(" ".join(current))

    if not blocks and transcript.strip():
        return [transcript.strip()]
    return blocks


def compute_leak_signals(transcript: str) -> dict[LeakCategory, LeakSignal]:
    text = transcript.strip()
    normalized = text.lower()
    word_count = count_words(text)
    question_count = text.count("?")
    question_density = (question_count / word_count) * 100 if word_count > 0 else 0.0

    soft_count = sum(normalized.count(p) for p in SOFT_PHRASES)
    max_block_words = max((count_words(b) for b in extract_seller_blocks(text)), default=0)

    frame = LeakSignal(LeakCategory.FRAME)
    if max_block_words > MONOLOGUE_WORDS:
        frame.score += 2
        frame.evidence.append(
            f"Seller block of {max_block_words} words (over {MONOLOGUE_WORDS}-word threshold)"
        )
    if soft_count >= 2:
        frame.score += 1 + min(2, soft_count - 2)
        frame.evidence.append(
            f"{soft_count} soft-language phrases detected (maybe, just, I think, sort of, kind of)"
        )

    leverage = LeakSignal(LeakCategory.LEVERAGE)
    if not any(p in normalized for p in NEXT_STEP_PHRASES):
        leverage.score += 2
        leverage.evidence.append("No explicit next-step phrases found")
    if not any(p in normalized for p in TIME_BOUND_PHRASES):
        leverage.score += 1
        leverage.evidence.append("No time-bound language (e.g. next week, 15 min) found")

    precision = LeakSignal(LeakCategory.PRECISION)
    if word_count < 150:
        threshold = 1
    elif word_count < 400:
        threshold = 2
    else:
        threshold = 3
    if question_count < threshold:
        precision.score += 2
        precision.evidence.append(
            f"Only {question_count} question(s) in {word_count} words (threshold: {threshold})"
        )
    if question_density < 0.5 and word_count > 100:
        precision.score += 1
        precision.evidence.append(f"Low question density: {question_density:.1f} per 100 words")

    return {
        LeakCategory.FRAME: frame,
        LeakCategory.LEVERAGE: leverage,
        LeakCategory.PRECISION: precision,
    }


def build_leak_diagnostic(transcript: str) -> LeakDiagnostic:
    # Nothing said, nothing leaked
    if not transcript.strip():
        ranked = []
    else:
        signals = compute_leak_signals(transcript)
        # sorted() is stable, so equal scores keep Frame, Leverage, Precision order
        ranked = sorted(
            (s for s in signals.values() if s.score > 0),
            key=lambda s: s.score,
            reverse=True,
        )
    if not ranked:
        return LeakDiagnostic(
            primary_leak=None,
            secondary_leak=None,
            leak_explanation=NO_LEAK_EXPLANATION,
            leak_evidence=[],
        )

    primary = ranked[0]
    secondary = ranked[1] if len(ranked) > 1 else None

    explanations = [_EXPLANATIONS[primary.category]]
    evidence = list(primary.evidence)
    if secondary is not None:
        explanations.append(
            f"{secondary.category.value} also shows minor signals worth addressing in future conversations."
        )
        evidence.extend(secondary.evidence)

    logger.debug(
        f"Leak diagnostic: primary={primary.category.value} ({primary.score}), "
        f"secondary={secondary.category.value if secondary else None}"
    )
    return LeakDiagnostic(
        primary_leak=primary.category.value,
        secondary_leak=secondary.category.value if secondary else None,
        leak_explanation=" ".join(explanations),
        leak_evidence=evidence,
    )
