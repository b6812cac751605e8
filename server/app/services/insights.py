"""Aggregate a user's recent feedback into progress insights."""

import math
from collections import Counter
from typing import Sequence

from app.services.phases import PHASE_ORDER

RECENT_SESSIONS = 5
TOP_N = 10


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def overall_from_scores(scores) -> int:
    """Mean of the known phase scores present, 0 when none are usable."""
    if not isinstance(scores, dict):
        return 0
    values = [
        scores[p] for p in PHASE_ORDER
        if isinstance(scores.get(p), (int, float)) and not isinstance(scores.get(p), bool)
    ]
    if not values:
        return 0
    return _round_half_up(sum(values) / len(values))


def _top(counter: Counter, key: str) -> list[dict]:
    # most_common keeps first-seen order for equal counts
    return [{key: name, "count": count} for name, count in counter.most_common(TOP_N)]


def summarize_feedback(feedbacks: Sequence) -> dict:
    """Build the insights payload from Feedback rows, most recent first.

    Rows need ``scores``, ``weaknesses``, ``primary_leak``,
    ``secondary_leak``, ``session_id`` and a loaded ``session``.
    """
    overall_scores = []
    weakness_counts: Counter = Counter()
    primary_counts: Counter = Counter()
    secondary_counts: Counter = Counter()
    last_sessions = []

    for i, f in enumerate(feedbacks):
        overall = overall_from_scores(f.scores)
        overall_scores.append(overall)

        if i < RECENT_SESSIONS:
            last_sessions.append({
                "session_id": f.session_id,
                "type": f.session.type,
                "scenario_title": f.session.scenario_title,
                "created_at": f.session.created_at,
                "overall_score": overall,
            })

        for w in f.weaknesses or []:
            text = str(w).strip()
            if text:
                weakness_counts[text] += 1
        if f.primary_leak and f.primary_leak.strip():
            primary_counts[f.primary_leak.strip()] += 1
        if f.secondary_leak and f.secondary_leak.strip():
            secondary_counts[f.secondary_leak.strip()] += 1

    top_weaknesses = _top(weakness_counts, "weakness")
    average = _round_half_up(sum(overall_scores) / len(overall_scores)) if overall_scores else 0

    return {
        "top_weaknesses": [w["weakness"] for w in top_weaknesses],
        "top_weaknesses_with_count": top_weaknesses,
        "top_primary_leaks": _top(primary_counts, "leak"),
        "top_secondary_leaks": _top(secondary_counts, "leak"),
        "average_overall_score": average,
        "last_five_sessions": last_sessions,
    }
