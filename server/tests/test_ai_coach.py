"""AICoach against a stub LLM client; no network calls."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from app.services.ai_coach import AICoach, AIResponseError, normalize_scores
from app.services.phases import PHASE_ORDER


class StubLLM:
    def __init__(self, response: str):
        self.response = response
        self.calls = []

    async def generate(self, system_prompt, contents, max_tokens=800, temperature=0.4, json_output=False):
        self.calls.append({
            "system_prompt": system_prompt,
            "contents": contents,
            "json_output": json_output,
        })
        return self.response


def _coach_reply(coach, **overrides):
    kwargs = dict(
        current_phase=None,
        phases=list(PHASE_ORDER),
        playbooks_by_type={"opening_hooks": ["Hook A"], "discovery_questions": []},
        recent_messages=[],
        user_message="Hi, I'm calling about follow-ups",
        note_snippets=[],
    )
    kwargs.update(overrides)
    return asyncio.run(coach.coach_reply(**kwargs))


def test_coach_reply_parses_fenced_json():
    payload = {
        "assistantReply": "Sure, what's this about?",
        "suggestedNextUserMessage": "Ask about their pipeline.",
        "oneThingToFix": "Lead with value.",
        "drill": "Open with one sentence.",
        "nextPhase": "discovery",
        "phaseRationale": "Prospect is open.",
    }
    llm = StubLLM("```json\n" + json.dumps(payload) + "\n```")
    result = _coach_reply(AICoach(llm))

    assert result.assistant_reply == "Sure, what's this about?"
    assert result.next_phase == "discovery"
    assert result.phase_rationale == "Prospect is open."
    assert llm.calls[0]["json_output"] is True

    context = llm.calls[0]["contents"]
    assert "Current phase: opening" in context
    assert "- opening_hooks: Hook A" in context
    assert "discovery_questions" not in context
    assert "(none yet)" in context


def test_unknown_next_phase_is_dropped():
    llm = StubLLM(json.dumps({"assistantReply": "Okay.", "nextPhase": "negotiation"}))
    result = _coach_reply(AICoach(llm))

    assert result.next_phase is None
    assert result.phase_rationale is None


def test_notes_and_history_go_into_context():
    llm = StubLLM(json.dumps({"assistantReply": "Okay."}))
    notes = [SimpleNamespace(source_title="Pricing", content="Anchor on value")]
    history = [{"role": "user", "content": f"m{i}"} for i in range(8)]
    _coach_reply(AICoach(llm), note_snippets=notes, recent_messages=history)

    context = llm.calls[0]["contents"]
    assert "[Pricing]\nAnchor on value" in context
    # only the last six messages are sent
    assert "user: m1" not in context
    assert "user: m2" in context
    assert "user: m7" in context


@pytest.mark.parametrize("response", ["not json at all", "[1, 2, 3]", json.dumps({"drill": "x"})])
def test_bad_coach_responses_raise(response):
    with pytest.raises(AIResponseError):
        _coach_reply(AICoach(StubLLM(response)))


def test_rate_transcript_normalizes_output():
    llm = StubLLM(json.dumps({
        "scores": {"opening": 120, "discovery": -5, "pitch": "high", "objection": 66.6},
        "summary": "Decent call.",
        "actions": ["Ask more", 3],
        "weaknesses": "not a list",
        "strengths": ["Warm opening"],
        "suggestedRewrite": "What's driving this now?",
        "drill": "Ask five questions.",
    }))
    data = asyncio.run(AICoach(llm).rate_transcript("Seller: hello"))

    assert data["scores"] == {"opening": 100, "discovery": 0, "pitch": 50, "objection": 67, "close": 50}
    assert data["actions"] == ["Ask more", "3"]
    assert data["weaknesses"] == []
    assert data["suggested_rewrite"] == "What's driving this now?"
    assert "Seller: hello" in llm.calls[0]["contents"]


def test_normalize_scores_defaults():
    assert normalize_scores(None) == {p: 50 for p in PHASE_ORDER}
    assert normalize_scores({"opening": True})["opening"] == 50


def test_answer_question_uses_notes():
    llm = StubLLM("  Anchor on value first.  ")
    chunks = [SimpleNamespace(source_title="Pricing", content="Anchor on value")]
    answer = asyncio.run(AICoach(llm).answer_question("How to handle price?", chunks))

    assert answer == "Anchor on value first."
    assert "[Pricing]\nAnchor on value" in llm.calls[0]["system_prompt"]
    assert llm.calls[0]["contents"] == "How to handle price?"
    assert llm.calls[0]["json_output"] is False


def test_answer_question_without_notes():
    llm = StubLLM("I don't have notes on that.")
    asyncio.run(AICoach(llm).answer_question("Anything?", []))
    assert "(No relevant notes found.)" in llm.calls[0]["system_prompt"]
