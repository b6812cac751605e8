from app.services import coaching_service


class FailingCoach:
    async def coach_reply(self, **kwargs):
        raise RuntimeError("model unavailable")


def _roleplay_session(client, headers, **payload):
    return client.post("/api/sessions/", json=payload, headers=headers).json()["id"]


def test_turns_advance_the_phase(client, user_headers):
    client.post(
        "/api/playbooks/",
        json={"title": "Openers", "content": "Hook A\nHook B", "type": "opening_hooks"},
        headers=user_headers,
    )
    session_id = _roleplay_session(client, user_headers)

    first = client.post(
        "/api/coach",
        json={"session_id": session_id, "content": "Hi there"},
        headers=user_headers,
    )
    assert first.status_code == 200
    body = first.json()
    assert body["assistant_message"]["role"] == "assistant"
    assert body["assistant_message"]["content"] == (
        "Hi, thanks for reaching out. What's this call about? [Your playbook: Hook A | Hook B]"
    )
    assert body["next_phase"] == "discovery"
    assert body["used_fallback"] is False
    assert body["note_sources"] == []

    second = client.post(
        "/api/coach",
        json={"session_id": session_id, "content": "What's your biggest challenge?"},
        headers=user_headers,
    ).json()
    assert second["next_phase"] == "pitch"
    assert second["phase_rationale"] == "Discovery phase; they're sharing context."

    session = client.get(f"/api/sessions/{session_id}", headers=user_headers).json()
    assert session["phase"] == "pitch"
    messages = client.get(f"/api/sessions/{session_id}/messages", headers=user_headers).json()
    assert [m["role"] for m in messages] == ["user", "assistant", "user", "assistant"]


def test_reply_quotes_matching_notes(client, user_headers):
    client.post(
        "/api/notes/ingest",
        json={"source_title": "Playbook notes", "text": "Follow-ups: send a recap within 24 hours."},
        headers=user_headers,
    )
    session_id = _roleplay_session(client, user_headers)

    body = client.post(
        "/api/coach",
        json={"session_id": session_id, "content": "follow-ups after the demo"},
        headers=user_headers,
    ).json()

    assert body["assistant_message"]["content"].endswith(
        "[From your notes: Follow-ups: send a recap within 24 hours.]"
    )
    assert body["note_sources"][0]["source_title"] == "Playbook notes"
    assert body["note_sources"][0]["score"] > 0


def test_scenario_session_uses_preset_phases(client, user_headers):
    scenario = client.get("/api/scenarios/", headers=user_headers).json()[0]
    session_id = _roleplay_session(
        client, user_headers, scenario_id=scenario["id"], scenario_title=scenario["title"]
    )
    body = client.post(
        "/api/coach",
        json={"session_id": session_id, "content": "Hello!"},
        headers=user_headers,
    ).json()
    assert body["next_phase"] == scenario["phases"][1]


def test_rejects_rate_sessions_and_short_messages(client, user_headers):
    rate_id = client.post("/api/sessions/", json={"type": "rate"}, headers=user_headers).json()["id"]
    response = client.post(
        "/api/coach",
        json={"session_id": rate_id, "content": "Hello"},
        headers=user_headers,
    )
    assert response.status_code == 400

    roleplay_id = _roleplay_session(client, user_headers)
    response = client.post(
        "/api/coach",
        json={"session_id": roleplay_id, "content": "  x  "},
        headers=user_headers,
    )
    assert response.status_code == 400


def test_unknown_session(client, user_headers):
    response = client.post(
        "/api/coach",
        json={"session_id": "missing", "content": "Hello"},
        headers=user_headers,
    )
    assert response.status_code == 404


def test_ai_failure_falls_back_to_mock(client, user_headers, monkeypatch):
    monkeypatch.setattr(coaching_service, "get_ai_coach", lambda: FailingCoach())
    session_id = _roleplay_session(client, user_headers)

    body = client.post(
        "/api/coach",
        json={"session_id": session_id, "content": "Hi there", "mode": "ai"},
        headers=user_headers,
    ).json()

    assert body["used_fallback"] is True
    assert body["assistant_message"]["content"].startswith("Hi, thanks for reaching out.")
    assert body["next_phase"] == "discovery"
