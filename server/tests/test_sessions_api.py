def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_requires_user_header(client):
    assert client.get("/api/sessions/").status_code == 401
    assert client.get("/api/sessions/", headers={"X-User-Id": "  "}).status_code == 401


def test_session_lifecycle(client, user_headers):
    created = client.post(
        "/api/sessions/",
        json={"scenario_title": "  Cold outreach  "},
        headers=user_headers,
    )
    assert created.status_code == 201
    session = created.json()
    assert session["type"] == "roleplay"
    assert session["scenario_title"] == "Cold outreach"
    assert session["phase"] is None

    session_id = session["id"]
    message = client.post(
        f"/api/sessions/{session_id}/messages",
        json={"content": "Hello there"},
        headers=user_headers,
    )
    assert message.status_code == 201
    assert message.json()["role"] == "user"

    messages = client.get(f"/api/sessions/{session_id}/messages", headers=user_headers).json()
    assert [m["content"] for m in messages] == ["Hello there"]

    listed = client.get("/api/sessions/", headers=user_headers).json()
    assert len(listed) == 1
    assert listed[0]["message_count"] == 1

    assert client.delete(f"/api/sessions/{session_id}", headers=user_headers).status_code == 204
    assert client.get(f"/api/sessions/{session_id}", headers=user_headers).status_code == 404


def test_list_filters_by_type(client, user_headers):
    client.post("/api/sessions/", json={"type": "roleplay"}, headers=user_headers)
    client.post("/api/sessions/", json={"type": "rate"}, headers=user_headers)

    rate_only = client.get("/api/sessions/", params={"type": "rate"}, headers=user_headers).json()
    assert [s["type"] for s in rate_only] == ["rate"]
    assert len(client.get("/api/sessions/", headers=user_headers).json()) == 2


def test_sessions_are_private(client, user_headers):
    session_id = client.post("/api/sessions/", json={}, headers=user_headers).json()["id"]
    other = {"X-User-Id": "someone-else"}

    assert client.get(f"/api/sessions/{session_id}", headers=other).status_code == 404
    assert client.get(f"/api/sessions/{session_id}/messages", headers=other).status_code == 404
    assert client.delete(f"/api/sessions/{session_id}", headers=other).status_code == 404


def test_blank_message_rejected(client, user_headers):
    session_id = client.post("/api/sessions/", json={}, headers=user_headers).json()["id"]
    response = client.post(
        f"/api/sessions/{session_id}/messages",
        json={"content": "   "},
        headers=user_headers,
    )
    assert response.status_code == 400


def test_default_scenarios_are_seeded(client, user_headers):
    scenarios = client.get("/api/scenarios/", headers=user_headers).json()

    assert [s["title"] for s in scenarios] == [
        "Cold outreach",
        "Demo follow-up",
        "Pricing objection",
        "Closing negotiation",
        "Discovery call",
    ]
    assert scenarios[0]["phases"] == ["opening", "discovery", "pitch", "objection", "close"]
