import json

from conftest import FakeProvider

BASE = "/api/tasks"

LLM_ANSWER = json.dumps({
    "title": "Migrate User Data",
    "description": "Migrate user data from old system to new database",
    "priority": "Critical",
    "dueDate": "30-01-2099",
})
TRANSCRIPT = "  Critical priority task to migrate user data from old system to new database by January 30, 2099  "


def test_parse_voice_data_returns_guess_without_storing(client, use_provider):
    use_provider(FakeProvider(LLM_ANSWER))

    r = client.post(f"{BASE}/parse-voice-data", json={"transcript": TRANSCRIPT})
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "data": {
            "title": "Migrate User Data",
            "description": "Migrate user data from old system to new database",
            "priority": "Critical",
            "dueDate": "30-01-2099",
        },
    }

    assert client.get(BASE).json()["pagination"]["totalItems"] == 0


def test_parse_voice_data_falls_back_when_service_is_down(client):
    transcript = "This is critical, the checkout page is broken for all users"
    r = client.post(f"{BASE}/parse-voice-data", json={"transcript": transcript})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["priority"] == "Critical"
    assert data["title"] == transcript
    assert data["description"] == transcript
    assert data["dueDate"] is None


def test_parse_voice_data_rejects_bad_transcripts(client):
    for body, message in [
        ({"transcript": ""}, "Transcript is required"),
        ({"transcript": "   "}, "Transcript is required"),
        ({}, "Transcript is required"),
        ({"transcript": "x" * 5001}, "Transcript too long"),
    ]:
        r = client.post(f"{BASE}/parse-voice-data", json=body)
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": message}


def test_parse_voice_creates_task(client, use_provider):
    use_provider(FakeProvider(LLM_ANSWER))

    r = client.post(f"{BASE}/parse-voice", json={"transcript": TRANSCRIPT})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Task created from voice input"

    task = body["task"]
    assert task["title"] == "Migrate User Data"
    assert task["status"] == "To Do"
    assert task["priority"] == "Critical"
    assert task["dueDate"] == "30-01-2099"
    assert task["transcript"] == TRANSCRIPT.strip()

    fetched = client.get(f"{BASE}/view-task", params={"id": task["id"]}).json()["data"]
    assert fetched == task


def test_parse_voice_twice_is_a_duplicate(client, use_provider):
    use_provider(FakeProvider(LLM_ANSWER))
    assert client.post(f"{BASE}/parse-voice", json={"transcript": TRANSCRIPT}).status_code == 200

    r = client.post(f"{BASE}/parse-voice", json={"transcript": TRANSCRIPT})
    assert r.status_code == 400
    assert r.json()["message"] == "Task with same title and description already exists"


def test_parse_voice_without_due_date_is_rejected(client):
    # Fallback guesses never carry a due date, and a stored task needs one.
    r = client.post(
        f"{BASE}/parse-voice",
        json={"transcript": "High priority: renew the SSL certificates"},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Due date is required"


def test_parse_voice_network_failure_is_503(client, use_provider, store, monkeypatch):
    use_provider(FakeProvider(LLM_ANSWER))

    async def unreachable(fields):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(store, "insert", unreachable)

    r = client.post(f"{BASE}/parse-voice", json={"transcript": TRANSCRIPT})
    assert r.status_code == 503
    assert r.json()["success"] is False
