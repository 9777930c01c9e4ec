import uuid

from conftest import make_task
from taskboard.validation import STATUS_MESSAGE

BASE = "/api/tasks"


def _create(client, **overrides):
    r = client.post(f"{BASE}/create-task", json=make_task(**overrides))
    assert r.status_code == 200, r.json()
    return r.json()["task"]


def test_create_then_fetch(client):
    r = client.post(
        f"{BASE}/create-task",
        json=make_task(title="  Prepare quarterly report ", description=" Collect the numbers and write the summary "),
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Task created successfully"

    created = body["task"]
    assert created["title"] == "Prepare quarterly report"
    assert created["description"] == "Collect the numbers and write the summary"
    assert created["status"] == "To Do"
    assert created["dueDate"] == "31-12-2099"

    fetched = client.get(f"{BASE}/view-task", params={"id": created["id"]})
    assert fetched.status_code == 200
    assert fetched.json() == {"success": True, "data": created}


def test_iso_due_date_is_stored_canonically(client):
    assert _create(client, dueDate="2099-12-31")["dueDate"] == "31-12-2099"


def test_unknown_status_defaults_on_create(client):
    assert _create(client, status="Blocked")["status"] == "To Do"


def test_transcript_defaults_to_description(client):
    task = _create(client)
    assert task["transcript"] == task["description"]


def test_duplicate_differing_only_in_case_is_rejected(client):
    _create(client)
    r = client.post(f"{BASE}/create-task", json=make_task(title="PREPARE QUARTERLY REPORT"))
    assert r.status_code == 400
    assert r.json() == {
        "success": False,
        "message": "Task with same title and description already exists",
    }


def test_same_title_other_description_is_allowed(client):
    _create(client)
    _create(client, description="A completely different description")


def test_invalid_due_dates(client):
    r = client.post(f"{BASE}/create-task", json=make_task(dueDate="15-13-2099"))
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid due date format"

    r = client.post(f"{BASE}/create-task", json=make_task(dueDate="01-01-2000"))
    assert r.status_code == 400
    assert r.json()["message"] == "Due date must be in the future"


def test_missing_priority(client):
    r = client.post(f"{BASE}/create-task", json=make_task(priority=None))
    assert r.status_code == 400
    assert r.json()["message"] == "Priority is required"


def test_wrong_body_type_is_a_bad_request(client):
    r = client.post(f"{BASE}/create-task", json=make_task(title=12345))
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_view_task_id_errors(client):
    r = client.get(f"{BASE}/view-task")
    assert r.status_code == 400
    assert r.json()["message"] == "Task ID is required"

    r = client.get(f"{BASE}/view-task", params={"id": "12345"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid task ID"

    r = client.get(f"{BASE}/view-task", params={"id": str(uuid.uuid4())})
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Task not found"}


def test_partial_update(client):
    task = _create(client)
    r = client.put(f"{BASE}/update-task", json={"_id": task["id"], "status": "In Progress"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "In Progress"
    assert data["title"] == task["title"]
    assert data["priority"] == task["priority"]


def test_update_with_plain_id_and_due_date(client):
    task = _create(client)
    r = client.put(f"{BASE}/update-task", json={"id": task["id"], "dueDate": "2099-06-30"})
    assert r.status_code == 200
    assert r.json()["data"]["dueDate"] == "30-06-2099"


def test_update_rejects_unknown_status(client):
    task = _create(client)
    r = client.put(f"{BASE}/update-task", json={"id": task["id"], "status": "Blocked"})
    assert r.status_code == 400
    assert r.json()["message"] == STATUS_MESSAGE


def test_update_rejects_past_due_date(client):
    task = _create(client)
    r = client.put(f"{BASE}/update-task", json={"id": task["id"], "dueDate": "01-01-2000"})
    assert r.status_code == 400
    assert r.json()["message"] == "Due date must be in the future"


def test_update_colliding_with_another_task_is_rejected(client):
    first = _create(client)
    second = _create(client, title="Book the team offsite venue")

    r = client.put(f"{BASE}/update-task", json={"id": second["id"], "title": first["title"].upper()})
    assert r.status_code == 400
    assert r.json()["message"] == "Task with same title and description already exists"


def test_update_keeping_own_pair_is_allowed(client):
    task = _create(client)
    r = client.put(
        f"{BASE}/update-task",
        json={"id": task["id"], "title": task["title"], "description": task["description"], "priority": "Low"},
    )
    assert r.status_code == 200
    assert r.json()["data"]["priority"] == "Low"


def test_update_id_errors(client):
    r = client.put(f"{BASE}/update-task", json={"status": "Done"})
    assert r.status_code == 400
    assert r.json()["message"] == "Task ID is required"

    r = client.put(f"{BASE}/update-task", json={"id": str(uuid.uuid4()), "status": "Done"})
    assert r.status_code == 404


def test_delete(client):
    task = _create(client)

    r = client.delete(f"{BASE}/delete-task", params={"id": task["id"]})
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Task deleted successfully"}

    assert client.get(f"{BASE}/view-task", params={"id": task["id"]}).status_code == 404
    assert client.delete(f"{BASE}/delete-task", params={"id": task["id"]}).status_code == 404


def test_delete_requires_id(client):
    r = client.delete(f"{BASE}/delete-task")
    assert r.status_code == 400
    assert r.json()["message"] == "Task ID is required"
