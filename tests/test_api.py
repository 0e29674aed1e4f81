# Rev 0.2.0
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from taskhub.api.app import create_app
from taskhub.tools.seed import seed_demo


@pytest.fixture()
def client(ctx):
    return TestClient(create_app(ctx))


@pytest.fixture()
def seeded(ctx, client):
    seed_demo(ctx.storage)
    return client


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_seeded_lists(seeded):
    users = seeded.get("/api/users").json()
    assert [u["username"] for u in users] == ["mwilson", "rjohnson", "dparker", "sjones", "tgreen"]
    assert users[0]["fullName"] == "Margaret Wilson"
    tasks = seeded.get("/api/tasks", params={"projectId": 1}).json()
    assert len(tasks) == 5
    assert tasks[0]["assigneeId"] == 2


def test_complete_task_shows_in_recent_activity(seeded):
    res = seeded.patch("/api/tasks/1/status", json={"status": "completed", "userId": 1})
    assert res.status_code == 200
    assert res.json()["status"] == "completed"

    recent = seeded.get("/api/activities/recent").json()
    assert len(recent) <= 10
    mine = [a for a in recent if a["type"] == "task-completed" and a["taskId"] == 1]
    assert len(mine) == 1
    assert mine[0]["user"]["username"] == "mwilson"
    assert mine[0]["task"]["title"] == "Solar Panel Installation Guidelines"


def test_status_endpoint_requires_both_fields(seeded):
    res = seeded.patch("/api/tasks/1/status", json={"status": "completed"})
    assert res.status_code == 400
    assert "userId" in {e["field"] for e in res.json()["errors"]}


def test_status_endpoint_errors(seeded):
    assert seeded.patch("/api/tasks/99/status", json={"status": "completed", "userId": 1}).status_code == 404
    res = seeded.patch("/api/tasks/1/status", json={"status": "finished", "userId": 1})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "status"


def test_unknown_task_wins_over_bad_status(seeded):
    res = seeded.patch("/api/tasks/99/status", json={"status": "bogus", "userId": 1})
    assert res.status_code == 404


def test_unknown_user_wins_over_taken_username(seeded):
    taken = seeded.get("/api/users").json()[0]["username"]
    assert seeded.patch("/api/users/99", json={"username": taken}).status_code == 404


def test_feed_keeps_ids_of_deleted_tasks(client):
    task = client.post("/api/tasks", json={"title": "Short lived"}).json()
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 204

    created = [a for a in client.get("/api/activities/recent").json() if a["type"] == "task-created"]
    assert created[0]["taskId"] == task["id"]
    assert created[0]["task"] is None


def test_due_soon_scenario(client, clock):
    user = client.post("/api/users", json={"username": "sjones", "fullName": "Sarah Jones"}).json()
    due = (clock() + timedelta(days=1)).date().isoformat()
    task = client.post("/api/tasks", json={"title": "Workshop", "dueDate": due, "assigneeId": user["id"]})
    assert task.status_code == 201

    soon = client.get("/api/dashboard/due-soon").json()
    assert [t["title"] for t in soon] == ["Workshop"]
    assert soon[0]["assignee"]["initials"] == "SJ"

    client.patch(f"/api/tasks/{task.json()['id']}", json={"status": "completed"})
    assert client.get("/api/dashboard/due-soon").json() == []


def test_stats(seeded):
    stats = seeded.get("/api/dashboard/stats").json()
    assert stats == {
        "total": 5, "inProgress": 2, "completed": 1, "overdue": 1, "overdueByDueDate": 4,
    }


def test_overdue_list(seeded):
    overdue = seeded.get("/api/dashboard/overdue").json()
    # due dates from 2023, all but the completed one
    assert [t["id"] for t in overdue] == [4, 1, 5, 3]
    assert overdue[0]["assignee"]["username"] == "sjones"


def test_project_delete_scenario(client):
    p1 = client.post("/api/projects", json={"name": "P1"}).json()
    p2 = client.post("/api/projects", json={"name": "P2", "parentId": p1["id"]}).json()
    client.post("/api/tasks", json={"title": "p1 task", "projectId": p1["id"]})
    p2_task = client.post("/api/tasks", json={"title": "p2 task", "projectId": p2["id"]}).json()

    res = client.delete(f"/api/projects/{p1['id']}")
    assert res.status_code == 204
    assert res.content == b""

    assert client.get(f"/api/projects/{p1['id']}").status_code == 404
    assert client.get(f"/api/projects/{p2['id']}").json()["parentId"] is None
    assert [t["id"] for t in client.get("/api/tasks").json()] == [p2_task["id"]]


def test_project_tree_and_children(client):
    root = client.post("/api/projects", json={"name": "Root"}).json()
    child = client.post("/api/projects", json={"name": "Child", "parentId": root["id"]}).json()
    assert [p["id"] for p in client.get("/api/projects", params={"parentId": root["id"]}).json()] == [child["id"]]
    tree = client.get("/api/projects/tree").json()
    assert tree[0]["name"] == "Root"
    assert tree[0]["children"][0]["name"] == "Child"


def test_project_summary(seeded):
    assert seeded.get("/api/projects/1/summary").json()["total"] == 5
    assert seeded.get("/api/projects/9/summary").status_code == 404


def test_validation_error_shape(client):
    res = client.post("/api/tasks", json={"title": "   "})
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Invalid task data"
    assert body["errors"] == [{"field": "title", "message": "Must not be empty"}]


@pytest.mark.parametrize(
    "payload,field",
    [
        ({"title": "x", "progress": 120}, "progress"),
        ({"title": "x", "spentHours": -1}, "spentHours"),
        ({"title": "x", "status": "finished"}, "status"),
        ({"title": "x", "priority": "whenever"}, "priority"),
        ({"title": "x", "dueDate": "next tuesday"}, "dueDate"),
    ],
)
def test_bad_task_fields_rejected_at_the_boundary(client, payload, field):
    res = client.post("/api/tasks", json=payload)
    assert res.status_code == 400
    assert [e["field"] for e in res.json()["errors"]] == [field]
    assert client.get("/api/tasks").json() == []


def test_bad_project_status_rejected(client):
    res = client.post("/api/projects", json={"name": "P", "status": "paused"})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "status"


@pytest.mark.parametrize("due", ["2024-03-02T00:00:00.000Z", "2024-03-02T02:00:00+02:00"])
def test_due_date_accepts_utc_marker_and_offsets(client, due):
    res = client.post("/api/tasks", json={"title": "Workshop", "dueDate": due})
    assert res.status_code == 201
    stored = datetime.fromisoformat(res.json()["dueDate"].replace("Z", "+00:00"))
    assert stored == datetime(2024, 3, 2, tzinfo=timezone.utc)
    assert [t["title"] for t in client.get("/api/dashboard/due-soon").json()] == ["Workshop"]

    patched = client.patch(f"/api/tasks/{res.json()['id']}", json={"startDate": "2024-03-01T08:30:00Z"})
    assert patched.status_code == 200


def test_request_shape_errors_are_400(client):
    res = client.post("/api/tasks", json={"description": "no title"})
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "title"
    assert client.get("/api/tasks/abc").status_code == 400


def test_unknown_ids_are_404(client):
    assert client.get("/api/tasks/42").status_code == 404
    assert client.patch("/api/tasks/42", json={"title": "x"}).status_code == 404
    assert client.delete("/api/tasks/42").status_code == 404
    assert client.get("/api/users/42").json() == {"message": "User not found"}


def test_task_delete_cascades(client):
    parent = client.post("/api/tasks", json={"title": "parent"}).json()
    child = client.post("/api/tasks", json={"title": "child", "parentTaskId": parent["id"]}).json()
    assert [t["id"] for t in client.get("/api/tasks", params={"parentTaskId": parent["id"]}).json()] == [child["id"]]

    assert client.delete(f"/api/tasks/{parent['id']}").status_code == 204
    assert client.get(f"/api/tasks/{child['id']}").status_code == 404


def test_user_activities(seeded):
    acts = seeded.get("/api/users/1/activities").json()
    assert [a["description"] for a in acts] == ["completed Community Garden Planning"]


def test_unexpected_errors_are_500(ctx, monkeypatch):
    def boom():
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(ctx.dashboard, "stats", boom)
    client = TestClient(create_app(ctx), raise_server_exceptions=False)
    res = client.get("/api/dashboard/stats")
    assert res.status_code == 500
    assert res.json() == {"message": "Internal Server Error"}


def test_token_auth(make_ctx):
    client = TestClient(create_app(make_ctx(api_token="s3cret")))
    assert client.get("/api/health").status_code == 200
    assert client.get("/api/users").status_code == 401
    assert client.get("/api/users", headers={"Authorization": "Bearer nope"}).status_code == 401
    assert client.get("/api/users", headers={"Authorization": "Bearer s3cret"}).status_code == 200
