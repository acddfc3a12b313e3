from datetime import datetime, timezone

from app.modules.tasks.events import INSERT, UPDATE, DELETE
from app.modules.tasks.recurrence import add_months, next_due_date
from app.modules.tasks.service import completion_fields, compute_analytics
from tests.conftest import add_task


def _events(event_bus):
    received = []
    event_bus.subscribe(received.append)
    return received


def test_create_task_logs_activity_and_publishes(client, fake_db, event_bus):
    received = _events(event_bus)

    response = client.post("/api/v1/tasks", json={"title": "  Draft newsletter ", "priority": "high"})

    assert response.status_code == 201
    task = response.json()
    assert task["title"] == "Draft newsletter"
    assert task["status"] == "todo"
    assert task["user_id"] == "user-1"

    activity = fake_db.rows("task_activity_log")
    assert [a["action"] for a in activity] == ["created"]
    assert activity[0]["new_value"] == {"title": "Draft newsletter"}
    assert [e.event_type for e in received] == [INSERT]


def test_create_task_requires_title(client):
    response = client.post("/api/v1/tasks", json={"title": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Task title is required"


def test_create_task_assigns_labels(client, fake_db):
    fake_db.add("task_labels", {"id": "l1", "user_id": "user-1", "name": "Blog", "color": "#111111"})
    fake_db.add("task_labels", {"id": "l2", "user_id": "user-1", "name": "Draft", "color": "#222222"})
    task = client.post("/api/v1/tasks", json={"title": "Tagged", "label_ids": ["l1", "l2"]}).json()

    assignments = fake_db.rows("task_label_assignments")
    assert sorted(a["label_id"] for a in assignments) == ["l1", "l2"]
    assert all(a["task_id"] == task["id"] for a in assignments)


def test_create_task_rejects_foreign_labels(client, fake_db):
    fake_db.add("task_labels", {"id": "mine", "user_id": "user-1", "name": "Mine", "color": "#111111"})
    fake_db.add("task_labels", {"id": "theirs", "user_id": "someone-else", "name": "Theirs", "color": "#222222"})

    response = client.post("/api/v1/tasks", json={"title": "Tagged", "label_ids": ["mine", "theirs"]})

    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown label ids: theirs"
    assert fake_db.rows("tasks") == []
    assert fake_db.rows("task_label_assignments") == []


def test_other_users_task_is_not_found(client, fake_db):
    task = add_task(fake_db, user_id="someone-else")
    response = client.get(f"/api/v1/tasks/{task['id']}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Task not found"


def test_status_change_sets_and_clears_completed_at(client, fake_db, event_bus):
    received = _events(event_bus)
    task = add_task(fake_db)

    done = client.patch(f"/api/v1/tasks/{task['id']}/status", json={"status": "completed"})
    assert done.status_code == 200
    assert done.json()["completed_at"] is not None

    reopened = client.patch(f"/api/v1/tasks/{task['id']}/status", json={"status": "in_progress"})
    assert reopened.json()["completed_at"] is None

    actions = [a["action"] for a in fake_db.rows("task_activity_log")]
    assert actions == ["status_changed", "status_changed"]
    assert [e.event_type for e in received] == [UPDATE, UPDATE]
    assert received[0].old["status"] == "todo"
    assert received[0].new["status"] == "completed"


def test_update_logs_changed_fields_only(client, fake_db):
    task = add_task(fake_db, priority="low")

    response = client.put(f"/api/v1/tasks/{task['id']}", json={"priority": "urgent", "title": "Write launch post"})

    assert response.status_code == 200
    log = fake_db.rows("task_activity_log")
    assert len(log) == 1
    assert log[0]["action"] == "updated"
    assert log[0]["old_value"] == {"priority": "low"}
    assert log[0]["new_value"] == {"priority": "urgent"}


def test_completing_recurring_task_creates_next_occurrence(client, fake_db):
    task = add_task(
        fake_db,
        due_date="2026-03-10T09:00:00+00:00",
        reminder_time="2026-03-10T08:00:00+00:00",
        recurrence_pattern="weekly",
    )

    client.patch(f"/api/v1/tasks/{task['id']}/status", json={"status": "completed"})

    tasks = fake_db.rows("tasks")
    assert len(tasks) == 2
    follow_up = tasks[1]
    assert follow_up["status"] == "todo"
    assert follow_up["title"] == task["title"]
    assert follow_up["recurrence_pattern"] == "weekly"
    assert follow_up["due_date"] == "2026-03-17T09:00:00+00:00"
    assert follow_up["reminder_time"] == "2026-03-17T08:00:00+00:00"
    assert "recurred" in [a["action"] for a in fake_db.rows("task_activity_log")]


def test_recurrence_stops_after_end_date(client, fake_db):
    task = add_task(
        fake_db,
        due_date="2026-03-10T09:00:00+00:00",
        recurrence_pattern="monthly",
        recurrence_end_date="2026-04-01T00:00:00+00:00",
    )

    client.patch(f"/api/v1/tasks/{task['id']}/status", json={"status": "completed"})

    assert len(fake_db.rows("tasks")) == 1


def test_add_months_clamps_to_month_end():
    assert add_months(datetime(2026, 1, 31, tzinfo=timezone.utc), 1).day == 28
    assert add_months(datetime(2028, 1, 31), 1).day == 29
    assert add_months(datetime(2026, 12, 15), 1) == datetime(2027, 1, 15)


def test_next_due_date_patterns():
    due = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert next_due_date(due, "daily") == datetime(2026, 5, 2, 12, 0, tzinfo=timezone.utc)
    assert next_due_date(due, "yearly") == datetime(2027, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert next_due_date(due, "weekly", datetime(2026, 5, 5, tzinfo=timezone.utc)) is None


def test_completion_fields():
    assert "completed_at" in completion_fields("completed", "todo")
    assert completion_fields("completed", "completed") == {}
    assert completion_fields("review", "completed") == {"completed_at": None}


def test_compute_analytics():
    now = datetime(2026, 6, 1, tzinfo=timezone.utc)
    tasks = [
        {"status": "completed", "priority": "high", "due_date": "2026-05-01T00:00:00+00:00"},
        {"status": "todo", "priority": "low", "due_date": "2026-05-01T00:00:00+00:00"},
        {"status": "in_progress", "priority": "high", "due_date": "2026-07-01T00:00:00+00:00"},
    ]

    analytics = compute_analytics(tasks, now=now)

    assert analytics.total == 3
    assert analytics.completed == 1
    assert analytics.in_progress == 1
    assert analytics.overdue == 1
    assert analytics.completion_rate == 33
    assert analytics.by_priority["high"] == 2
    assert compute_analytics([], now=now).completion_rate == 0


def test_analytics_endpoint(client, fake_db):
    add_task(fake_db, status="completed")
    add_task(fake_db)
    add_task(fake_db, user_id="someone-else")

    body = client.get("/api/v1/tasks/analytics").json()

    assert body["total"] == 2
    assert body["completion_rate"] == 50


def test_list_tasks_filters(client, fake_db):
    add_task(fake_db, title="a", status="todo")
    add_task(fake_db, title="b", status="review")

    titles = [t["title"] for t in client.get("/api/v1/tasks", params={"status": "review"}).json()]
    assert titles == ["b"]


def test_delete_task_publishes_old_row(client, fake_db, event_bus):
    received = _events(event_bus)
    task = add_task(fake_db)

    assert client.delete(f"/api/v1/tasks/{task['id']}").status_code == 204

    assert fake_db.rows("tasks") == []
    assert received[0].event_type == DELETE
    assert received[0].task_id == task["id"]


def test_activity_newest_first(client, fake_db):
    task = client.post("/api/v1/tasks", json={"title": "Plan"}).json()
    client.patch(f"/api/v1/tasks/{task['id']}/status", json={"status": "review"})

    actions = [a["action"] for a in client.get(f"/api/v1/tasks/{task['id']}/activity").json()]
    assert actions == ["status_changed", "created"]


def test_subtasks_positions_toggle_and_reorder(client, fake_db):
    task = add_task(fake_db)
    base = f"/api/v1/tasks/{task['id']}/subtasks"

    first = client.post(base, json={"title": "Outline"}).json()
    second = client.post(base, json={"title": "Draft"}).json()
    assert (first["position"], second["position"]) == (0, 1)

    toggled = client.post(f"{base}/{first['id']}/toggle").json()
    assert toggled["completed"] is True

    reordered = client.put(f"{base}/reorder", json={"subtask_ids": [second["id"], first["id"]]})
    assert [s["title"] for s in reordered.json()] == ["Draft", "Outline"]

    unknown = client.put(f"{base}/reorder", json={"subtask_ids": ["nope"]})
    assert unknown.status_code == 400


def test_attachment_upload_download_delete(client, fake_db, storage):
    task = add_task(fake_db)
    base = f"/api/v1/tasks/{task['id']}/attachments"

    uploaded = client.post(base, files={"file": ("brief.txt", b"hello", "text/plain")})
    assert uploaded.status_code == 201
    attachment = uploaded.json()
    assert attachment["file_name"] == "brief.txt"
    assert attachment["file_size"] == 5
    key = next(iter(storage.objects))
    assert key.startswith(f"tasks/{task['id']}/")
    assert key.endswith("-brief.txt")

    download = client.get(f"{base}/{attachment['id']}/download").json()
    assert download["url"].startswith("https://signed.example/tasks/")

    assert client.delete(f"{base}/{attachment['id']}").status_code == 204
    assert storage.objects == {}
    assert fake_db.rows("task_attachments") == []
