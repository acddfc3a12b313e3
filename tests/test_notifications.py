import asyncio
from datetime import timedelta

from app.core.timeutils import utcnow
from app.modules.notifications.hub import NotificationHub, notification_hub
from app.modules.notifications.realtime import TaskChangeNotifier, map_task_event, task_notifier
from app.modules.notifications.reminder_scheduler import ReminderScheduler, REMINDER_TITLE
from app.modules.notifications.schemas import Toast
from app.modules.notifications.service import dynamic_notifications, targets_plan
from app.modules.profiles.schemas import ProfileResponse
from app.modules.tasks.events import TaskEvent, INSERT, UPDATE, DELETE
from tests.conftest import add_profile, add_task


def _profile(words_used, words_limit=1000, plan="free"):
    return ProfileResponse(id="p1", user_id="user-1", words_used=words_used, words_limit=words_limit,
                           subscription_plan=plan)


# Reminder scheduler

def test_reminder_fires_once_into_feed(fake_db):
    hub = NotificationHub()
    soon = add_task(fake_db, title="Call editor", reminder_time=(utcnow() + timedelta(milliseconds=50)).isoformat())
    add_task(fake_db, title="Old", reminder_time=(utcnow() - timedelta(minutes=5)).isoformat())
    add_task(fake_db, title="Done", status="completed",
             reminder_time=(utcnow() + timedelta(milliseconds=50)).isoformat())
    scheduler = ReminderScheduler(lambda: fake_db, hub)

    async def run():
        scheduled = scheduler.start()
        await asyncio.sleep(0.3)
        scheduler.stop()
        return scheduled

    assert asyncio.run(run()) == 1
    toasts = hub.drain("user-1")
    assert len(toasts) == 1
    assert toasts[0].title == REMINDER_TITLE
    assert toasts[0].description == "Call editor"
    assert toasts[0].sound == "reminder"
    assert toasts[0].task_id == soon["id"]
    assert scheduler.pending("user-1") == []


def test_past_reminders_are_not_scheduled(fake_db):
    scheduler = ReminderScheduler(lambda: fake_db, NotificationHub())

    async def run():
        scheduler.start()
        try:
            return scheduler.schedule({
                "id": "t1", "user_id": "user-1", "title": "late",
                "reminder_time": (utcnow() - timedelta(seconds=1)).isoformat(),
            })
        finally:
            scheduler.stop()

    assert asyncio.run(run()) is False


def test_delete_event_cancels_and_update_reschedules(fake_db):
    hub = NotificationHub()
    task = add_task(fake_db, reminder_time=(utcnow() + timedelta(hours=1)).isoformat())
    scheduler = ReminderScheduler(lambda: fake_db, hub)

    async def run():
        scheduler.start()
        assert scheduler.pending("user-1") == [task["id"]]

        scheduler.handle_event(TaskEvent(event_type=DELETE, user_id="user-1", old={"id": task["id"]}))
        assert scheduler.pending("user-1") == []

        scheduler.handle_event(TaskEvent(event_type=UPDATE, user_id="user-1", new={"id": task["id"]}))
        assert scheduler.pending("user-1") == [task["id"]]

        fake_db.rows("tasks")[0]["reminder_time"] = None
        scheduler.handle_event(TaskEvent(event_type=UPDATE, user_id="user-1", new={"id": task["id"]}))
        assert scheduler.pending("user-1") == []
        scheduler.stop()

    asyncio.run(run())
    assert hub.drain("user-1") == []


def test_events_ignored_before_start(fake_db):
    scheduler = ReminderScheduler(lambda: fake_db, NotificationHub())
    scheduler.handle_event(TaskEvent(event_type=INSERT, user_id="user-1", new={"id": "x"}))
    assert scheduler.pending("user-1") == []


# Realtime task notices

def test_map_task_event_titles():
    created = map_task_event(TaskEvent(INSERT, "u", new={"id": "1", "title": "Plan"}))
    assert created.title == "✨ New Task Created"
    assert created.description == '"Plan" has been added to your tasks.'

    completed = map_task_event(TaskEvent(UPDATE, "u", new={"id": "1", "title": "Plan", "status": "completed"},
                                         old={"status": "review"}))
    assert completed.title == "🎉 Task Completed!"

    moved = map_task_event(TaskEvent(UPDATE, "u", new={"id": "1", "title": "Plan", "status": "in_progress"},
                                     old={"status": "todo"}))
    assert moved.title == "📋 Task Updated"
    assert moved.description == '"Plan" moved to In Progress.'

    unchanged = map_task_event(TaskEvent(UPDATE, "u", new={"status": "todo"}, old={"status": "todo"}))
    assert unchanged is None

    deleted = map_task_event(TaskEvent(DELETE, "u", old={"id": "1", "title": "Plan"}))
    assert deleted.title == "🗑️ Task Deleted"
    assert deleted.variant == "destructive"


def test_notifier_suppresses_initial_window():
    now = [100.0]
    hub = NotificationHub()
    notifier = TaskChangeNotifier(hub, clock=lambda: now[0])
    event = TaskEvent(INSERT, "user-1", new={"id": "1", "title": "Plan"})

    notifier.handle_event(event)
    assert hub.pending("user-1") == 0

    notifier.subscribe("user-1")
    now[0] = 101.0
    notifier.handle_event(event)
    assert hub.pending("user-1") == 0

    now[0] = 102.5
    notifier.handle_event(event)
    assert hub.pending("user-1") == 1

    notifier.unsubscribe("user-1")
    notifier.handle_event(event)
    assert hub.pending("user-1") == 1


def test_feed_drains_on_read(client):
    notification_hub.push("user-1", Toast(title="Hello", description="World"))

    first = client.get("/api/v1/notifications/feed").json()
    assert [t["title"] for t in first["toasts"]] == ["Hello"]
    assert client.get("/api/v1/notifications/feed").json()["toasts"] == []


def test_feed_subscription_endpoints(client):
    try:
        assert client.post("/api/v1/notifications/feed/subscribe").json() == {"subscribed": True}
        assert task_notifier.is_subscribed("user-1")
        assert client.delete("/api/v1/notifications/feed/subscribe").json() == {"subscribed": False}
        assert not task_notifier.is_subscribed("user-1")
    finally:
        task_notifier.unsubscribe("user-1")


# Notification list

def test_dynamic_notifications_by_usage():
    assert [n.id for n in dynamic_notifications(_profile(0))] == ["welcome"]
    assert [n.id for n in dynamic_notifications(_profile(500))] == []
    assert [n.id for n in dynamic_notifications(_profile(800))] == ["usage-warning"]
    critical = dynamic_notifications(_profile(950))
    assert [n.id for n in critical] == ["usage-critical"]
    assert "95%" in critical[0].message
    assert [n.id for n in dynamic_notifications(_profile(5, words_limit=0))] == ["usage-critical"]
    assert [n.id for n in dynamic_notifications(_profile(0, words_limit=None))] == ["welcome"]


def test_targets_plan():
    assert targets_plan("all", "free")
    assert targets_plan(None, "pro")
    assert targets_plan("premium", "basic")
    assert not targets_plan("premium", "free")
    assert targets_plan("pro", "pro")
    assert not targets_plan("pro", "enterprise")


def test_notifications_filtered_and_dismissible(client, fake_db):
    add_profile(fake_db)
    fake_db.add("notifications", {"title": "Maintenance", "message": "Tonight", "type": "info",
                                  "target_users": "all", "is_active": True})
    fake_db.add("notifications", {"title": "Premium perk", "message": "New", "type": "info",
                                  "target_users": "premium", "is_active": True})
    fake_db.add("notifications", {"title": "Old", "message": "Off", "type": "info",
                                  "target_users": "all", "is_active": False})

    titles = [n["title"] for n in client.get("/api/v1/notifications").json()]
    assert titles == ["Welcome to PeakDraft!", "Maintenance"]

    assert client.post("/api/v1/notifications/welcome/dismiss").status_code == 204
    assert client.post("/api/v1/notifications/welcome/dismiss").status_code == 204
    assert len(fake_db.rows("dismissed_notifications")) == 1

    titles = [n["title"] for n in client.get("/api/v1/notifications").json()]
    assert titles == ["Maintenance"]


# Promotions

def _promotion(db, **fields):
    row = {"title": "Spring sale", "message": "20% off", "is_active": True,
           "show_on_landing": True, "show_on_dashboard": True, "target_users": "free"}
    row.update(fields)
    return db.add("promotions", row)


def test_active_landing_promotion_respects_window_and_dismissal(client, fake_db):
    add_profile(fake_db)
    _promotion(fake_db, title="Expired", end_date=(utcnow() - timedelta(days=1)).isoformat())
    current = _promotion(fake_db, start_date=(utcnow() - timedelta(days=1)).isoformat())

    response = client.get("/api/v1/promotions/active", params={"placement": "landing"})
    assert response.json()["id"] == current["id"]

    client.post(f"/api/v1/promotions/{current['id']}/dismiss")
    assert client.get("/api/v1/promotions/active", params={"placement": "landing"}).json() is None


def test_dashboard_promotion_only_for_free_plan(client, fake_db):
    add_profile(fake_db, subscription_plan="pro", words_limit=100000)
    _promotion(fake_db)

    assert client.get("/api/v1/promotions/active", params={"placement": "dashboard"}).json() is None


def test_invalid_placement(client, fake_db):
    add_profile(fake_db)
    assert client.get("/api/v1/promotions/active", params={"placement": "sidebar"}).status_code == 400
