import time
import logging
from typing import Callable, Dict, Optional
from app.modules.notifications.hub import NotificationHub, notification_hub
from app.modules.notifications.schemas import Toast
from app.modules.tasks.events import TaskEvent, INSERT, UPDATE, DELETE

logger = logging.getLogger(__name__)

# Events right after subscribing belong to the initial load
SUPPRESS_WINDOW_SEC = 2.0

STATUS_LABELS = {
    "todo": "To-Do",
    "in_progress": "In Progress",
    "review": "Review",
    "completed": "Completed",
}


def map_task_event(event: TaskEvent) -> Optional[Toast]:
    """Toast for a task change, None when the change is not worth a notice"""
    new = event.new or {}
    old = event.old or {}

    if event.event_type == INSERT:
        return Toast(
            title="✨ New Task Created",
            description=f"\"{new.get('title')}\" has been added to your tasks.",
            task_id=new.get("id"),
        )

    if event.event_type == UPDATE:
        new_status = new.get("status")
        old_status = old.get("status")
        if old_status != "completed" and new_status == "completed":
            return Toast(
                title="🎉 Task Completed!",
                description=f"\"{new.get('title')}\" has been marked as complete.",
                task_id=new.get("id"),
            )
        if old_status != new_status:
            label = STATUS_LABELS.get(new_status, new_status)
            return Toast(
                title="📋 Task Updated",
                description=f"\"{new.get('title')}\" moved to {label}.",
                task_id=new.get("id"),
            )
        return None

    if event.event_type == DELETE:
        title = old.get("title")
        return Toast(
            title="🗑️ Task Deleted",
            description=f"\"{title}\" has been removed." if title else "A task has been removed.",
            variant="destructive",
            task_id=old.get("id"),
        )

    return None


class TaskChangeNotifier:
    """Turns task change events into toasts for subscribed users"""

    def __init__(self, hub: NotificationHub, clock: Callable[[], float] = time.monotonic):
        self.hub = hub
        self.clock = clock
        self._subscribed_at: Dict[str, float] = {}

    def subscribe(self, user_id: str) -> None:
        self._subscribed_at[user_id] = self.clock()
        logger.info(f"Task notifications subscribed for user {user_id}")

    def unsubscribe(self, user_id: str) -> None:
        self._subscribed_at.pop(user_id, None)

    def is_subscribed(self, user_id: str) -> bool:
        return user_id in self._subscribed_at

    def handle_event(self, event: TaskEvent) -> None:
        subscribed_at = self._subscribed_at.get(event.user_id)
        if subscribed_at is None:
            return
        if self.clock() - subscribed_at < SUPPRESS_WINDOW_SEC:
            return
        toast = map_task_event(event)
        if toast is not None:
            self.hub.push(event.user_id, toast)


task_notifier = TaskChangeNotifier(notification_hub)


def get_task_notifier() -> TaskChangeNotifier:
    return task_notifier
