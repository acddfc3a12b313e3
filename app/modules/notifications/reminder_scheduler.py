import asyncio
import logging
from typing import Callable, Dict, Any, List, Optional
from supabase import Client
from app.database.supabase_client import get_service_supabase
from app.core.timeutils import utcnow, parse_datetime
from app.modules.notifications.hub import NotificationHub, notification_hub
from app.modules.notifications.schemas import Toast
from app.modules.tasks.events import TaskEvent, DELETE

logger = logging.getLogger(__name__)

REMINDER_TITLE = "⏰ Task Reminder"
REMINDER_SOUND = "reminder"


def reminder_toast(task: Dict[str, Any]) -> Toast:
    return Toast(
        title=REMINDER_TITLE,
        description=task.get("title") or "",
        sound=REMINDER_SOUND,
        task_id=task.get("id"),
    )


class ReminderScheduler:
    """
    One-shot timers for upcoming task reminders, keyed by user and task id.

    Timers live on the event loop only; nothing is persisted and reminders whose
    time already passed are not delivered.
    """

    def __init__(
        self,
        client_factory: Callable[[], Client],
        hub: NotificationHub,
        clock: Callable = utcnow
    ):
        self.client_factory = client_factory
        self.hub = hub
        self.clock = clock
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timers: Dict[str, Dict[str, asyncio.TimerHandle]] = {}

    @property
    def running(self) -> bool:
        return self._loop is not None

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> int:
        """Bind to the event loop and schedule every pending reminder"""
        self._loop = loop or asyncio.get_running_loop()
        scheduled = 0
        for task in self._fetch_pending():
            if self.schedule(task):
                scheduled += 1
        logger.info(f"Reminder scheduler started with {scheduled} pending reminder(s)")
        return scheduled

    def stop(self) -> None:
        for user_id in list(self._timers):
            self.cancel_user(user_id)
        self._loop = None
        logger.info("Reminder scheduler stopped")

    def _fetch_pending(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = self.client_factory().table("tasks")\
            .select("id, user_id, title, reminder_time")\
            .not_.is_("reminder_time", "null")\
            .gte("reminder_time", self.clock().isoformat())\
            .neq("status", "completed")
        if user_id:
            query = query.eq("user_id", user_id)
        result = query.execute()
        return result.data or []

    def schedule(self, task: Dict[str, Any]) -> bool:
        """Schedule one reminder; returns False when its time has already passed"""
        if self._loop is None:
            return False
        reminder_time = parse_datetime(task.get("reminder_time"))
        if reminder_time is None:
            return False
        delay = (reminder_time - self.clock()).total_seconds()
        if delay <= 0:
            return False

        user_id = task["user_id"]
        task_id = task["id"]
        self.cancel(user_id, task_id)
        handle = self._loop.call_later(delay, self._fire, user_id, dict(task))
        self._timers.setdefault(user_id, {})[task_id] = handle
        logger.debug(f"Reminder for task {task_id} scheduled in {delay:.0f}s")
        return True

    def cancel(self, user_id: str, task_id: str) -> bool:
        timers = self._timers.get(user_id)
        if not timers or task_id not in timers:
            return False
        timers.pop(task_id).cancel()
        if not timers:
            self._timers.pop(user_id, None)
        return True

    def cancel_user(self, user_id: str) -> int:
        timers = self._timers.pop(user_id, {})
        for handle in timers.values():
            handle.cancel()
        return len(timers)

    def refresh_user(self, user_id: str) -> int:
        """Drop the user's timers and reschedule from a fresh query"""
        self.cancel_user(user_id)
        scheduled = 0
        for task in self._fetch_pending(user_id):
            task.setdefault("user_id", user_id)
            if self.schedule(task):
                scheduled += 1
        return scheduled

    def pending(self, user_id: str) -> List[str]:
        return sorted(self._timers.get(user_id, {}))

    def handle_event(self, event: TaskEvent) -> None:
        if self._loop is None:
            return
        if event.event_type == DELETE:
            self.cancel(event.user_id, event.task_id)
        else:
            self.refresh_user(event.user_id)

    def _fire(self, user_id: str, task: Dict[str, Any]) -> None:
        timers = self._timers.get(user_id)
        if timers:
            timers.pop(task["id"], None)
            if not timers:
                self._timers.pop(user_id, None)
        self.hub.push(user_id, reminder_toast(task))
        logger.info(f"Reminder delivered for task {task['id']} to user {user_id}")


reminder_scheduler = ReminderScheduler(get_service_supabase, notification_hub)


def get_reminder_scheduler() -> ReminderScheduler:
    return reminder_scheduler
