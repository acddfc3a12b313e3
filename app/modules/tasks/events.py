"""
In-process task change feed.

TaskService publishes one TaskEvent per insert/update/delete; the reminder
scheduler and the realtime notifier subscribe to it.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Any, List, Optional
import logging

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass
class TaskEvent:
    event_type: str
    user_id: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)

    @property
    def task_id(self) -> Optional[str]:
        return (self.new or {}).get("id") or (self.old or {}).get("id")


TaskEventHandler = Callable[[TaskEvent], None]


class TaskEventBus:
    def __init__(self):
        self._handlers: List[TaskEventHandler] = []

    def subscribe(self, handler: TaskEventHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: TaskEventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: TaskEvent) -> None:
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                # A failing subscriber must not fail the task mutation
                logger.error(f"Task event handler failed for {event.event_type} {event.task_id}: {str(e)}")


task_events = TaskEventBus()


def get_task_event_bus() -> TaskEventBus:
    return task_events
