from collections import deque
from typing import Deque, Dict, List
from app.modules.notifications.schemas import Toast
import logging

logger = logging.getLogger(__name__)

MAX_PENDING_TOASTS = 100


class NotificationHub:
    """Per-user in-memory toast queues. Reading a feed drains it."""

    def __init__(self, max_pending: int = MAX_PENDING_TOASTS):
        self.max_pending = max_pending
        self._feeds: Dict[str, Deque[Toast]] = {}

    def push(self, user_id: str, toast: Toast) -> None:
        feed = self._feeds.get(user_id)
        if feed is None:
            feed = deque(maxlen=self.max_pending)
            self._feeds[user_id] = feed
        feed.append(toast)
        logger.debug(f"Toast queued for user {user_id}: {toast.title}")

    def drain(self, user_id: str) -> List[Toast]:
        feed = self._feeds.pop(user_id, None)
        return list(feed) if feed else []

    def pending(self, user_id: str) -> int:
        return len(self._feeds.get(user_id) or ())

    def clear(self) -> None:
        self._feeds.clear()


notification_hub = NotificationHub()


def get_notification_hub() -> NotificationHub:
    return notification_hub
