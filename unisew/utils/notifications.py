"""사용자 알림 큐 — 스낵바 메시지.

User notification queue — the server-side counterpart of the front-end's
snackbar. Workflows push messages here; API responses drain them.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class NotificationVariant(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    variant: NotificationVariant
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """세션별 알림 큐 (Per-session notification queue)."""

    def __init__(self) -> None:
        self._queue: list[Notification] = []

    def push(self, variant: NotificationVariant, message: str) -> Notification:
        notification = Notification(variant=variant, message=message)
        self._queue.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.push(NotificationVariant.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.push(NotificationVariant.INFO, message)

    def warning(self, message: str) -> Notification:
        return self.push(NotificationVariant.WARNING, message)

    def error(self, message: str) -> Notification:
        return self.push(NotificationVariant.ERROR, message)

    def peek(self) -> list[Notification]:
        return list(self._queue)

    def drain(self) -> list[dict]:
        """대기 중인 알림을 꺼내고 비웁니다 — Pop all queued notifications as dicts."""
        drained = [n.model_dump(mode="json") for n in self._queue]
        self._queue.clear()
        return drained
