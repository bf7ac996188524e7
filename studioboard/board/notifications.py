"""Transient user notifications (toasts) for the board."""

import logging
from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class Notification(BaseModel):
    """One transient, non-blocking message for the user."""

    level: NotificationLevel
    message: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class Notifier:
    """Collects notifications until the presentation layer drains them."""

    def __init__(self):
        self._pending: List[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._pending.append(notification)
        if level == NotificationLevel.ERROR:
            logger.warning(f"Board error notification: {message}")
        else:
            logger.debug(f"Board notification ({notification.level}): {message}")
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    @property
    def pending(self) -> List[Notification]:
        return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and forget all pending notifications."""
        drained, self._pending = self._pending, []
        return drained
