"""Notification side-channel.

Human-readable success/warning/error messages raised by the data access
layer are buffered here and drained by the HTTP layer (the equivalent of
UI toasts).
"""

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)

NotificationLevel = Literal["success", "info", "warning", "error"]

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Notification(BaseModel):
    """A single notification entry."""

    level: NotificationLevel
    message: str
    created_at: datetime


class NotificationCenter:
    """Bounded, thread-safe buffer of notifications."""

    def __init__(self, max_size: int = 50):
        self._entries: deque[Notification] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        entry = Notification(
            level=level,
            message=message,
            created_at=datetime.now(timezone.utc),
        )
        logger.log(_LOG_LEVELS.get(level, logging.INFO), f"[NOTIFY] {level}: {message}")
        with self._lock:
            self._entries.append(entry)
        return entry

    def success(self, message: str) -> Notification:
        return self.notify("success", message)

    def warning(self, message: str) -> Notification:
        return self.notify("warning", message)

    def error(self, message: str) -> Notification:
        return self.notify("error", message)

    def drain(self) -> list[Notification]:
        """Return and clear all buffered notifications, oldest first."""
        with self._lock:
            entries = list(self._entries)
            self._entries.clear()
        return entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
