"""Notification channel used to report validation, fetch and submission outcomes."""

from __future__ import annotations

import logging
from typing import List, Protocol

from .models import Notification

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Fire-and-forget sink for user-facing notifications."""

    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the application log."""

    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.severity == "destructive" else logging.INFO
        logger.log(
            level,
            "notification title=%s description=%s",
            notification.title,
            notification.description,
        )


class RecordingNotifier:
    """Keeps delivered notifications in memory for later rendering."""

    def __init__(self, max_records: int = 100) -> None:
        self._max_records = max_records
        self._records: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self._records.append(notification)
        if len(self._records) > self._max_records:
            self._records = self._records[-self._max_records :]

    @property
    def records(self) -> List[Notification]:
        return list(self._records)

    @property
    def last(self) -> Notification | None:
        return self._records[-1] if self._records else None

    def clear(self) -> None:
        self._records.clear()
