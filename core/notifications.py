"""Notification hub for add/import/export/sync outcomes.

Listeners subscribe to a :class:`NotificationCenter` and receive every
:class:`Notification` published afterwards. The centre also keeps a bounded
history so tests and the CLI can inspect recent events without subscribing.

Updates:
  v0.2.1 - 2026-10-20 - Drop unused dict serialisation of notifications.
  v0.2.0 - 2026-10-03 - Add ``notify`` shortcut for one-shot transient messages.
  v0.1.1 - 2026-09-24 - Track task durations for import/export workflows.
  v0.1.0 - 2026-09-16 - Introduce notification hub with task tracking helpers.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger("quote_manager.notifications")


class NotificationLevel(str, Enum):
    """Severity levels communicated to listeners."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationStatus(str, Enum):
    """Lifecycle stage for a tracked task; one-shot messages use ``SUCCEEDED``/``FAILED``."""
    STARTED = "started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class Notification:
    """Payload describing a single notification event."""
    id: uuid.UUID
    title: str
    message: str
    level: NotificationLevel
    status: NotificationStatus
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    task_id: str | None = None
    duration_ms: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class NotificationSubscription:
    """Handle that removes its callback when closed."""
    def __init__(
        self,
        center: NotificationCenter,
        callback: Callable[[Notification], None],
    ) -> None:
        self._center = center
        self._callback = callback
        self._closed = False

    def close(self) -> None:
        """Detach the stored callback if it is still active."""
        if self._closed:
            return
        self._closed = True
        self._center.unsubscribe(self._callback)

    def __enter__(self) -> NotificationSubscription:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class NotificationCenter:
    """Publish/subscribe hub delivering notifications to listeners."""
    def __init__(self, history_limit: int = 200) -> None:
        self._subscribers: list[Callable[[Notification], None]] = []
        self._lock = threading.RLock()
        self._history: deque[Notification] = deque(maxlen=history_limit)

    def subscribe(self, callback: Callable[[Notification], None]) -> NotificationSubscription:
        """Register *callback* to receive future notifications."""
        with self._lock:
            self._subscribers.append(callback)
        return NotificationSubscription(self, callback)

    def unsubscribe(self, callback: Callable[[Notification], None]) -> None:
        """Remove a previously subscribed callback if present."""
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def publish(self, notification: Notification) -> None:
        """Deliver *notification* to all registered subscribers."""
        with self._lock:
            self._history.append(notification)
            subscribers = list(self._subscribers)

        logger.debug(
            "Notification event",
            extra={
                "title": notification.title,
                "status": notification.status.value,
                "level": notification.level.value,
                "task_id": notification.task_id,
            },
        )

        for callback in subscribers:
            try:
                callback(notification)
            except Exception:  # pragma: no cover - a broken listener must not stop delivery
                logger.exception("Notification subscriber raised an exception")

    def notify(
        self,
        title: str,
        message: str,
        *,
        level: NotificationLevel = NotificationLevel.INFO,
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        """Publish a one-shot notification and return it."""
        failed = level in (NotificationLevel.WARNING, NotificationLevel.ERROR)
        notification = Notification(
            id=uuid.uuid4(),
            title=title,
            message=message,
            level=level,
            status=NotificationStatus.FAILED if failed else NotificationStatus.SUCCEEDED,
            metadata=dict(metadata or {}),
        )
        self.publish(notification)
        return notification

    def history(self) -> tuple[Notification, ...]:
        """Return a snapshot of stored notifications."""
        with self._lock:
            return tuple(self._history)

    @contextmanager
    def track_task(
        self,
        *,
        title: str,
        start_message: str,
        success_message: str,
        failure_message: str | None = None,
        task_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Emit start/success/failure events around the wrapped block.

        The yielded mapping is merged into the success notification metadata so the
        block can report counters such as ``added`` or ``skipped``.
        """
        resolved_task_id = task_id or f"task:{uuid.uuid4()}"
        base_metadata = dict(metadata or {})
        results: dict[str, Any] = {}
        started_at = time.perf_counter()
        self.publish(
            Notification(
                id=uuid.uuid4(),
                title=title,
                message=start_message,
                level=NotificationLevel.INFO,
                status=NotificationStatus.STARTED,
                task_id=resolved_task_id,
                metadata=base_metadata,
            )
        )

        try:
            yield results
        except Exception as exc:
            self.publish(
                Notification(
                    id=uuid.uuid4(),
                    title=title,
                    message=f"{failure_message or f'{title} failed'}: {exc}",
                    level=NotificationLevel.ERROR,
                    status=NotificationStatus.FAILED,
                    task_id=resolved_task_id,
                    duration_ms=int((time.perf_counter() - started_at) * 1000),
                    metadata=base_metadata,
                )
            )
            raise
        self.publish(
            Notification(
                id=uuid.uuid4(),
                title=title,
                message=success_message.format(**results) if results else success_message,
                level=NotificationLevel.SUCCESS,
                status=NotificationStatus.SUCCEEDED,
                task_id=resolved_task_id,
                duration_ms=int((time.perf_counter() - started_at) * 1000),
                metadata={**base_metadata, **results},
            )
        )


__all__ = [
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
    "NotificationStatus",
    "NotificationSubscription",
]
