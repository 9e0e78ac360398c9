# mutualpool/services/notifications.py
"""Append-only notification log observed by indexers and dashboards."""

import threading
from typing import Any, Callable, List, Optional

from mutualpool.core.constants import NotificationKind
from mutualpool.core.logging import get_logger
from mutualpool.models.ledger import Notification

logger = get_logger(__name__)

Subscriber = Callable[[Notification], None]


class NotificationLog:
    """Ordered notifications with optional push subscribers."""

    def __init__(self):
        self._entries: List[Notification] = []
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber):
        self._subscribers.append(callback)

    def emit(self, kind: NotificationKind, **payload: Any) -> Notification:
        with self._lock:
            notification = Notification(
                sequence=len(self._entries) + 1,
                kind=kind,
                payload=payload,
            )
            self._entries.append(notification)
        logger.debug(f"Notification {notification.sequence}: {kind.value}", **payload)
        for callback in self._subscribers:
            try:
                callback(notification)
            except Exception as e:
                # a broken collaborator must not undo a committed ledger change
                logger.error(f"Notification subscriber failed: {e}")
        return notification

    def list(
        self,
        after: int = 0,
        kind: Optional[NotificationKind] = None,
        limit: Optional[int] = None
    ) -> List[Notification]:
        """Notifications with sequence greater than ``after``, in emission order."""
        entries = [n for n in self._entries[after:] if kind is None or n.kind == kind]
        return entries[:limit] if limit is not None else entries

    def __len__(self) -> int:
        return len(self._entries)
