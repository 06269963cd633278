"""
Notification Badge.

Keeps a principal's unread count fresh: binds a :class:`NotificationFeed`
and the :class:`NotificationService` to a :class:`PollingLoop`, and
exposes the badge-facing view of that state.  A failed poll leaves the
feed (and therefore the count) as it was.
"""

from __future__ import annotations

import threading
from typing import Optional

from portal.logger import StructuredLogger
from portal.models.notification import Notification, NotificationId
from portal.models.principal import Principal
from portal.models.results import OperationResult
from portal.services.notification_service import NotificationFeed, NotificationService
from portal.services.poller import PollingLoop

_BADGE_CAP: int = 9


def format_badge(count: int) -> str:
    """Badge text: empty for zero, the count up to nine, ``"9+"`` beyond."""
    if count <= 0:
        return ""
    return f"{_BADGE_CAP}+" if count > _BADGE_CAP else str(count)


class NotificationBadge:
    """Unread-count badge for one principal.

    Parameters
    ----------
    principal:
        Whose audience to poll; fixed for the badge's lifetime.
    service:
        Backend notification operations.
    logger:
        Structured logger.
    interval_s:
        Seconds between polls.
    feed:
        Optional pre-existing feed to share with an inbox screen.
    """

    def __init__(
        self,
        principal: Principal,
        service: NotificationService,
        logger: StructuredLogger,
        interval_s: float = 30.0,
        feed: Optional[NotificationFeed] = None,
        stop_timeout_s: float = 10.0,
    ) -> None:
        self._principal = principal
        self._service = service
        self._feed = feed if feed is not None else NotificationFeed()
        self._error_lock: threading.Lock = threading.Lock()
        self._last_error: Optional[str] = None
        self._loop: PollingLoop[list[Notification]] = PollingLoop(
            name=f"NotificationPoller-{principal.user_type}",
            fetch=self._fetch,
            commit=self._commit,
            interval_s=interval_s,
            logger=logger,
            on_error=self._record_error,
            stop_timeout_s=stop_timeout_s,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._loop.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._loop.stop(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._loop.is_running

    @property
    def loop(self) -> PollingLoop[list[Notification]]:
        return self._loop

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def principal(self) -> Principal:
        return self._principal

    @property
    def feed(self) -> NotificationFeed:
        return self._feed

    @property
    def unread_count(self) -> int:
        return self._feed.unread_count

    @property
    def display_count(self) -> str:
        return format_badge(self.unread_count)

    @property
    def last_error(self) -> Optional[str]:
        """Message of the most recent failed poll; cleared by the next success."""
        with self._error_lock:
            return self._last_error

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def refresh(self) -> bool:
        """Poll now, outside the schedule."""
        return self._loop.poll_once()

    def mark_as_read(self, notification_id: NotificationId) -> OperationResult:
        return self._service.mark_as_read(self._feed, notification_id)

    def mark_all_as_read(self) -> OperationResult:
        return self._service.mark_all_as_read(self._feed)

    def delete(self, notification_id: NotificationId) -> OperationResult:
        return self._service.delete(self._feed, notification_id)

    # ------------------------------------------------------------------
    # Poll callbacks
    # ------------------------------------------------------------------

    def _fetch(self) -> list[Notification]:
        return self._service.fetch(self._principal)

    def _commit(self, items: list[Notification]) -> None:
        self._feed.replace(items)
        with self._error_lock:
            self._last_error = None

    def _record_error(self, exc: Exception) -> None:
        with self._error_lock:
            self._last_error = str(exc)
