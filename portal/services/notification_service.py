"""
Notification Service.

Two pieces:

- :class:`NotificationFeed` is the local, thread-safe copy of one
  audience's notifications.  A fetch replaces it wholesale; user actions
  rewrite single items only after the backend confirmed them.
- :class:`NotificationService` talks to the backend: it picks the
  endpoint from the principal's type, and performs mark-as-read,
  mark-all-as-read, delete and (admin) send-to-student.

Mark-all-as-read is per-item: every unread item gets its own call, the
calls run concurrently and are all awaited, items whose call succeeded
flip to ``READ``, and the batch reports failure if any call failed.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional

from portal.api_client import ApiClient, ApiError
from portal.logger import StructuredLogger
from portal.models.enums import NotificationAudience, NotificationView
from portal.models.notification import Notification, NotificationId, OutgoingNotification
from portal.models.principal import Principal
from portal.models.results import OperationResult
from portal.services.base_service import BaseService, run_concurrently

_ALL: str = "ALL"


class NotificationFeed:
    """Local notification state for a single audience."""

    def __init__(self) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._items: list[Notification] = []

    def replace(self, items: Iterable[Notification]) -> None:
        """Adopt a fresh fetch result, discarding everything held before."""
        with self._lock:
            self._items = list(items)

    def clear(self) -> None:
        self.replace([])

    @property
    def items(self) -> list[Notification]:
        with self._lock:
            return list(self._items)

    def get(self, notification_id: NotificationId) -> Optional[Notification]:
        with self._lock:
            return next(
                (n for n in self._items if n.matches_id(notification_id)), None,
            )

    def unread(self) -> list[Notification]:
        with self._lock:
            return [n for n in self._items if n.is_unread]

    @property
    def unread_count(self) -> int:
        """Always derived from the current items, never stored."""
        return len(self.unread())

    def mark_read_local(self, notification_id: NotificationId) -> bool:
        return self.mark_many_read_local([notification_id]) > 0

    def mark_many_read_local(self, notification_ids: Iterable[NotificationId]) -> int:
        """Rewrite the matching items' status to ``READ``; returns how many changed."""
        wanted = {str(nid) for nid in notification_ids}
        changed = 0
        with self._lock:
            updated: list[Notification] = []
            for item in self._items:
                if item.notification_id is not None and str(item.notification_id) in wanted:
                    item = item.as_read()
                    changed += 1
                updated.append(item)
            self._items = updated
        return changed

    def remove_local(self, notification_id: NotificationId) -> bool:
        with self._lock:
            before = len(self._items)
            self._items = [n for n in self._items if not n.matches_id(notification_id)]
            return len(self._items) < before

    def filtered(
        self,
        search: str = "",
        type: str = _ALL,
        status: str = _ALL,
        view: NotificationView = NotificationView.ALL,
    ) -> list[Notification]:
        """Inbox filtering: text search over message and subject, exact
        type and status (``"ALL"`` disables), and the all/unread/read view.
        """
        needle = search.strip().lower()

        def keep(n: Notification) -> bool:
            if needle and needle not in (n.message or "").lower() \
                    and needle not in (n.subject or "").lower():
                return False
            if type != _ALL and n.type != type:
                return False
            if status != _ALL and n.status != status:
                return False
            if view == NotificationView.UNREAD:
                return n.is_unread
            if view == NotificationView.READ:
                return not n.is_unread
            return True

        return [n for n in self.items if keep(n)]


class NotificationService(BaseService):
    """Backend operations on notifications.

    Parameters
    ----------
    api:
        Shared REST client.
    logger:
        Structured logger.
    max_workers:
        Thread-pool size for mark-all-as-read.
    """

    def __init__(
        self,
        api: ApiClient,
        logger: StructuredLogger,
        max_workers: int = 8,
    ) -> None:
        super().__init__(logger)
        self._api = api
        self._max_workers = max_workers

    def fetch(self, principal: Principal) -> list[Notification]:
        """Fetch the principal's audience.

        Raises
        ------
        ApiError
            When the backend call fails; the poller keeps its previous
            state in that case.
        """
        if principal.audience == NotificationAudience.ADMIN:
            payload = self._api.notifications.for_admin()
        else:
            payload = self._api.notifications.for_student(principal.student_id)
        return self._parse_records(Notification, payload)

    def mark_as_read(
        self, feed: NotificationFeed, notification_id: NotificationId,
    ) -> OperationResult:
        """Mark one notification read; the local copy changes only on success."""
        try:
            self._api.notifications.mark_as_read(notification_id)
        except ApiError as exc:
            self._logger.warning(
                "Mark-as-read failed for notification %s: %s", notification_id, exc,
                extra={"event": "NOTIFICATION_MARK_READ_FAILED"},
            )
            return OperationResult(
                success=False,
                message=exc.user_message("Failed to mark notification as read"),
                failed=[notification_id],
            )
        feed.mark_read_local(notification_id)
        return OperationResult(
            success=True,
            message="Notification marked as read",
            succeeded=[notification_id],
        )

    def mark_all_as_read(self, feed: NotificationFeed) -> OperationResult:
        unread_ids: list[NotificationId] = [
            n.notification_id for n in feed.unread() if n.notification_id is not None
        ]
        if not unread_ids:
            return OperationResult(success=True, message="No unread notifications")

        _, errors = run_concurrently(
            unread_ids, self._api.notifications.mark_as_read, self._max_workers,
        )
        succeeded = [nid for nid in unread_ids if nid not in errors]
        failed = [nid for nid in unread_ids if nid in errors]
        feed.mark_many_read_local(succeeded)

        if failed:
            self._logger.warning(
                "Mark-all-as-read: %d of %d calls failed.", len(failed), len(unread_ids),
                extra={"event": "NOTIFICATION_MARK_ALL_PARTIAL", "failed": failed},
            )
            return OperationResult(
                success=False,
                message="Failed to mark all notifications as read",
                succeeded=succeeded,
                failed=failed,
            )

        self._logger.info(
            "Marked %d notifications as read.", len(succeeded),
            extra={"event": "NOTIFICATION_MARK_ALL"},
        )
        return OperationResult(
            success=True,
            message="All notifications marked as read",
            succeeded=succeeded,
        )

    def delete(
        self, feed: NotificationFeed, notification_id: NotificationId,
    ) -> OperationResult:
        try:
            self._api.notifications.delete(notification_id)
        except ApiError as exc:
            self._logger.warning(
                "Delete failed for notification %s: %s", notification_id, exc,
                extra={"event": "NOTIFICATION_DELETE_FAILED"},
            )
            return OperationResult(
                success=False,
                message=exc.user_message("Failed to delete notification"),
                failed=[notification_id],
            )
        feed.remove_local(notification_id)
        return OperationResult(
            success=True,
            message="Notification deleted",
            succeeded=[notification_id],
        )

    def send_to_student(
        self, student_id: NotificationId, notification: OutgoingNotification,
    ) -> OperationResult:
        """Admin action: address a notification to one student."""
        if not notification.subject.strip() or not notification.message.strip():
            return OperationResult(
                success=False,
                message="Subject and message are required",
                field_errors={
                    key: f"{label} is required"
                    for key, label, value in (
                        ("subject", "Subject", notification.subject),
                        ("message", "Message", notification.message),
                    )
                    if not value.strip()
                },
            )
        try:
            self._api.notifications.send_to_student(student_id, notification.to_payload())
        except ApiError as exc:
            self._logger.warning(
                "Sending notification to student %s failed: %s", student_id, exc,
                extra={"event": "NOTIFICATION_SEND_FAILED"},
            )
            return OperationResult(
                success=False,
                message=exc.user_message("Failed to send notification"),
            )
        self._logger.info(
            "Notification sent to student %s", student_id,
            extra={"event": "NOTIFICATION_SENT"},
        )
        return OperationResult(success=True, message="Notification sent successfully")
