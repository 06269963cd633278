"""
Notification Model.

A message addressed to exactly one audience: a single student (by
student id) or the shared admin inbox.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import AliasChoices, Field

from portal.models.base import PortalModel
from portal.models.enums import NotificationStatus, UNREAD_STATUSES

NotificationId = Union[int, str]


class Notification(PortalModel):
    """A single notification as returned by the backend.

    ``type`` and ``status`` are kept as plain strings so that values added
    server-side do not break parsing; compare them against
    ``NotificationType`` / ``NotificationStatus``.
    """

    notification_id: Optional[NotificationId] = Field(
        default=None,
        validation_alias=AliasChoices("notificationId", "notification_id", "id"),
    )
    subject: Optional[str] = None
    title: Optional[str] = None
    message: str = ""
    type: Optional[str] = None
    status: Optional[str] = None
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    @property
    def is_unread(self) -> bool:
        return self.status in UNREAD_STATUSES

    @property
    def headline(self) -> str:
        return self.subject or self.title or ""

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.sent_at or self.created_at

    def matches_id(self, notification_id: NotificationId) -> bool:
        """Compare ids loosely: the backend may hand out ints, the UI strings."""
        if self.notification_id is None:
            return False
        return str(self.notification_id) == str(notification_id)

    def as_read(self) -> "Notification":
        return self.model_copy(update={"status": NotificationStatus.READ.value})


class OutgoingNotification(PortalModel):
    """Body for an admin-composed notification sent to one student."""

    subject: str
    message: str
    type: str = "GENERAL"
