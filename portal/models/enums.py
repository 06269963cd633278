"""
Shared Enumerations for Portal Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents, so payload
values such as ``status == "READ"`` keep working unchanged.
"""

from __future__ import annotations
from enum import StrEnum


class UserType(StrEnum):
    """Principal types issued by the backend on login."""

    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class NotificationStatus(StrEnum):
    """Delivery lifecycle of a notification.

    ``SENT`` and ``PENDING`` count as unread; every other status is read.
    """

    PENDING = "PENDING"
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    READ = "READ"
    FAILED = "FAILED"


UNREAD_STATUSES: frozenset[str] = frozenset({
    NotificationStatus.SENT,
    NotificationStatus.PENDING,
})


class NotificationType(StrEnum):
    """Events that produce a notification server-side."""

    USER_SIGNUP = "USER_SIGNUP"
    APPLICATION_UPDATE = "APPLICATION_UPDATE"
    PAYMENT_CONFIRMATION = "PAYMENT_CONFIRMATION"
    GENERAL = "GENERAL"


class NotificationAudience(StrEnum):
    """Who a notification is addressed to: the shared admin inbox or one student."""

    ADMIN = "ADMIN"
    STUDENT = "STUDENT"


class NotificationView(StrEnum):
    """Inbox view filter."""

    ALL = "all"
    UNREAD = "unread"
    READ = "read"


class ApplicationStatus(StrEnum):
    """Review states of a study application."""

    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    DOCUMENTS_REQUIRED = "DOCUMENTS_REQUIRED"


class PaymentStatus(StrEnum):
    """Staff decision on an uploaded payment proof."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DegreeType(StrEnum):
    UNDERGRADUATE = "UNDERGRADUATE"
    POSTGRADUATE = "POSTGRADUATE"
    DOCTORATE = "DOCTORATE"


class ProgramStatus(StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class MessageType(StrEnum):
    """Categories a visitor can pick on the contact form."""

    GENERAL_INQUIRY = "GENERAL_INQUIRY"
    APPLICATION_HELP = "APPLICATION_HELP"
    PROGRAM_INFO = "PROGRAM_INFO"
    SCHOLARSHIP_INFO = "SCHOLARSHIP_INFO"
    PAYMENT_ISSUE = "PAYMENT_ISSUE"
    TECHNICAL_SUPPORT = "TECHNICAL_SUPPORT"
    FEEDBACK = "FEEDBACK"
    COMPLAINT = "COMPLAINT"


class MessageStatusFilter(StrEnum):
    """Admin message-inbox status filter."""

    ALL = "ALL"
    UNREAD = "UNREAD"
    READ = "READ"
    RESPONDED = "RESPONDED"
