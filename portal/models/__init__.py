"""
Data Models Package.

Re-exports the pydantic models for convenient imports:
    from portal.models import Principal, Notification, UserType
"""

from __future__ import annotations

from portal.models.application import Application, Student
from portal.models.catalog import Program, University
from portal.models.contact import ContactMessage
from portal.models.enums import (
    ApplicationStatus,
    NotificationAudience,
    NotificationStatus,
    NotificationType,
    NotificationView,
    PaymentStatus,
    UserType,
)
from portal.models.notification import Notification
from portal.models.payment import Payment
from portal.models.principal import Principal
from portal.models.results import AuthErrorCode, AuthResult, FormErrors, OperationResult

__all__ = [
    "Application",
    "ApplicationStatus",
    "AuthErrorCode",
    "AuthResult",
    "ContactMessage",
    "FormErrors",
    "Notification",
    "NotificationAudience",
    "NotificationStatus",
    "NotificationType",
    "NotificationView",
    "OperationResult",
    "Payment",
    "PaymentStatus",
    "Principal",
    "Program",
    "Student",
    "University",
    "UserType",
]
