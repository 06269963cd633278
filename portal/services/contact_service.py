"""
Contact Service.

The public contact form, and the staff inbox that reads, answers and
deletes the messages it produces.
"""

from __future__ import annotations

from portal.api_client import ApiClient, ApiError, RecordId
from portal.logger import StructuredLogger
from portal.models.contact import ContactMessage
from portal.models.enums import MessageStatusFilter
from portal.models.forms import ContactForm
from portal.models.results import OperationResult
from portal.services.base_service import BaseService, invalid_form
from portal.services.validation import validate_contact

_ALL: str = "ALL"


def filter_messages(
    messages: list[ContactMessage],
    search: str = "",
    message_type: str = _ALL,
    status: MessageStatusFilter = MessageStatusFilter.ALL,
) -> list[ContactMessage]:
    """Search name, email, subject and body; exact type; read-state filter."""
    needle = search.lower()

    def matches_status(message: ContactMessage) -> bool:
        if status == MessageStatusFilter.UNREAD:
            return not message.is_read
        if status == MessageStatusFilter.READ:
            return message.is_read
        if status == MessageStatusFilter.RESPONDED:
            return message.is_responded
        return True

    return [
        m for m in messages
        if any(
            needle in (text or "").lower()
            for text in (m.name, m.email, m.subject, m.message_content)
        )
        and (message_type == _ALL or m.message_type == message_type)
        and matches_status(m)
    ]


class ContactService(BaseService):
    """Contact messages.

    Parameters
    ----------
    api:
        Shared REST client.
    logger:
        Structured logger.
    """

    def __init__(self, api: ApiClient, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._api = api

    def send(self, form: ContactForm) -> OperationResult:
        errors = validate_contact(form)
        if not errors.is_valid:
            return invalid_form(errors)
        try:
            self._api.contact.send(form.to_payload())
        except ApiError as exc:
            return self._failure(
                exc, "Failed to send message. Please try again.", "CONTACT_SEND_FAILED",
            )
        self._logger.info(
            "Contact message received from %s", form.email,
            extra={"event": "CONTACT_SENT"},
        )
        return OperationResult(
            success=True,
            message="Message sent successfully! We will get back to you soon.",
        )

    # -- Staff inbox -----------------------------------------------------------

    def list_messages(
        self,
        message_type: str = _ALL,
        status: MessageStatusFilter = MessageStatusFilter.ALL,
        search: str = "",
    ) -> list[ContactMessage]:
        try:
            messages = self._parse_records(ContactMessage, self._api.contact.list())
        except ApiError as exc:
            self._logger.warning("Message listing failed: %s", exc)
            return []
        return filter_messages(messages, search, message_type, status)

    def unread_count(self) -> int:
        """Backend's unread counter; 0 when unavailable."""
        try:
            payload = self._api.contact.unread_count()
        except ApiError as exc:
            self._logger.warning("Unread message count failed: %s", exc)
            return 0
        if isinstance(payload, dict):
            payload = payload.get("count", payload.get("unreadCount", 0))
        try:
            return int(payload or 0)
        except (TypeError, ValueError):
            return 0

    def mark_as_read(self, message_id: RecordId) -> OperationResult:
        try:
            self._api.contact.mark_as_read(message_id)
        except ApiError as exc:
            return self._failure(exc, "Failed to mark message as read", "CONTACT_READ_FAILED")
        return OperationResult(success=True, message="Message marked as read")

    def respond(
        self, message_id: RecordId, response_text: str, admin_id: RecordId,
    ) -> OperationResult:
        if not response_text.strip():
            return OperationResult(
                success=False,
                message="Please enter a response",
                field_errors={"responseContent": "Please enter a response"},
            )
        try:
            self._api.contact.update(message_id, {
                "responseContent": response_text,
                "admin": {"adminId": admin_id},
            })
        except ApiError as exc:
            return self._failure(exc, "Failed to send response", "CONTACT_RESPOND_FAILED")
        self._logger.info(
            "Admin %s responded to message %s", admin_id, message_id,
            extra={"event": "CONTACT_RESPONDED"},
        )
        return OperationResult(success=True, message="Response sent successfully")

    def delete(self, message_id: RecordId) -> OperationResult:
        try:
            self._api.contact.delete(message_id)
        except ApiError as exc:
            return self._failure(exc, "Failed to delete message", "CONTACT_DELETE_FAILED")
        return OperationResult(success=True, message="Message deleted successfully")
