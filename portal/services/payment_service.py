"""
Payment Service.

Students upload proof of payment for an application as a multipart
request (a ``payment`` JSON part plus the ``slipFile``); staff list the
uploads and approve or reject them.
"""

from __future__ import annotations

from typing import Optional

from portal.api_client import ApiClient, ApiError, RecordId
from portal.auth import SessionManager
from portal.logger import StructuredLogger
from portal.models.enums import PaymentStatus
from portal.models.forms import PaymentForm
from portal.models.payment import Payment
from portal.models.results import OperationResult
from portal.services.base_service import BaseService, invalid_form
from portal.services.validation import validate_payment

_ALL: str = "ALL"

# Backend messages on a 401 that mean the token itself is no longer good.
_EXPIRED_MARKERS: tuple[str, ...] = ("expired", "invalid token")


def filter_payments(
    payments: list[Payment], search: str = "", status: str = _ALL,
) -> list[Payment]:
    """Search student name, email and transaction reference; exact status."""
    needle = search.lower()

    def matches(payment: Payment) -> bool:
        student = payment.application.student if payment.application else None
        haystacks = [payment.transaction_reference]
        if student is not None:
            haystacks += [student.first_name, student.last_name, student.email]
        found = any(needle in (text or "").lower() for text in haystacks)
        return found and (status == _ALL or payment.status == status)

    return [p for p in payments if matches(p)]


class PaymentService(BaseService):
    """Payment proofs.

    Parameters
    ----------
    api:
        Shared REST client.
    session:
        Session store; uploading requires a token.
    logger:
        Structured logger.
    """

    def __init__(
        self, api: ApiClient, session: SessionManager, logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._api = api
        self._session = session

    def upload_proof(self, application_id: RecordId, form: PaymentForm) -> OperationResult:
        errors = validate_payment(form)
        if not errors.is_valid:
            return invalid_form(errors)
        if not self._session.token:
            return OperationResult(
                success=False, message="You are not logged in. Please login again.",
            )

        payment = {
            "amount": form.amount,
            "paymentMethod": form.payment_method,
            "transactionReference": form.transaction_reference,
            "notes": form.notes,
            "application": {"applicationId": application_id},
        }
        try:
            self._api.payments.upload(payment, form.slip_file)
        except ApiError as exc:
            self._logger.warning(
                "Payment upload for application %s failed: %s", application_id, exc,
                extra={"event": "PAYMENT_UPLOAD_FAILED", "status_code": exc.status_code},
            )
            return OperationResult(success=False, message=_upload_error_message(exc))

        self._logger.info(
            "Payment slip uploaded for application %s", application_id,
            extra={"event": "PAYMENT_UPLOADED"},
        )
        return OperationResult(success=True, message="Payment slip uploaded successfully!")

    def list_payments(self, status: str = _ALL, search: str = "") -> list[Payment]:
        try:
            payments = self._parse_records(Payment, self._api.payments.list())
        except ApiError as exc:
            self._logger.warning("Payment listing failed: %s", exc)
            return []
        return filter_payments(payments, search=search, status=status)

    def approve(self, payment_id: RecordId) -> OperationResult:
        return self._set_status(payment_id, PaymentStatus.APPROVED)

    def reject(self, payment_id: RecordId, reason: str) -> OperationResult:
        if not reason.strip():
            return OperationResult(
                success=False,
                message="A rejection reason is required",
                field_errors={"reason": "A rejection reason is required"},
            )
        return self._set_status(payment_id, PaymentStatus.REJECTED, reason)

    def _set_status(
        self, payment_id: RecordId, status: PaymentStatus, reason: Optional[str] = None,
    ) -> OperationResult:
        try:
            self._api.payments.update_status(payment_id, status, reason)
        except ApiError as exc:
            return self._failure(
                exc, "Failed to update payment status", "PAYMENT_STATUS_FAILED",
            )
        self._logger.info(
            "Payment %s set to %s", payment_id, status,
            extra={"event": "PAYMENT_STATUS"},
        )
        return OperationResult(
            success=True, message=f"Payment {status.lower()} successfully",
        )


def _upload_error_message(exc: ApiError) -> str:
    if exc.is_unauthorized:
        detail = (exc.detail or "").lower()
        if any(marker in detail for marker in _EXPIRED_MARKERS):
            return "Your session has expired. Please login again."
        return "Authentication failed. Please try again."
    return exc.user_message("Failed to upload payment slip")
