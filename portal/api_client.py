"""
Backend REST Client.

Thin wrapper over the consultancy backend's JSON API.  Two ``httpx``
clients are kept side by side:

- the **JSON client** sends ``Content-Type: application/json`` and uses
  the ordinary request timeout;
- the **upload client** carries no default content type, so ``httpx``
  writes the multipart boundary itself, and uses the longer upload
  timeout.

Every request made while a session token exists carries
``Authorization: Bearer <token>``.  A 401 is logged and surfaced to the
caller like any other failure; it never ends the session here, because
a transient false 401 must not destroy an in-progress upload.

Endpoint groups mirror the backend's resources and return decoded JSON;
turning that JSON into models is the service layer's job.
"""

from __future__ import annotations

import json
import mimetypes
from pathlib import Path
from typing import Callable, Optional, Union

import httpx

from portal.logger import StructuredLogger
from portal.utils.string_helpers import JsonValue

RecordId = Union[int, str]
TokenProvider = Callable[[], Optional[str]]

_NETWORK_ERROR_MESSAGE: str = "Cannot reach the server. Check your internet connection."
_TIMEOUT_MESSAGE: str = "The request timed out. Please try again."


class ApiError(RuntimeError):
    """Raised for any failed backend call.

    Attributes
    ----------
    status_code:
        HTTP status, or ``None`` when no response was received.
    detail:
        Human-readable message from the backend payload (its ``error``
        field, else ``message``), or ``None`` when it sent none.
    payload:
        The decoded response body, when there was one.
    is_timeout:
        ``True`` when the client-side timeout fired.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        payload: JsonValue = None,
        is_timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.payload = payload
        self.is_timeout = is_timeout

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    def user_message(self, default: str) -> str:
        """The backend's own message if it sent one, else *default*."""
        return self.detail or default


def _extract_detail(payload: JsonValue) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("error", "message"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


class ApiClient:
    """Shared HTTP access to the backend.

    Parameters
    ----------
    base_url:
        API root, e.g. ``http://localhost:8080/api``.
    token_provider:
        Zero-argument callable returning the current session token (or
        ``None``).  Read on every request so a login/logout takes effect
        immediately.
    logger:
        Structured logger.
    timeout:
        Timeout in seconds for ordinary calls.
    upload_timeout:
        Timeout in seconds for multipart uploads.
    transport:
        Optional ``httpx`` transport, used by tests to fake the backend.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        logger: StructuredLogger,
        timeout: float = 10.0,
        upload_timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._token_provider = token_provider
        self._logger = logger
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )
        self._upload_client = httpx.Client(
            base_url=base_url,
            timeout=upload_timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

        self.auth = AuthEndpoints(self)
        self.universities = UniversityEndpoints(self)
        self.programs = ProgramEndpoints(self)
        self.applications = ApplicationEndpoints(self)
        self.students = StudentEndpoints(self)
        self.contact = ContactEndpoints(self)
        self.payments = PaymentEndpoints(self)
        self.notifications = NotificationEndpoints(self)
        self.files = FileEndpoints(self)

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: JsonValue = None,
        params: Optional[dict[str, str]] = None,
    ) -> JsonValue:
        """Send a JSON request and return the decoded body (``None`` if empty)."""
        return self._send(
            self._client,
            method,
            path,
            json=json_body,
            params=params,
        )

    def upload(
        self,
        path: str,
        *,
        files: dict[str, tuple[str, bytes, str]],
        data: Optional[dict[str, str]] = None,
    ) -> JsonValue:
        """POST a multipart body through the upload client."""
        return self._send(
            self._upload_client,
            "POST",
            path,
            files=files,
            data=data,
        )

    def close(self) -> None:
        self._client.close()
        self._upload_client.close()

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _send(
        self,
        client: httpx.Client,
        method: str,
        path: str,
        **kwargs: object,
    ) -> JsonValue:
        try:
            response = client.request(
                method, path, headers=self._auth_headers(), **kwargs,
            )
        except httpx.TimeoutException as exc:
            self._logger.warning(
                "Request timed out: %s %s", method, path,
                extra={"event": "API_TIMEOUT"},
            )
            raise ApiError(_TIMEOUT_MESSAGE, is_timeout=True) from exc
        except httpx.HTTPError as exc:
            self._logger.warning(
                "Request failed: %s %s: %s", method, path, exc,
                extra={"event": "API_NETWORK_ERROR"},
            )
            raise ApiError(_NETWORK_ERROR_MESSAGE) from exc

        payload = self._decode(response)

        if response.status_code == 401:
            self._logger.warning(
                "401 from backend: %s %s", method, path,
                extra={"event": "API_UNAUTHORIZED", "payload": payload},
            )

        if response.is_error:
            detail = _extract_detail(payload)
            raise ApiError(
                detail or f"Request failed with status {response.status_code}",
                status_code=response.status_code,
                detail=detail,
                payload=payload,
            )
        return payload

    @staticmethod
    def _decode(response: httpx.Response) -> JsonValue:
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text


def _file_part(path: Path) -> tuple[str, bytes, str]:
    """Read *path* for a multipart body; an unreadable file is an ``ApiError``."""
    try:
        content = path.read_bytes()
    except OSError as exc:
        message = f"Could not read file '{path.name}'"
        raise ApiError(message, detail=message) from exc
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return path.name, content, content_type


# ---------------------------------------------------------------------------
# Endpoint groups
# ---------------------------------------------------------------------------

class _Endpoints:
    def __init__(self, api: ApiClient) -> None:
        self._api = api


class AuthEndpoints(_Endpoints):
    def login(self, credentials: dict[str, str]) -> JsonValue:
        return self._api.request("POST", "/auth/login", json_body=credentials)

    def register_student(self, data: dict[str, object]) -> JsonValue:
        return self._api.request("POST", "/auth/register/student", json_body=data)

    def register_admin(self, data: dict[str, object]) -> JsonValue:
        return self._api.request("POST", "/auth/register/admin", json_body=data)


class UniversityEndpoints(_Endpoints):
    def list(self) -> JsonValue:
        return self._api.request("GET", "/universities")

    def create(self, data: dict[str, object]) -> JsonValue:
        return self._api.request("POST", "/universities", json_body=data)

    def update(self, university_id: RecordId, data: dict[str, object]) -> JsonValue:
        return self._api.request("PUT", f"/universities/{university_id}", json_body=data)

    def delete(self, university_id: RecordId) -> JsonValue:
        return self._api.request("DELETE", f"/universities/{university_id}")


class ProgramEndpoints(_Endpoints):
    def list(self) -> JsonValue:
        return self._api.request("GET", "/programs")

    def by_university(self, university_id: RecordId) -> JsonValue:
        return self._api.request("GET", f"/programs/university/{university_id}")

    def create(self, data: dict[str, object]) -> JsonValue:
        return self._api.request("POST", "/programs", json_body=data)

    def update(self, program_id: RecordId, data: dict[str, object]) -> JsonValue:
        return self._api.request("PUT", f"/programs/{program_id}", json_body=data)

    def delete(self, program_id: RecordId) -> JsonValue:
        return self._api.request("DELETE", f"/programs/{program_id}")


class ApplicationEndpoints(_Endpoints):
    def list_student_records(self) -> JsonValue:
        """Legacy students-with-applications listing."""
        return self._api.request("GET", "/students/applications")

    def list(self) -> JsonValue:
        return self._api.request("GET", "/applications")

    def by_student(self, student_id: RecordId) -> JsonValue:
        return self._api.request("GET", f"/applications/student/{student_id}")

    def create(self, student_id: RecordId, data: dict[str, object]) -> JsonValue:
        return self._api.request(
            "POST", f"/students/{student_id}/application", json_body=data,
        )

    def update_status(self, application_id: RecordId, status: str) -> JsonValue:
        return self._api.request(
            "PATCH", f"/applications/{application_id}/status", params={"status": status},
        )

    def update_student_status(self, student_id: RecordId, status: str) -> JsonValue:
        return self._api.request(
            "PATCH",
            f"/students/{student_id}/application/status",
            params={"status": status},
        )


class StudentEndpoints(_Endpoints):
    def list(self) -> JsonValue:
        return self._api.request("GET", "/students")

    def get(self, student_id: RecordId) -> JsonValue:
        return self._api.request("GET", f"/students/{student_id}")


class ContactEndpoints(_Endpoints):
    def send(self, data: dict[str, object]) -> JsonValue:
        return self._api.request("POST", "/contact-messages", json_body=data)

    def list(self) -> JsonValue:
        return self._api.request("GET", "/contact-messages")

    def update(self, message_id: RecordId, data: dict[str, object]) -> JsonValue:
        return self._api.request("PUT", f"/contact-messages/{message_id}", json_body=data)

    def mark_as_read(self, message_id: RecordId) -> JsonValue:
        return self._api.request("PATCH", f"/contact-messages/{message_id}/mark-read")

    def unread_count(self) -> JsonValue:
        return self._api.request("GET", "/contact-messages/unread-count")

    def delete(self, message_id: RecordId) -> JsonValue:
        return self._api.request("DELETE", f"/contact-messages/{message_id}")


class PaymentEndpoints(_Endpoints):
    def list(self) -> JsonValue:
        return self._api.request("GET", "/payments")

    def by_application(self, application_id: RecordId) -> JsonValue:
        return self._api.request("GET", f"/payments/application/{application_id}")

    def upload(self, payment: dict[str, object], slip_file: Optional[Path]) -> JsonValue:
        """Multipart upload: a ``payment`` JSON part plus the ``slipFile``."""
        files: dict[str, tuple[str, bytes, str]] = {}
        if slip_file is not None:
            files["slipFile"] = _file_part(slip_file)
        return self._api.upload(
            "/payments/upload",
            files=files,
            data={"payment": json.dumps(payment)},
        )

    def update_status(
        self, payment_id: RecordId, status: str, reason: Optional[str] = None,
    ) -> JsonValue:
        return self._api.request(
            "PATCH",
            f"/payments/{payment_id}/status",
            params={"status": status, "reason": reason or ""},
        )


class NotificationEndpoints(_Endpoints):
    def for_admin(self) -> JsonValue:
        return self._api.request("GET", "/notifications/admin")

    def for_student(self, student_id: RecordId) -> JsonValue:
        return self._api.request("GET", f"/notifications/student/{student_id}")

    def mark_as_read(self, notification_id: RecordId) -> JsonValue:
        return self._api.request("PUT", f"/notifications/{notification_id}/mark-read")

    def delete(self, notification_id: RecordId) -> JsonValue:
        return self._api.request("DELETE", f"/notifications/{notification_id}")

    def send_to_student(self, student_id: RecordId, data: dict[str, object]) -> JsonValue:
        return self._api.request(
            "POST", f"/notifications/send-to-student/{student_id}", json_body=data,
        )


class FileEndpoints(_Endpoints):
    def upload_cv(self, cv_file: Path) -> JsonValue:
        return self._api.upload("/files/upload-cv", files={"file": _file_part(cv_file)})
