"""
Authentication Service.

Single orchestrator for every authentication concern of the portal
client: login, portal-specific login, registration and logout.

Sits between the front-end and the REST/session layers so that login
screens remain thin form handlers.  All methods return typed
``AuthResult`` models; the UI never inspects raw exceptions, and the
backend's error shapes are translated into display strings here and
nowhere else.
"""

from __future__ import annotations

from typing import Callable, Optional

from pydantic import ValidationError

from portal.api_client import ApiClient, ApiError
from portal.auth import SessionManager
from portal.logger import StructuredLogger
from portal.models.enums import UserType
from portal.models.forms import AdminRegistration, LoginCredentials, StudentRegistration
from portal.models.principal import Principal
from portal.models.results import AuthErrorCode, AuthResult, FormErrors
from portal.services.validation import (
    validate_admin_registration,
    validate_login,
    validate_student_registration,
)

_DEFAULT_LOGIN_ERROR: str = "Login failed"
_DEFAULT_REGISTRATION_ERROR: str = "Registration failed"

_WRONG_PORTAL_MESSAGES: dict[UserType, str] = {
    UserType.STUDENT: "This is a student login page. Please use admin login.",
    UserType.ADMIN: "This is an admin login page. Please use student login.",
}


def _validation_failure(errors: FormErrors) -> AuthResult:
    field = next(iter(errors.errors), None)
    return AuthResult(
        success=False,
        error_code=AuthErrorCode.VALIDATION_ERROR,
        error_message=errors.first_message(),
        field=field,
        field_errors=dict(errors.errors),
    )


class AuthService:
    """Centralised authentication service.

    Parameters
    ----------
    api:
        Shared REST client.
    session:
        Session store that owns the token and principal.
    logger:
        Structured JSON logger for audit-grade logging.
    """

    def __init__(
        self,
        api: ApiClient,
        session: SessionManager,
        logger: StructuredLogger,
    ) -> None:
        self._api: ApiClient = api
        self._session: SessionManager = session
        self._logger: StructuredLogger = logger

    @staticmethod
    def normalize_email(email: str) -> str:
        """Normalise an email address: strip surrounding whitespace."""
        return email.strip()

    # ==================================================================
    # Login
    # ==================================================================

    def login(self, credentials: LoginCredentials) -> AuthResult:
        """Authenticate against the backend and establish the session.

        Returns
        -------
        AuthResult
            ``success=True`` carrying the principal fields that were just
            persisted, or a failure whose ``error_message`` is the
            backend's own message (default ``"Login failed"``).
        """
        email = self.normalize_email(credentials.email)

        try:
            payload = self._api.auth.login({
                "email": email,
                "password": credentials.password,
            })
        except ApiError as exc:
            return self._classify_error(exc, _DEFAULT_LOGIN_ERROR, "LOGIN_FAILED")

        if not isinstance(payload, dict) or not payload.get("token"):
            self._logger.warning(
                "Login response carried no token.",
                extra={"event": "LOGIN_FAILED", "error_code": "no_token"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.UNKNOWN_ERROR,
                error_message=_DEFAULT_LOGIN_ERROR,
            )

        try:
            principal = Principal.model_validate(payload)
        except ValidationError as exc:
            self._logger.warning(
                "Login response had an unusable principal: %s", exc,
                extra={"event": "LOGIN_FAILED", "error_code": "bad_principal"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.UNKNOWN_ERROR,
                error_message=_DEFAULT_LOGIN_ERROR,
            )

        token = str(payload["token"])
        self._session.establish(token, principal)

        self._logger.info(
            "User authenticated: %s (type: %s)",
            principal.email,
            principal.user_type,
            extra={
                "event": "LOGIN",
                "email": principal.email,
                "user_id": principal.user_id,
            },
        )

        return AuthResult(
            success=True,
            token=token,
            user_type=principal.user_type,
            role=principal.role,
            email=principal.email,
            user_id=principal.user_id,
            first_name=principal.first_name,
            last_name=principal.last_name,
        )

    def login_for_portal(
        self, credentials: LoginCredentials, portal: UserType,
    ) -> AuthResult:
        """Login from a type-specific screen (student or admin).

        Validates the form first; invalid input never reaches the
        network.  A successful login of the other user type is reported
        as a failure on the ``email`` field.  The session written by
        :meth:`login` is left in place in that case.
        """
        errors = validate_login(credentials)
        if not errors.is_valid:
            return _validation_failure(errors)

        result = self.login(credentials)
        if result.success and result.user_type != portal:
            self._logger.warning(
                "%s account used the %s login screen.",
                result.user_type,
                portal,
                extra={"event": "LOGIN_WRONG_PORTAL", "email": result.email},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.WRONG_PORTAL,
                error_message=_WRONG_PORTAL_MESSAGES[portal],
                field="email",
                user_type=result.user_type,
            )
        return result

    # ==================================================================
    # Registration
    # ==================================================================

    def register_student(self, data: StudentRegistration) -> AuthResult:
        """Create a student account.  Does not sign the new user in."""
        errors = validate_student_registration(data)
        if not errors.is_valid:
            return _validation_failure(errors)
        return self._register(
            self._api.auth.register_student, data.to_payload(), data.email,
        )

    def register_admin(self, data: AdminRegistration) -> AuthResult:
        """Create an admin account.  Does not sign the new user in."""
        errors = validate_admin_registration(data)
        if not errors.is_valid:
            return _validation_failure(errors)
        return self._register(
            self._api.auth.register_admin, data.to_payload(), data.email,
        )

    def _register(
        self,
        call: Callable[[dict[str, object]], object],
        payload: dict[str, object],
        email: str,
    ) -> AuthResult:
        payload["email"] = self.normalize_email(email)
        try:
            call(payload)
        except ApiError as exc:
            return self._classify_error(
                exc, _DEFAULT_REGISTRATION_ERROR, "REGISTER_FAILED",
            )

        self._logger.info(
            "Account registered: %s", payload["email"],
            extra={"event": "REGISTER", "email": payload["email"]},
        )
        return AuthResult(success=True, email=str(payload["email"]))

    # ==================================================================
    # Logout
    # ==================================================================

    def logout(self) -> None:
        """Clear the local session and log the audit event.

        There is no server-side revocation; the token is simply dropped.
        """
        principal: Optional[Principal] = self._session.principal
        user_email = principal.email if principal else "unknown"
        user_id = principal.user_id if principal else "unknown"

        self._session.clear()

        self._logger.info(
            "User logged out: %s",
            user_email,
            extra={
                "event": "LOGOUT",
                "email": user_email,
                "user_id": user_id,
            },
        )

    # ==================================================================
    # Error classification
    # ==================================================================

    def _classify_error(self, exc: ApiError, default: str, event: str) -> AuthResult:
        """Map an ``ApiError`` to a structured ``AuthResult``."""
        if exc.status_code is None:
            self._logger.warning(
                "Network error during auth call: %s", exc,
                extra={"event": f"{event}_NETWORK"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=default,
            )

        self._logger.warning(
            "Auth call rejected (%s): %s", exc.status_code, exc,
            extra={"event": event, "status_code": exc.status_code},
        )
        return AuthResult(
            success=False,
            error_code=AuthErrorCode.BACKEND_REJECTED,
            error_message=exc.user_message(default),
        )
