"""Tests for login, portal-specific login, registration and logout."""

from __future__ import annotations

import httpx
import pytest

from portal.models.enums import UserType
from portal.models.forms import AdminRegistration, LoginCredentials, StudentRegistration
from portal.models.results import AuthErrorCode
from portal.routing.registry import ADMIN_LANDING_PATH, STUDENT_LANDING_PATH, ScreenRegistry
from portal.services.auth_service import AuthService
from portal.storage import KEY_TOKEN, KEY_USER
from tests.support import json_body

STUDENT_LOGIN = {
    "token": "t1",
    "userType": "STUDENT",
    "role": "STUDENT",
    "email": "ana@example.com",
    "userId": 7,
    "firstName": "Ana",
    "lastName": "Silva",
}

ADMIN_LOGIN = {
    "token": "t9",
    "userType": "ADMIN",
    "role": "ADMIN",
    "email": "root@example.com",
    "userId": 1,
    "firstName": "Root",
}


@pytest.fixture
def auth(api, session, logger) -> AuthService:
    return AuthService(api=api, session=session, logger=logger)


class TestLogin:
    def test_student_login_establishes_session(self, auth, backend, session, storage) -> None:
        backend.add("POST", "/auth/login", body=STUDENT_LOGIN)

        result = auth.login_for_portal(
            LoginCredentials(email="ana@example.com", password="pw"), UserType.STUDENT,
        )

        assert result.success
        assert result.token == "t1"
        assert result.user_type == UserType.STUDENT
        assert storage.get(KEY_TOKEN) == "t1"
        assert '"userId":7' in storage.get(KEY_USER).replace(" ", "")
        assert session.principal.student_id == 7
        assert session.principal.admin_id is None
        assert ScreenRegistry.landing_path_for(session.principal) == STUDENT_LANDING_PATH

    def test_sends_trimmed_email(self, auth, backend) -> None:
        backend.add("POST", "/auth/login", body=STUDENT_LOGIN)
        auth.login(LoginCredentials(email="  ana@example.com ", password="pw"))
        sent = json_body(backend.calls("POST", "/auth/login")[0])
        assert sent == {"email": "ana@example.com", "password": "pw"}

    def test_admin_login_lands_on_admin_dashboard(self, auth, backend, session) -> None:
        backend.add("POST", "/auth/login", body=ADMIN_LOGIN)
        result = auth.login_for_portal(
            LoginCredentials(email="root@example.com", password="pw"), UserType.ADMIN,
        )
        assert result.success
        assert session.principal.admin_id == 1
        assert ScreenRegistry.landing_path_for(session.principal) == ADMIN_LANDING_PATH

    def test_admin_on_student_screen_reports_wrong_portal(self, auth, backend, session) -> None:
        backend.add("POST", "/auth/login", body=ADMIN_LOGIN)

        result = auth.login_for_portal(
            LoginCredentials(email="root@example.com", password="pw"), UserType.STUDENT,
        )

        assert not result.success
        assert result.error_code == AuthErrorCode.WRONG_PORTAL
        assert result.error_message == "This is a student login page. Please use admin login."
        assert result.field == "email"
        # The session written by the login call is kept.
        assert session.token == "t9"
        assert session.is_admin()

    def test_student_on_admin_screen_reports_wrong_portal(self, auth, backend) -> None:
        backend.add("POST", "/auth/login", body=STUDENT_LOGIN)
        result = auth.login_for_portal(
            LoginCredentials(email="ana@example.com", password="pw"), UserType.ADMIN,
        )
        assert result.error_message == "This is an admin login page. Please use student login."

    def test_backend_message_is_surfaced(self, auth, backend, session) -> None:
        backend.add("POST", "/auth/login", status=401, body={"error": "Invalid credentials"})

        result = auth.login(LoginCredentials(email="ana@example.com", password="bad"))

        assert not result.success
        assert result.error_code == AuthErrorCode.BACKEND_REJECTED
        assert result.error_message == "Invalid credentials"
        assert session.token is None

    def test_default_message_without_backend_detail(self, auth, backend) -> None:
        backend.add("POST", "/auth/login", status=500)
        result = auth.login(LoginCredentials(email="ana@example.com", password="pw"))
        assert result.error_message == "Login failed"

    def test_response_without_token_fails(self, auth, backend, session) -> None:
        backend.add("POST", "/auth/login", body={"email": "ana@example.com"})
        result = auth.login(LoginCredentials(email="ana@example.com", password="pw"))
        assert not result.success
        assert result.error_message == "Login failed"
        assert session.token is None

    def test_network_failure_is_normalised(self, auth, backend, session) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        backend.on("POST", "/auth/login", refuse)
        result = auth.login(LoginCredentials(email="ana@example.com", password="pw"))
        assert result.error_code == AuthErrorCode.NETWORK_ERROR
        assert result.error_message == "Login failed"
        assert not session.is_authenticated

    def test_invalid_form_never_reaches_network(self, auth, backend) -> None:
        result = auth.login_for_portal(
            LoginCredentials(email="not-an-email", password=""), UserType.STUDENT,
        )
        assert result.error_code == AuthErrorCode.VALIDATION_ERROR
        assert result.field_errors == {
            "email": "Email is invalid",
            "password": "Password is required",
        }
        assert backend.requests == []


class TestRegistration:
    def test_register_student_does_not_sign_in(self, auth, backend, session) -> None:
        backend.add("POST", "/auth/register/student", body={"message": "ok"})

        result = auth.register_student(StudentRegistration(
            first_name="Ana",
            last_name="Silva",
            email=" ana@example.com",
            password="secret1",
            phone_number="+1 555 0100",
        ))

        assert result.success
        sent = json_body(backend.calls("POST", "/auth/register/student")[0])
        assert sent["email"] == "ana@example.com"
        assert sent["firstName"] == "Ana"
        assert sent["phoneNumber"] == "+1 555 0100"
        assert session.token is None

    def test_register_admin_reports_backend_error(self, auth, backend) -> None:
        backend.add(
            "POST", "/auth/register/admin", status=409, body={"message": "Email already exists"},
        )
        result = auth.register_admin(AdminRegistration(
            first_name="Root", last_name="Admin", email="root@example.com", password="secret1",
        ))
        assert not result.success
        assert result.error_message == "Email already exists"

    def test_short_password_is_rejected(self, auth, backend) -> None:
        result = auth.register_admin(AdminRegistration(
            first_name="Root", last_name="Admin", email="root@example.com", password="123",
        ))
        assert result.field == "password"
        assert result.error_message == "Password must be at least 6 characters"
        assert backend.requests == []


class TestLogout:
    def test_logout_clears_everything(self, auth, backend, session, storage) -> None:
        backend.add("POST", "/auth/login", body=STUDENT_LOGIN)
        auth.login(LoginCredentials(email="ana@example.com", password="pw"))

        auth.logout()

        assert session.token is None
        assert session.principal is None
        assert storage.read_session() == (None, None)

    def test_logout_when_signed_out_is_harmless(self, auth, session) -> None:
        auth.logout()
        assert not session.is_authenticated
