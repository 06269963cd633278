"""Tests for the route guard decision table."""

from __future__ import annotations

import pytest

from portal.auth import SessionManager
from portal.models.enums import UserType
from portal.routing import GuardOutcome, RouteGuard, ScreenRegistry, build_default_registry
from portal.routing.guard import GuardAction
from portal.routing.registry import ADMIN_ONLY, ALL_USER_TYPES, LOGIN_PATH, STUDENT_ONLY
from tests.support import admin_principal, sign_in, student_principal


@pytest.fixture
def registry(logger) -> ScreenRegistry:
    registry = build_default_registry(logger)
    registry.register("/admin/finance", "Finance", ADMIN_ONLY, required_role="SUPER_ADMIN")
    registry.register("/shared/reports", "Reports", ALL_USER_TYPES, required_role="ADMIN")
    return registry


@pytest.fixture
def guard(session, registry) -> RouteGuard:
    return RouteGuard(session, registry)


def test_loading_before_session_restored(storage, logger, registry) -> None:
    session = SessionManager(storage, logger)
    decision = RouteGuard(session, registry).evaluate("/student/dashboard")
    assert decision.outcome == GuardOutcome.LOADING
    assert decision.redirect_to is None


def test_public_screens_always_allowed(storage, logger, registry) -> None:
    unloaded = RouteGuard(SessionManager(storage, logger), registry)
    for path in ("/", "/universities", "/programs", "/contact", LOGIN_PATH, "/register"):
        assert unloaded.evaluate(path).allowed


def test_signed_out_redirects_to_login_remembering_location(guard) -> None:
    decision = guard.evaluate("/payment/12")
    assert decision.outcome == GuardOutcome.REDIRECT_LOGIN
    assert decision.redirect_to == LOGIN_PATH
    assert decision.from_location == "/payment/12"


def test_student_cannot_open_admin_screens(guard, session) -> None:
    sign_in(session, student_principal())
    decision = guard.evaluate("/admin/payments")
    assert decision.outcome == GuardOutcome.ACCESS_DENIED
    assert decision.title == "Access Denied"
    assert decision.actions == [GuardAction.BACK, GuardAction.HOME]


def test_admin_gets_access_denied_on_student_only_screens(guard, session) -> None:
    sign_in(session, admin_principal())
    # The user-type check runs before the student-area check.
    assert guard.evaluate("/apply").outcome == GuardOutcome.ACCESS_DENIED


def test_missing_role_reports_required_and_current(guard, session) -> None:
    sign_in(session, admin_principal(role="ADMIN"))
    decision = guard.evaluate("/admin/finance")
    assert decision.outcome == GuardOutcome.INSUFFICIENT_PERMISSIONS
    assert decision.message == "You need SUPER_ADMIN role to access this page."
    assert decision.required_role == "SUPER_ADMIN"
    assert decision.current_role == "ADMIN"


def test_missing_role_with_no_role_at_all(guard, session) -> None:
    sign_in(session, student_principal(role=None))
    decision = guard.evaluate("/shared/reports")
    assert decision.outcome == GuardOutcome.INSUFFICIENT_PERMISSIONS
    assert decision.current_role == "None"


def test_mixed_audience_screen_admits_admins(session, logger) -> None:
    registry = ScreenRegistry(logger)
    registry.register("/student/space", "Space", STUDENT_ONLY | ADMIN_ONLY)
    registry.register("/student/only", "Only", STUDENT_ONLY)
    guard = RouteGuard(session, registry)
    sign_in(session, admin_principal())
    assert guard.evaluate("/student/space").allowed
    assert guard.evaluate("/student/only").outcome == GuardOutcome.ACCESS_DENIED


def test_allowed_paths(guard, session) -> None:
    sign_in(session, student_principal())
    for path in ("/student/dashboard", "/apply", "/payment/3", "/dashboard"):
        assert guard.evaluate(path).allowed, path

    sign_in(session, admin_principal())
    for path in ("/admin", "/admin/applicants", "/dashboard", "/admin/notifications"):
        assert guard.evaluate(path).allowed, path


def test_decision_reflects_current_session(guard, session) -> None:
    sign_in(session, student_principal())
    assert guard.evaluate("/apply").allowed
    session.clear()
    assert guard.evaluate("/apply").outcome == GuardOutcome.REDIRECT_LOGIN


def test_unknown_path_raises(guard) -> None:
    with pytest.raises(KeyError):
        guard.evaluate("/nowhere")


def test_accepts_entries_directly(guard, registry, session) -> None:
    sign_in(session, student_principal())
    entry, params = registry.resolve("/payment/42")
    assert params == {"applicationId": "42"}
    assert guard.evaluate(entry, location="/payment/42").allowed
    assert UserType.STUDENT in entry.allowed_user_types
