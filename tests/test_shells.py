"""Tests for the role shells' poller lifecycle."""

from __future__ import annotations

import pytest

from portal.services.dashboard_service import AdminDashboardService, StudentDashboardService
from portal.services.notification_service import NotificationService
from portal.shell import AdminShell, ShellState, StudentShell
from tests.support import admin_principal, notification, sign_in, student_principal, wait_until


@pytest.fixture
def notifications(api, logger) -> NotificationService:
    return NotificationService(api=api, logger=logger)


@pytest.fixture
def student_shell(session, notifications, api, config, logger):
    shell = StudentShell(
        session=session,
        notification_service=notifications,
        dashboard_service=StudentDashboardService(api=api, logger=logger),
        config=config,
        logger=logger,
    )
    yield shell
    shell.unmount()


@pytest.fixture
def admin_shell(session, notifications, api, config, logger):
    shell = AdminShell(
        session=session,
        notification_service=notifications,
        dashboard_service=AdminDashboardService(api=api, logger=logger),
        config=config,
        logger=logger,
    )
    yield shell
    shell.unmount()


def test_idle_without_matching_principal(student_shell, session, backend) -> None:
    student_shell.mount()
    assert student_shell.state == ShellState.IDLE
    assert student_shell.badge is None

    sign_in(session, admin_principal())
    student_shell.on_session_changed()
    assert student_shell.state == ShellState.IDLE
    assert backend.requests == []


def test_student_shell_polls_and_tears_down(student_shell, session, backend) -> None:
    backend.add("GET", "/notifications/student/7", body=[notification(1), notification(2, "READ")])
    backend.add("GET", "/students/7", body={"studentId": 7, "firstName": "Ana"})
    sign_in(session, student_principal())

    student_shell.mount()

    assert student_shell.state == ShellState.POLLING
    badge = student_shell.badge
    assert wait_until(lambda: badge.unread_count == 1)
    assert wait_until(lambda: student_shell.dashboard is not None)
    assert student_shell.dashboard.profile.first_name == "Ana"

    student_shell.unmount()

    assert student_shell.state == ShellState.TORN_DOWN
    assert student_shell.badge is None
    assert not badge.is_running
    assert student_shell.dashboard is None


def test_logout_stops_polling(student_shell, session, backend) -> None:
    backend.add("GET", "/notifications/student/7", body=[])
    sign_in(session, student_principal())
    student_shell.mount()
    badge = student_shell.badge

    session.clear()
    student_shell.on_session_changed()

    assert student_shell.state == ShellState.IDLE
    assert not badge.is_running
    assert student_shell.badge is None


def test_switching_principal_rebinds_badge(student_shell, session, backend) -> None:
    backend.add("GET", "/notifications/student/7", body=[notification(1)])
    backend.add("GET", "/notifications/student/8", body=[notification(2), notification(3)])
    sign_in(session, student_principal(user_id=7))
    student_shell.mount()
    first = student_shell.badge

    sign_in(session, student_principal(user_id=8), token="t2")
    student_shell.on_session_changed()

    second = student_shell.badge
    assert second is not first
    assert not first.is_running
    assert second.principal.student_id == 8
    assert wait_until(lambda: second.unread_count == 2)


def test_admin_shell_loads_dashboard(admin_shell, session, backend) -> None:
    backend.add("GET", "/notifications/admin", body=[notification(1, "PENDING")])
    backend.add("GET", "/universities", body=[{"universityId": 1}])
    sign_in(session, admin_principal())

    admin_shell.mount()

    assert admin_shell.state == ShellState.POLLING
    assert wait_until(lambda: admin_shell.badge.unread_count == 1)
    dashboard = admin_shell.load_dashboard()
    assert dashboard.stats.total_universities == 1
    assert dashboard.stats.unread_notifications == 1
