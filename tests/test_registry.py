"""Tests for the screen registry."""

from __future__ import annotations

import pytest

from portal.models.enums import UserType
from portal.routing import ScreenRegistry, build_default_registry
from portal.routing.registry import ADMIN_LANDING_PATH, LOGIN_PATH, STUDENT_LANDING_PATH
from tests.support import admin_principal, student_principal


@pytest.fixture
def registry(logger) -> ScreenRegistry:
    return build_default_registry(logger)


def test_resolve_exact_and_parameterised(registry) -> None:
    entry, params = registry.resolve("/admin/payments/")
    assert entry.title == "Payments"
    assert params == {}

    entry, params = registry.resolve("/payment/17?tab=slip")
    assert entry.path == "/payment/:applicationId"
    assert params == {"applicationId": "17"}


def test_resolve_unknown(registry) -> None:
    with pytest.raises(KeyError):
        registry.resolve("/payment")


def test_screens_for_each_type(registry) -> None:
    anonymous = {e.path for e in registry.screens_for(None)}
    assert anonymous == {"/", "/universities", "/programs", "/contact", LOGIN_PATH, "/register"}

    student = {e.path for e in registry.screens_for(UserType.STUDENT)}
    assert "/apply" in student and "/admin" not in student

    admin = {e.path for e in registry.screens_for(UserType.ADMIN)}
    assert "/admin/messages" in admin and "/apply" not in admin


def test_landing_paths() -> None:
    assert ScreenRegistry.landing_path_for(None) == LOGIN_PATH
    assert ScreenRegistry.landing_path_for(student_principal()) == STUDENT_LANDING_PATH
    assert ScreenRegistry.landing_path_for(admin_principal()) == ADMIN_LANDING_PATH


def test_reregistering_overwrites(logger) -> None:
    registry = ScreenRegistry(logger)
    registry.register("/x", "One")
    registry.register("/x", "Two")
    assert len(registry) == 1
    assert registry.resolve("/x")[0].title == "Two"
