"""Tests for payload models and their camelCase aliases."""

from __future__ import annotations

import pytest

from portal.models.application import Application, Student
from portal.models.catalog import University
from portal.models.enums import NotificationAudience
from portal.models.notification import Notification
from portal.utils import to_camel_case
from tests.support import admin_principal, student_principal


@pytest.mark.parametrize(
    ("snake", "camel"),
    [("user_id", "userId"), ("tuition_fee_usd", "tuitionFeeUsd"), ("email", "email")],
)
def test_to_camel_case(snake: str, camel: str) -> None:
    assert to_camel_case(snake) == camel


def test_notification_accepts_id_variants() -> None:
    assert Notification.model_validate({"id": 3}).notification_id == 3
    assert Notification.model_validate({"notificationId": "4"}).notification_id == "4"


def test_notification_headline_and_timestamp() -> None:
    n = Notification.model_validate({
        "title": "Fallback title",
        "createdAt": "2025-03-01T09:30:00",
        "status": "DELIVERED",
    })
    assert n.headline == "Fallback title"
    assert n.timestamp.day == 1
    assert not n.is_unread
    assert n.as_read().status == "READ"


def test_application_from_student_record() -> None:
    student = Student.model_validate({
        "studentId": 5,
        "applicationId": 8,
        "applicationStatus": "SUBMITTED",
        "university": {"universityId": 2, "name": "Samara"},
    })
    application = Application.from_student_record(student)
    assert application.application_id == 8
    assert application.student.student_id == 5
    assert application.university.name == "Samara"


def test_payload_uses_backend_keys() -> None:
    payload = Student(first_name="Ana", previous_education_country="BR").to_payload()
    assert payload == {"firstName": "Ana", "previousEducationCountry": "BR"}


def test_principal_audience() -> None:
    assert student_principal().audience == NotificationAudience.STUDENT
    assert admin_principal().audience == NotificationAudience.ADMIN


def test_university_carries_nested_programs() -> None:
    university = University.model_validate({
        "universityId": 2,
        "programs": [{"programId": 1, "programName": "Medicine"}],
    })
    assert university.programs[0].program_name == "Medicine"
