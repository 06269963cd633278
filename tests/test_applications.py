"""Tests for application submission and review."""

from __future__ import annotations

from pathlib import Path

import pytest

from portal.models.application import Application
from portal.models.enums import ApplicationStatus
from portal.models.forms import ApplicationForm
from portal.services.application_service import ApplicationService
from tests.support import admin_principal, json_body, sign_in, student_principal


@pytest.fixture
def applications(api, session, logger) -> ApplicationService:
    return ApplicationService(api=api, session=session, logger=logger)


@pytest.fixture
def form(tmp_path: Path) -> ApplicationForm:
    cv = tmp_path / "cv.pdf"
    cv.write_bytes(b"%PDF cv")
    return ApplicationForm(
        first_name="Ana",
        last_name="Silva",
        email="ana@example.com",
        phone_number="+55 11 5555",
        date_of_birth="2001-02-03",
        gender="FEMALE",
        country="Brazil",
        university_id=2,
        program_id=5,
        application_type="UNDERGRADUATE",
        motivation_letter="I want to study medicine.",
        cv=cv,
    )


class TestSubmit:
    def test_uploads_cv_then_creates_application(self, applications, backend, session, form) -> None:
        sign_in(session, student_principal(user_id=7))
        backend.add("POST", "/files/upload-cv", body={"filePath": "uploads/cv-7.pdf"})
        backend.add("POST", "/students/7/application", body={"applicationId": 1})

        result = applications.submit(form)

        assert result.success
        assert result.message.startswith("Application submitted successfully!")
        upload, create = backend.requests
        assert upload.url.path == "/files/upload-cv"
        assert b'name="file"; filename="cv.pdf"' in upload.content
        sent = json_body(create)
        assert sent["cvFilePath"] == "uploads/cv-7.pdf"
        assert sent["studentId"] == 7
        assert sent["programId"] == 5
        assert sent["universityId"] == 2
        assert "cv" not in sent

    def test_requires_student_principal(self, applications, backend, session, form) -> None:
        sign_in(session, admin_principal())
        result = applications.submit(form)
        assert result.message == "You must be logged in as a student to submit an application"
        assert backend.requests == []

    def test_unauthorized_create(self, applications, backend, session, form) -> None:
        sign_in(session)
        backend.add("POST", "/files/upload-cv", body={"filePath": "x"})
        backend.add("POST", "/students/7/application", status=401)
        result = applications.submit(form)
        assert result.message == "Authentication failed. Please refresh the page and try again."
        assert session.is_authenticated

    def test_cv_upload_failure(self, applications, backend, session, form) -> None:
        sign_in(session)
        backend.add("POST", "/files/upload-cv", status=413, body={"error": "File too large"})
        result = applications.submit(form)
        assert result.message == "Failed to upload CV: File too large"
        assert backend.calls("POST", "/students/7/application") == []

    def test_cv_deleted_after_validation(
        self, applications, backend, session, form, monkeypatch,
    ) -> None:
        def vanish(self: Path) -> bytes:
            raise FileNotFoundError(str(self))

        sign_in(session)
        monkeypatch.setattr(Path, "read_bytes", vanish)

        result = applications.submit(form)

        assert result.message == "Failed to upload CV: Could not read file 'cv.pdf'"
        assert backend.requests == []

    def test_invalid_form(self, applications, backend, session) -> None:
        sign_in(session)
        result = applications.submit(ApplicationForm())
        assert not result.success
        assert "cv" in result.field_errors
        assert backend.requests == []


class TestReview:
    def test_listing_falls_back_to_student_records(self, applications, backend) -> None:
        backend.add("GET", "/applications", body=[])
        backend.add("GET", "/students/applications", body=[
            {"studentId": 3, "firstName": "Li", "applicationStatus": "PENDING"},
        ])
        [application] = applications.list_for_review()
        assert application.student.first_name == "Li"
        assert application.application_status == "PENDING"

    def test_update_by_application_id(self, applications, backend) -> None:
        backend.add("PATCH", "/applications/4/status", body={})
        result = applications.update_status(
            Application(application_id=4), ApplicationStatus.APPROVED,
        )
        assert result.message == "Application approved successfully"
        assert backend.requests[0].url.params["status"] == "APPROVED"

    def test_update_by_student_id(self, applications, backend) -> None:
        backend.add("PATCH", "/students/3/application/status", body={})
        application = Application.model_validate({"student": {"studentId": 3}})
        result = applications.update_status(application, ApplicationStatus.REJECTED)
        assert result.message == "Application rejected successfully"

    def test_update_without_identifiers(self, applications, backend) -> None:
        result = applications.update_status(Application(), ApplicationStatus.APPROVED)
        assert result.message == "Missing identifiers to update status"
        assert backend.requests == []

    def test_update_failure(self, applications, backend) -> None:
        backend.add("PATCH", "/applications/4/status", status=500)
        result = applications.update_status(
            Application(application_id=4), ApplicationStatus.APPROVED,
        )
        assert result.message == "Failed to update application status"
