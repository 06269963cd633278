"""
Application Service.

Student side: submit an application (CV upload first, then the
application record).  Staff side: the review listing and status
decisions.  Every method returns ``OperationResult`` or plain lists and
never raises.
"""

from __future__ import annotations

from typing import Optional

from portal.api_client import ApiClient, ApiError, RecordId
from portal.auth import SessionManager
from portal.logger import StructuredLogger
from portal.models.application import Application, Student
from portal.models.enums import ApplicationStatus, UserType
from portal.models.forms import ApplicationForm
from portal.models.results import OperationResult
from portal.services.base_service import BaseService, invalid_form
from portal.services.validation import validate_application


class ApplicationService(BaseService):
    """Study applications.

    Parameters
    ----------
    api:
        Shared REST client.
    session:
        Session store; submission requires a signed-in student.
    logger:
        Structured logger.
    """

    def __init__(
        self, api: ApiClient, session: SessionManager, logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._api = api
        self._session = session

    # ------------------------------------------------------------------
    # Student
    # ------------------------------------------------------------------

    def submit(self, form: ApplicationForm) -> OperationResult:
        """Validate, upload the CV, then create the application."""
        errors = validate_application(form)
        if not errors.is_valid:
            return invalid_form(errors)

        principal = self._session.principal
        if principal is None or principal.user_type != UserType.STUDENT:
            return OperationResult(
                success=False,
                message="You must be logged in as a student to submit an application",
            )
        if not self._session.token:
            return OperationResult(
                success=False,
                message="Authentication token not found. Please login again.",
            )

        try:
            upload = self._api.files.upload_cv(form.cv)
        except ApiError as exc:
            self._logger.warning(
                "CV upload failed: %s", exc, extra={"event": "CV_UPLOAD_FAILED"},
            )
            return OperationResult(
                success=False,
                message=f"Failed to upload CV: {exc.user_message('CV upload failed')}",
            )
        cv_file_path: Optional[str] = (
            upload.get("filePath") if isinstance(upload, dict) else None
        )

        payload = form.to_payload()
        payload.update({
            "cvFilePath": cv_file_path,
            "studentId": principal.student_id,
        })

        try:
            self._api.applications.create(principal.student_id, payload)
        except ApiError as exc:
            if exc.is_unauthorized:
                message = "Authentication failed. Please refresh the page and try again."
            else:
                message = exc.user_message(
                    "Failed to submit application. Please try again.",
                )
            self._logger.warning(
                "Application submission failed: %s", exc,
                extra={"event": "APPLICATION_SUBMIT_FAILED"},
            )
            return OperationResult(success=False, message=message)

        self._logger.info(
            "Application submitted by student %s", principal.student_id,
            extra={"event": "APPLICATION_SUBMITTED"},
        )
        return OperationResult(
            success=True,
            message=(
                "Application submitted successfully! "
                "You will receive a confirmation email shortly."
            ),
        )

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    def list_for_review(self) -> list[Application]:
        """All applications; when that listing is empty or unavailable the
        legacy students-with-applications records are shaped as applications.
        """
        applications: list[Application] = []
        try:
            applications = self._parse_records(Application, self._api.applications.list())
        except ApiError as exc:
            self._logger.warning("Application listing failed: %s", exc)

        if applications:
            return applications

        try:
            students = self._parse_records(
                Student, self._api.applications.list_student_records(),
            )
        except ApiError as exc:
            self._logger.warning("Students-with-applications listing failed: %s", exc)
            return []
        return [Application.from_student_record(s) for s in students]

    def update_status(
        self, application: Application, status: ApplicationStatus,
    ) -> OperationResult:
        """Decide an application, by application id or else by student id."""
        student_id: Optional[RecordId] = (
            application.student.student_id if application.student else None
        )
        try:
            if application.application_id is not None:
                self._api.applications.update_status(application.application_id, status)
            elif student_id is not None:
                self._api.applications.update_student_status(student_id, status)
            else:
                return OperationResult(
                    success=False, message="Missing identifiers to update status",
                )
        except ApiError as exc:
            self._logger.warning(
                "Status update failed: %s", exc,
                extra={"event": "APPLICATION_STATUS_FAILED"},
            )
            return OperationResult(
                success=False, message="Failed to update application status",
            )

        self._logger.info(
            "Application %s set to %s",
            application.application_id or f"(student {student_id})",
            status,
            extra={"event": "APPLICATION_STATUS"},
        )
        return OperationResult(
            success=True,
            message=f"Application {status.lower()} successfully",
        )
