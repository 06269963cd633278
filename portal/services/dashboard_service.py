"""
Dashboard Service.

Builds the data behind the two dashboards.  Each section is loaded on
its own and a failing section is logged and recorded in the snapshot's
``errors`` instead of failing the whole load:

- the **student** dashboard: profile, applications, notifications and
  the payments of every application;
- the **admin** dashboard: six sources fetched concurrently and settled
  together, summarised as :class:`AdminStats`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import BaseModel, Field, ValidationError

from portal.api_client import ApiClient, ApiError, RecordId
from portal.logger import StructuredLogger
from portal.models.application import Application, Student
from portal.models.catalog import Program, University
from portal.models.contact import ContactMessage
from portal.models.enums import ApplicationStatus
from portal.models.notification import Notification
from portal.models.payment import Payment
from portal.models.principal import Principal
from portal.services.base_service import BaseService, run_concurrently, unwrap_collection
from portal.utils.string_helpers import JsonValue


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StudentDashboard(BaseModel):
    """Everything the student dashboard renders."""

    profile: Optional[Student] = None
    applications: list[Application] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    loaded_at: datetime = Field(default_factory=_now)

    @property
    def unread_notifications(self) -> int:
        return sum(1 for n in self.notifications if n.is_unread)


class AdminStats(BaseModel):
    total_students: int = 0
    total_universities: int = 0
    total_programs: int = 0
    total_applications: int = 0
    pending_applications: int = 0
    approved_applications: int = 0
    rejected_applications: int = 0
    total_messages: int = 0
    unread_messages: int = 0
    total_notifications: int = 0
    unread_notifications: int = 0


class AdminDashboard(BaseModel):
    """Everything the admin dashboard renders."""

    stats: AdminStats = Field(default_factory=AdminStats)
    universities: list[University] = Field(default_factory=list)
    programs: list[Program] = Field(default_factory=list)
    messages: list[ContactMessage] = Field(default_factory=list)
    applications: list[Application] = Field(default_factory=list)
    students: list[Student] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    loaded_at: datetime = Field(default_factory=_now)


def compute_admin_stats(
    universities: list[University],
    programs: list[Program],
    messages: list[ContactMessage],
    applications: list[Application],
    students: list[Student],
    notifications: list[Notification],
) -> AdminStats:
    def with_status(status: ApplicationStatus) -> int:
        return sum(1 for a in applications if a.application_status == status)

    return AdminStats(
        total_students=len(students),
        total_universities=len(universities),
        total_programs=len(programs),
        total_applications=len(applications),
        pending_applications=with_status(ApplicationStatus.PENDING),
        approved_applications=with_status(ApplicationStatus.APPROVED),
        rejected_applications=with_status(ApplicationStatus.REJECTED),
        total_messages=len(messages),
        unread_messages=sum(1 for m in messages if not m.is_read),
        total_notifications=len(notifications),
        unread_notifications=sum(1 for n in notifications if n.is_unread),
    )


class StudentDashboardService(BaseService):
    """Loads a student's dashboard.

    Parameters
    ----------
    api:
        Shared REST client.
    logger:
        Structured logger.
    max_workers:
        Thread-pool size for the per-application payment lookups.
    """

    def __init__(
        self, api: ApiClient, logger: StructuredLogger, max_workers: int = 8,
    ) -> None:
        super().__init__(logger)
        self._api = api
        self._max_workers = max_workers

    def load(self, principal: Principal) -> StudentDashboard:
        """Never raises; failed sections are listed in ``errors``."""
        student_id = principal.student_id or principal.user_id
        snapshot = StudentDashboard()

        try:
            snapshot.profile = Student.model_validate(self._api.students.get(student_id))
        except (ApiError, ValidationError) as exc:
            self._record(snapshot, "profile", "Failed to load profile", exc)

        snapshot.applications = self._load_applications(student_id, snapshot)

        try:
            snapshot.notifications = self._parse_records(
                Notification, self._api.notifications.for_student(student_id),
            )
        except ApiError as exc:
            self._record(snapshot, "notifications", "Failed to load notifications", exc)

        snapshot.payments = self._load_payments(snapshot.applications)
        snapshot.loaded_at = _now()
        return snapshot

    def _load_applications(
        self, student_id: RecordId, snapshot: StudentDashboard,
    ) -> list[Application]:
        try:
            payload = self._api.applications.by_student(student_id)
        except ApiError as exc:
            self._record(snapshot, "applications", "Failed to load applications", exc)
            return self._applications_from_student_record(student_id)

        records = unwrap_collection(payload)
        if not records and isinstance(payload, dict) and not _is_envelope(payload):
            records = [payload]
        return self._parse_records(Application, records)

    def _applications_from_student_record(self, student_id: RecordId) -> list[Application]:
        """Older backends keep a single application on the student record."""
        try:
            student = Student.model_validate(self._api.students.get(student_id))
        except (ApiError, ValidationError) as exc:
            self._logger.warning(
                "Student-record fallback for applications failed: %s", exc,
            )
            return []
        if not student.application_status:
            return []
        return [Application.from_student_record(student)]

    def _load_payments(self, applications: list[Application]) -> list[Payment]:
        application_ids = [
            a.application_id for a in applications if a.application_id is not None
        ]
        results, errors = run_concurrently(
            application_ids, self._api.payments.by_application, self._max_workers,
        )
        for application_id, exc in errors.items():
            self._logger.warning(
                "Failed to load payments for application %s: %s", application_id, exc,
            )
        payments: list[Payment] = []
        for application_id in application_ids:
            if application_id in results:
                payments.extend(self._parse_records(Payment, results[application_id]))
        return payments

    def _record(
        self, snapshot: StudentDashboard, section: str, message: str, exc: Exception,
    ) -> None:
        self._logger.warning(
            "%s: %s", message, exc, extra={"event": "DASHBOARD_SECTION_FAILED", "section": section},
        )
        snapshot.errors[section] = message


def _is_envelope(payload: dict[str, JsonValue]) -> bool:
    return "content" in payload or "data" in payload


class AdminDashboardService(BaseService):
    """Loads the staff dashboard.

    Parameters
    ----------
    api:
        Shared REST client.
    logger:
        Structured logger.
    max_workers:
        Thread-pool size for the concurrent source fetch.
    """

    def __init__(
        self, api: ApiClient, logger: StructuredLogger, max_workers: int = 8,
    ) -> None:
        super().__init__(logger)
        self._api = api
        self._max_workers = max_workers

    def load(self) -> AdminDashboard:
        """Fetch every source concurrently; never raises."""
        sources: dict[str, Callable[[], JsonValue]] = {
            "universities": self._api.universities.list,
            "programs": self._api.programs.list,
            "messages": self._api.contact.list,
            "applications": self._api.applications.list,
            "students": self._api.students.list,
            "notifications": self._api.notifications.for_admin,
        }
        results, errors = run_concurrently(
            sources, lambda name: sources[name](), self._max_workers,
        )

        snapshot = AdminDashboard()
        for name, exc in errors.items():
            self._logger.warning(
                "Failed to load %s: %s", name, exc,
                extra={"event": "DASHBOARD_SECTION_FAILED", "section": name},
            )
            snapshot.errors[name] = f"Failed to load {name}"

        snapshot.universities = self._parse_records(University, results.get("universities"))
        snapshot.programs = self._parse_records(Program, results.get("programs"))
        snapshot.messages = self._parse_records(ContactMessage, results.get("messages"))
        snapshot.students = self._parse_records(Student, results.get("students"))
        snapshot.notifications = self._parse_records(Notification, results.get("notifications"))

        if "applications" in errors:
            snapshot.applications = self._applications_from_student_records()
        else:
            snapshot.applications = self._parse_records(
                Application, results.get("applications"),
            )

        snapshot.stats = compute_admin_stats(
            snapshot.universities,
            snapshot.programs,
            snapshot.messages,
            snapshot.applications,
            snapshot.students,
            snapshot.notifications,
        )
        return snapshot

    def _applications_from_student_records(self) -> list[Application]:
        try:
            payload = self._api.applications.list_student_records()
        except ApiError as exc:
            self._logger.warning("Fallback students/applications also failed: %s", exc)
            return []
        return [
            Application.from_student_record(student)
            for student in self._parse_records(Student, payload)
        ]
