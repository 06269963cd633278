"""
Catalog Service.

Universities and programs: the public listings with their search,
filter and sort rules, plus the staff create/update/delete actions.

Listing failures never raise.  The university listing falls back to the
bundled catalog when the API fails or returns nothing; the program
listing reports the error and returns whatever it could load.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from portal.api_client import ApiClient, ApiError, RecordId
from portal.data.universities import FALLBACK_UNIVERSITIES
from portal.logger import StructuredLogger
from portal.models.catalog import Program, University
from portal.models.forms import ProgramForm, UniversityForm
from portal.models.results import OperationResult
from portal.services.base_service import BaseService, invalid_form
from portal.services.validation import validate_program, validate_university


class CatalogSource(StrEnum):
    API = "api"
    FALLBACK = "fallback"


class UniversitySort(StrEnum):
    NAME = "name"
    RATING = "rating"
    STUDENTS = "students"


class ProgramSort(StrEnum):
    NAME = "name"
    UNIVERSITY = "university"
    TUITION = "tuition"


class UniversityListing(BaseModel):
    universities: list[University] = Field(default_factory=list)
    source: CatalogSource = CatalogSource.API
    error: Optional[str] = None


class ProgramListing(BaseModel):
    programs: list[Program] = Field(default_factory=list)
    universities: list[University] = Field(default_factory=list)
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Pure filtering helpers
# ---------------------------------------------------------------------------

def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle in (haystack or "").lower()


def filter_universities(
    universities: Sequence[University],
    search: str = "",
    location: str = "",
    sort_by: Optional[UniversitySort] = UniversitySort.NAME,
) -> list[University]:
    """Search name and description, match location exactly, then sort.

    ``rating`` and ``students`` sort descending; ``students`` compares the
    digits of texts such as ``"15000+"``.
    """
    needle = search.lower()
    result = [
        u for u in universities
        if (_contains(u.name, needle) or _contains(u.description, needle))
        and (not location or u.location == location)
    ]
    if sort_by == UniversitySort.NAME:
        result.sort(key=lambda u: (u.name or "").casefold())
    elif sort_by == UniversitySort.RATING:
        result.sort(key=lambda u: u.rating or 0, reverse=True)
    elif sort_by == UniversitySort.STUDENTS:
        result.sort(key=lambda u: u.student_count, reverse=True)
    return result


def university_locations(universities: Sequence[University]) -> list[str]:
    """Distinct non-empty locations, in first-seen order."""
    return list(dict.fromkeys(u.location for u in universities if u.location))


def filter_programs(
    programs: Sequence[Program],
    search: str = "",
    university_id: Optional[RecordId] = None,
    degree_type: str = "",
    status: str = "",
    sort_by: Optional[ProgramSort] = ProgramSort.NAME,
) -> list[Program]:
    """Search name and description; exact university, degree and status."""
    needle = search.lower()
    wanted_university = str(university_id) if university_id not in (None, "") else None
    result = [
        p for p in programs
        if (_contains(p.program_name, needle) or _contains(p.description, needle))
        and (wanted_university is None or str(p.university_id) == wanted_university)
        and (not degree_type or p.degree_type == degree_type)
        and (not status or p.status == status)
    ]
    if sort_by == ProgramSort.NAME:
        result.sort(key=lambda p: (p.program_name or "").casefold())
    elif sort_by == ProgramSort.UNIVERSITY:
        result.sort(key=lambda p: (p.university.name if p.university else "").casefold())
    elif sort_by == ProgramSort.TUITION:
        result.sort(key=lambda p: p.tuition_fee_usd or 0)
    return result


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class CatalogService(BaseService):
    """Universities and programs.

    Parameters
    ----------
    api:
        Shared REST client.
    logger:
        Structured logger.
    """

    def __init__(self, api: ApiClient, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._api = api

    # -- Listings ------------------------------------------------------------

    def list_universities(self) -> UniversityListing:
        error: Optional[str] = None
        universities: list[University] = []
        try:
            universities = self._parse_records(University, self._api.universities.list())
        except ApiError as exc:
            error = exc.user_message("Failed to load universities")
            self._logger.warning(
                "University listing failed: %s", exc,
                extra={"event": "CATALOG_LOAD_FAILED"},
            )

        if universities:
            return UniversityListing(universities=universities)

        self._logger.info(
            "Using the bundled university catalog.",
            extra={"event": "CATALOG_FALLBACK"},
        )
        return UniversityListing(
            universities=list(FALLBACK_UNIVERSITIES),
            source=CatalogSource.FALLBACK,
            error=error,
        )

    def list_programs(self) -> ProgramListing:
        listing = ProgramListing()
        try:
            listing.programs = self._parse_records(Program, self._api.programs.list())
            listing.universities = self._parse_records(
                University, self._api.universities.list(),
            )
        except ApiError as exc:
            listing.error = exc.user_message("Failed to load programs")
            self._logger.warning(
                "Program listing failed: %s", exc,
                extra={"event": "CATALOG_LOAD_FAILED"},
            )
        return listing

    def programs_for_university(self, university_id: RecordId) -> list[Program]:
        try:
            return self._parse_records(
                Program, self._api.programs.by_university(university_id),
            )
        except ApiError as exc:
            self._logger.warning(
                "Programs for university %s failed: %s", university_id, exc,
            )
            return []

    # -- Staff actions ---------------------------------------------------------

    def save_university(
        self, form: UniversityForm, university_id: Optional[RecordId] = None,
    ) -> OperationResult:
        """Create (no id) or update (with id) a university."""
        errors = validate_university(form)
        if not errors.is_valid:
            return invalid_form(errors)
        payload = form.to_payload()
        verb = "updated" if university_id is not None else "created"
        try:
            if university_id is not None:
                self._api.universities.update(university_id, payload)
            else:
                self._api.universities.create(payload)
        except ApiError as exc:
            return self._failure(exc, "Failed to save university", "CATALOG_WRITE_FAILED")
        self._logger.info("University %s: %s", verb, form.name, extra={"event": "UNIVERSITY_SAVED"})
        return OperationResult(success=True, message=f"University {verb} successfully")

    def delete_university(self, university_id: RecordId) -> OperationResult:
        try:
            self._api.universities.delete(university_id)
        except ApiError as exc:
            return self._failure(exc, "Failed to delete university", "CATALOG_WRITE_FAILED")
        self._logger.info("University deleted: %s", university_id, extra={"event": "UNIVERSITY_DELETED"})
        return OperationResult(success=True, message="University deleted successfully")

    def save_program(
        self, form: ProgramForm, program_id: Optional[RecordId] = None,
    ) -> OperationResult:
        """Create (no id) or update (with id) a program."""
        errors = validate_program(form)
        if not errors.is_valid:
            return invalid_form(errors)
        payload = form.to_payload()
        verb = "updated" if program_id is not None else "created"
        try:
            if program_id is not None:
                self._api.programs.update(program_id, payload)
            else:
                self._api.programs.create(payload)
        except ApiError as exc:
            return self._failure(exc, "Failed to save program", "CATALOG_WRITE_FAILED")
        self._logger.info("Program %s: %s", verb, form.program_name, extra={"event": "PROGRAM_SAVED"})
        return OperationResult(success=True, message=f"Program {verb} successfully")

    def delete_program(self, program_id: RecordId) -> OperationResult:
        try:
            self._api.programs.delete(program_id)
        except ApiError as exc:
            return self._failure(exc, "Failed to delete program", "CATALOG_WRITE_FAILED")
        self._logger.info("Program deleted: %s", program_id, extra={"event": "PROGRAM_DELETED"})
        return OperationResult(success=True, message="Program deleted successfully")

