"""
Form Input Models.

Plain data carried from a screen to a service.  They are deliberately
permissive (empty strings allowed): required-field and format checks
belong to ``portal.services.validation`` so that every failure can be
reported per field instead of as a pydantic exception.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from pydantic import Field

from portal.models.base import PortalModel

RecordId = Union[int, str]


class LoginCredentials(PortalModel):
    email: str = ""
    password: str = ""


class StudentRegistration(PortalModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    phone_number: str = ""
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None


class AdminRegistration(PortalModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    role: str = "ADMIN"


class ContactForm(PortalModel):
    name: str = ""
    email: str = ""
    phone_number: str = ""
    subject: str = ""
    message_content: str = ""
    message_type: str = "GENERAL_INQUIRY"


class ApplicationForm(PortalModel):
    """The student application screen.  ``cv`` is a local file path."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone_number: str = ""
    date_of_birth: str = ""
    gender: str = ""
    country: str = ""
    address: str = ""
    previous_education: str = ""
    previous_education_country: str = ""
    gpa: Optional[float] = None
    university_id: Optional[RecordId] = None
    program_id: Optional[RecordId] = None
    application_type: str = ""
    motivation_letter: str = ""
    cv: Optional[Path] = Field(default=None, exclude=True)


class PaymentForm(PortalModel):
    """The payment-proof upload screen.  ``slip_file`` is a local file path."""

    amount: Optional[float] = None
    payment_method: str = ""
    transaction_reference: str = ""
    notes: str = ""
    slip_file: Optional[Path] = Field(default=None, exclude=True)


class UniversityForm(PortalModel):
    name: str = ""
    location: str = ""
    description: str = ""
    website: str = ""
    established: str = ""
    students: str = ""
    rating: Optional[float] = None


class ProgramForm(PortalModel):
    program_name: str = ""
    description: str = ""
    degree_type: str = ""
    status: str = "ACTIVE"
    tuition_fee_usd: Optional[float] = None
    duration_years: Optional[float] = None
    university_id: Optional[RecordId] = None

    def to_payload(self) -> dict[str, object]:
        """The backend expects the owning university as a nested object."""
        payload = self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"university_id"},
        )
        if self.university_id is not None:
            payload["university"] = {"universityId": self.university_id}
        return payload
