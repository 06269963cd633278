"""
Client-Side Form Validation.

Every check runs before any request is sent and reports failures per
field through ``FormErrors``; nothing here touches the network.  Field
keys use the backend's camelCase names so a front-end can attach each
message to the matching input.
"""

from __future__ import annotations

import re
from typing import Optional

from portal.models.forms import (
    AdminRegistration,
    ApplicationForm,
    ContactForm,
    LoginCredentials,
    PaymentForm,
    ProgramForm,
    StudentRegistration,
    UniversityForm,
)
from portal.models.results import FormErrors

_EMAIL_RE: re.Pattern[str] = re.compile(r"\S+@\S+\.\S+")

_MIN_PASSWORD_LENGTH: int = 6


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_email(email: str, errors: dict[str, str]) -> None:
    if _blank(email):
        errors["email"] = "Email is required"
    elif not _EMAIL_RE.search(email):
        errors["email"] = "Email is invalid"


def _require(errors: dict[str, str], field: str, value: Optional[str], message: str) -> None:
    if _blank(value):
        errors[field] = message


def validate_login(credentials: LoginCredentials) -> FormErrors:
    errors: dict[str, str] = {}
    _check_email(credentials.email, errors)
    _require(errors, "password", credentials.password, "Password is required")
    return FormErrors(errors=errors)


def _validate_registration(
    first_name: str, last_name: str, email: str, password: str,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    _require(errors, "firstName", first_name, "First name is required")
    _require(errors, "lastName", last_name, "Last name is required")
    _check_email(email, errors)
    if _blank(password):
        errors["password"] = "Password is required"
    elif len(password) < _MIN_PASSWORD_LENGTH:
        errors["password"] = (
            f"Password must be at least {_MIN_PASSWORD_LENGTH} characters"
        )
    return errors


def validate_student_registration(data: StudentRegistration) -> FormErrors:
    errors = _validate_registration(
        data.first_name, data.last_name, data.email, data.password,
    )
    _require(errors, "phoneNumber", data.phone_number, "Phone number is required")
    return FormErrors(errors=errors)


def validate_admin_registration(data: AdminRegistration) -> FormErrors:
    return FormErrors(errors=_validate_registration(
        data.first_name, data.last_name, data.email, data.password,
    ))


def validate_contact(form: ContactForm) -> FormErrors:
    errors: dict[str, str] = {}
    _require(errors, "name", form.name, "Name is required")
    _check_email(form.email, errors)
    _require(errors, "phoneNumber", form.phone_number, "Phone number is required")
    _require(errors, "subject", form.subject, "Subject is required")
    _require(errors, "messageContent", form.message_content, "Message is required")
    return FormErrors(errors=errors)


def validate_application(form: ApplicationForm) -> FormErrors:
    """The student application form.  A CV file must be attached."""
    errors: dict[str, str] = {}
    _require(errors, "firstName", form.first_name, "First name is required")
    _require(errors, "lastName", form.last_name, "Last name is required")
    _check_email(form.email, errors)
    _require(errors, "phoneNumber", form.phone_number, "Phone number is required")
    _require(errors, "dateOfBirth", form.date_of_birth, "Date of birth is required")
    _require(errors, "gender", form.gender, "Gender is required")
    _require(errors, "country", form.country, "Country is required")
    if form.program_id in (None, ""):
        errors["program"] = "Program selection is required"
    if form.university_id in (None, ""):
        errors["university"] = "University selection is required"
    if form.cv is None:
        errors["cv"] = "CV upload is required"
    elif not form.cv.is_file():
        errors["cv"] = "CV file not found"
    _require(
        errors, "motivationLetter", form.motivation_letter,
        "Motivation letter is required",
    )
    return FormErrors(errors=errors)


def validate_payment(form: PaymentForm) -> FormErrors:
    errors: dict[str, str] = {}
    if form.slip_file is None:
        errors["slipFile"] = "Payment slip is required"
    elif not form.slip_file.is_file():
        errors["slipFile"] = "Payment slip file not found"
    if form.amount is None or form.amount <= 0:
        errors["amount"] = "Valid amount is required"
    _require(errors, "paymentMethod", form.payment_method, "Payment method is required")
    _require(
        errors, "transactionReference", form.transaction_reference,
        "Transaction reference is required",
    )
    return FormErrors(errors=errors)


def validate_university(form: UniversityForm) -> FormErrors:
    errors: dict[str, str] = {}
    _require(errors, "name", form.name, "University name is required")
    _require(errors, "location", form.location, "Location is required")
    _require(errors, "description", form.description, "Description is required")
    return FormErrors(errors=errors)


def validate_program(form: ProgramForm) -> FormErrors:
    errors: dict[str, str] = {}
    _require(errors, "programName", form.program_name, "Program name is required")
    if form.university_id in (None, ""):
        errors["universityId"] = "Please select a university"
    if form.duration_years is None or form.duration_years <= 0:
        errors["durationYears"] = "Duration must be greater than 0"
    if form.tuition_fee_usd is None or form.tuition_fee_usd < 0:
        errors["tuitionFeeUsd"] = "Tuition fee must be 0 or greater"
    _require(errors, "description", form.description, "Description is required")
    return FormErrors(errors=errors)
