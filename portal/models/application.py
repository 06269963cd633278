"""
Student & Application Models.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import AliasChoices, Field

from portal.models.base import PortalModel
from portal.models.catalog import Program, University

RecordId = Union[int, str]


class Student(PortalModel):
    """A student record.

    Older backend builds embed a single application on the student itself
    (``application_status``, ``program``, ``university``); those fields are
    used as a fallback when the applications endpoint is unavailable.
    """

    student_id: Optional[RecordId] = Field(
        default=None,
        validation_alias=AliasChoices("studentId", "student_id", "id"),
    )
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    previous_education: Optional[str] = None
    previous_education_country: Optional[str] = None
    gpa: Optional[float] = None
    application_id: Optional[RecordId] = None
    application_status: Optional[str] = None
    application_date: Optional[str] = None
    program: Optional[Program] = None
    university: Optional[University] = None


class Application(PortalModel):
    """A student's application to one program."""

    application_id: Optional[RecordId] = None
    application_status: Optional[str] = None
    application_date: Optional[str] = None
    application_type: Optional[str] = None
    motivation_letter: Optional[str] = None
    cv_file_path: Optional[str] = None
    student: Optional[Student] = None
    program: Optional[Program] = None
    university: Optional[University] = None

    @classmethod
    def from_student_record(cls, student: Student) -> "Application":
        """Shape a legacy students-with-applications record as an application."""
        return cls(
            application_id=student.application_id,
            application_status=student.application_status,
            application_date=student.application_date,
            student=student,
            program=student.program,
            university=student.university,
        )
