"""
University & Program Models.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import AliasChoices, Field

from portal.models.base import PortalModel

RecordId = Union[int, str]


class University(PortalModel):
    """A partner university.  ``students`` is display text such as ``"15000+"``."""

    university_id: Optional[RecordId] = Field(
        default=None,
        validation_alias=AliasChoices("universityId", "university_id", "id"),
    )
    name: str = ""
    location: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    established: Optional[str] = None
    students: Optional[str] = None
    rating: Optional[float] = None
    image: Optional[str] = None
    programs: list["Program"] = Field(default_factory=list)

    @property
    def student_count(self) -> int:
        """Numeric value of ``students`` with non-digits stripped (0 if none)."""
        digits = "".join(ch for ch in (self.students or "") if ch.isdigit())
        return int(digits) if digits else 0


class Program(PortalModel):
    """A study program offered by one university."""

    program_id: Optional[RecordId] = Field(
        default=None,
        validation_alias=AliasChoices("programId", "program_id", "id"),
    )
    program_name: str = ""
    description: Optional[str] = None
    degree_type: Optional[str] = None
    status: Optional[str] = None
    tuition_fee_usd: Optional[float] = None
    duration_years: Optional[float] = None
    university: Optional[University] = None

    @property
    def university_id(self) -> Optional[RecordId]:
        return self.university.university_id if self.university else None


University.model_rebuild()
