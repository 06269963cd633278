"""
Principal Model.

The authenticated identity held by ``SessionManager``.  ``student_id``
and ``admin_id`` are compatibility aliases of ``user_id`` for callers
that expect a type-specific identifier; only the alias matching
``user_type`` is ever populated.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import model_validator

from portal.models.base import PortalModel
from portal.models.enums import NotificationAudience, UserType

UserId = Union[int, str]

# Exactly the fields written to durable storage.
_STORED_FIELDS: frozenset[str] = frozenset({
    "email",
    "user_type",
    "role",
    "user_id",
    "first_name",
    "last_name",
})


class Principal(PortalModel):
    """Represents the signed-in student or admin."""

    email: str
    user_type: UserType
    role: Optional[str] = None
    user_id: UserId
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    student_id: Optional[UserId] = None
    admin_id: Optional[UserId] = None

    @model_validator(mode="after")
    def _populate_aliases(self) -> "Principal":
        self.student_id = self.user_id if self.user_type == UserType.STUDENT else None
        self.admin_id = self.user_id if self.user_type == UserType.ADMIN else None
        return self

    @property
    def audience(self) -> NotificationAudience:
        """The notification inbox this principal reads."""
        if self.user_type == UserType.ADMIN:
            return NotificationAudience.ADMIN
        return NotificationAudience.STUDENT

    @property
    def display_name(self) -> str:
        return self.first_name or "User"

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def to_storage_json(self) -> str:
        """Serialise the stored subset (no aliases) as camelCase JSON."""
        return self.model_dump_json(by_alias=True, include=set(_STORED_FIELDS))
