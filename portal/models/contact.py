"""
Contact Message Model.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import AliasChoices, Field

from portal.models.base import PortalModel

RecordId = Union[int, str]


class ContactMessage(PortalModel):
    """A visitor's message from the public contact form."""

    message_id: Optional[RecordId] = Field(
        default=None,
        validation_alias=AliasChoices("messageId", "message_id", "id"),
    )
    name: str = ""
    email: str = ""
    phone_number: Optional[str] = None
    subject: str = ""
    message_content: str = ""
    message_type: Optional[str] = None
    is_read: bool = False
    is_responded: bool = False
    response_content: Optional[str] = None
    created_at: Optional[str] = None
