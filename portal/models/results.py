"""
Service Result Models.

Pydantic models and enumerations for the request/response contracts
between the service layer and whatever front-end drives it.  Every
service operation returns one of these rather than raising, so callers
can render inline errors without a ``try``/``except``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional, Union

from pydantic import BaseModel, Field

from portal.models.enums import UserType

RecordId = Union[int, str]


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Categories of authentication failure."""

    VALIDATION_ERROR = "validation_error"
    BACKEND_REJECTED = "backend_rejected"
    NETWORK_ERROR = "network_error"
    WRONG_PORTAL = "wrong_portal"
    UNKNOWN_ERROR = "unknown_error"


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class FormErrors(BaseModel):
    """Per-field client-side validation failures.

    An empty ``errors`` mapping means the form may be submitted.
    """

    errors: dict[str, str] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def first_message(self) -> Optional[str]:
        return next(iter(self.errors.values()), None)


# ---------------------------------------------------------------------------
# Unified auth response
# ---------------------------------------------------------------------------

class AuthResult(BaseModel):
    """Unified response for login and registration.

    On a successful login it carries the same principal fields the
    session store just persisted, so callers can branch on ``user_type``
    immediately instead of re-reading session state.

    Attributes
    ----------
    success:
        ``True`` when the operation completed without error.
    error_code:
        Structured error category (``None`` on success).
    error_message:
        Human-readable error description (``None`` on success).
    field:
        Form field the error belongs to, when it is field-specific.
    field_errors:
        All client-side validation failures, when validation blocked the
        request.
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    field: Optional[str] = None
    field_errors: dict[str, str] = Field(default_factory=dict)
    token: Optional[str] = Field(default=None, repr=False)
    user_type: Optional[UserType] = None
    role: Optional[str] = None
    email: Optional[str] = None
    user_id: Optional[RecordId] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Generic operation response
# ---------------------------------------------------------------------------

class OperationResult(BaseModel):
    """Outcome of a create/update/delete or bulk action.

    Bulk actions list the ids that went through in ``succeeded`` and those
    that did not in ``failed``; ``success`` is ``False`` if anything failed.
    """

    success: bool
    message: str = ""
    succeeded: list[RecordId] = Field(default_factory=list)
    failed: list[RecordId] = Field(default_factory=list)
    field_errors: dict[str, str] = Field(default_factory=dict)
