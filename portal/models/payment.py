"""
Payment Model.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import AliasChoices, Field

from portal.models.application import Application
from portal.models.base import PortalModel

RecordId = Union[int, str]


class Payment(PortalModel):
    """An uploaded payment proof awaiting (or past) staff review."""

    payment_id: Optional[RecordId] = Field(
        default=None,
        validation_alias=AliasChoices("paymentId", "payment_id", "id"),
    )
    amount: Optional[float] = None
    payment_method: Optional[str] = None
    transaction_reference: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    slip_file_path: Optional[str] = None
    uploaded_at: Optional[str] = None
    application: Optional[Application] = None
