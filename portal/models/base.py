"""
Base Model for Backend Payloads.

Every payload model inherits the camelCase alias generator so that
``Principal.model_validate({"userType": "ADMIN", ...})`` and
``Principal(user_type="ADMIN", ...)`` are both accepted, and
``model_dump(by_alias=True)`` reproduces the backend's wire keys.
"""

from __future__ import annotations

from pydantic import BaseModel

from portal.utils.string_helpers import to_camel_case


class PortalModel(BaseModel):
    """Pydantic base for all records exchanged with the backend."""

    model_config = {
        "alias_generator": to_camel_case,
        "populate_by_name": True,
        "extra": "ignore",
        "from_attributes": True,
    }

    def to_payload(self) -> dict[str, object]:
        """Serialise to the backend's camelCase JSON shape, dropping ``None``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
