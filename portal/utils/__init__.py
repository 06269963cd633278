"""Shared utility helpers for the portal client."""

from portal.utils.string_helpers import JsonValue, to_camel_case

__all__ = [
    "JsonValue",
    "to_camel_case",
]
