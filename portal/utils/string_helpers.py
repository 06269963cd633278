"""
String Helpers.

The backend speaks camelCase JSON; the Python side is snake_case.  The
pydantic models use :func:`to_camel_case` as their alias generator, so
key conversion between the two flows through here.
"""

from __future__ import annotations

from typing import Union

__all__ = [
    "JsonValue",
    "to_camel_case",
]

JsonValue = Union[
    str,
    int,
    float,
    bool,
    None,
    dict[str, "JsonValue"],
    list["JsonValue"],
]


def to_camel_case(name: str) -> str:
    """Convert a snake_case string to lower camelCase.

    ::

        user_id          -> userId
        tuition_fee_usd  -> tuitionFeeUsd
        email            -> email
    """
    head, *tail = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in tail)
