"""POST policy condition entries.

A condition is either an exact match, ``{"acl": "private"}``, or a
three-element ``[operator, field, value]`` list such as
``["starts-with", "$key", "uploads/"]`` or
``["content-length-range", 0, 10485760]``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from s3_direct_upload.errors import EncodingError

Condition = dict[str, Any] | list[Any]


def exact(field: str, value: Any) -> dict[str, Any]:
    return {field: value}


def starts_with(field: str, prefix: str) -> list[Any]:
    if not field.startswith("$"):
        field = f"${field}"
    return ["starts-with", field, prefix]


def content_length_range(min_bytes: int, max_bytes: int) -> list[Any]:
    if min_bytes < 0 or max_bytes < min_bytes:
        raise EncodingError(f"Invalid content-length-range: {min_bytes}..{max_bytes}")
    return ["content-length-range", min_bytes, max_bytes]


def normalize_condition(condition: object) -> Condition:
    """Return a JSON-ready copy of ``condition`` or raise EncodingError."""
    if isinstance(condition, Mapping):
        if len(condition) != 1:
            raise EncodingError(f"Exact-match condition must have exactly one key, got {len(condition)}")
        (key, value), = condition.items()
        if not isinstance(key, str):
            raise EncodingError(f"Condition key must be a string, got {type(key).__name__}")
        return {key: value}

    if isinstance(condition, Sequence) and not isinstance(condition, (str, bytes, bytearray)):
        if len(condition) != 3:
            raise EncodingError(f"Operator condition must have 3 elements, got {len(condition)}")
        if not isinstance(condition[0], str):
            raise EncodingError("Operator condition must start with an operator name")
        return list(condition)

    raise EncodingError(f"Unsupported condition type: {type(condition).__name__}")


def normalize_conditions(conditions: Iterable[object]) -> list[Condition]:
    return [normalize_condition(condition) for condition in conditions]
