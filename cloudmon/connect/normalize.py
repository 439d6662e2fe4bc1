"""
Response shape normalization.

Providers disagree on whether a list endpoint returns a bare array, an
object with a named array member, or an envelope holding several arrays.
These helpers are total: malformed input yields an empty list, never an
exception.
"""

from collections.abc import Mapping
from typing import Any, Optional


def to_sequence(value: Any) -> list:
    """Coerce a decoded JSON value into a list.

    Lists are returned unchanged. For a mapping, every list-valued member is
    concatenated in insertion order. Anything else becomes `[]`.
    """
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        arrays = [v for v in value.values() if isinstance(v, list)]
        if len(arrays) == 1:
            return arrays[0]
        return [item for array in arrays for item in array]
    return []


def extract(container: Any, key: Optional[str] = None) -> list:
    """Normalize `container[key]`, falling back to the whole container."""
    if not container:
        return []
    if not key or not isinstance(container, Mapping):
        return to_sequence(container)
    value = container.get(key)
    return to_sequence(container) if value is None else to_sequence(value)


def pick(mapping: Any, *keys: str, default=None):
    """First value among `keys` that is neither missing, None nor `""`."""
    if not isinstance(mapping, Mapping):
        return default
    for key in keys:
        value = mapping.get(key)
        if value not in (None, ""):
            return value
    return default


def as_mapping(value: Any) -> dict:
    return value if isinstance(value, Mapping) else {}
