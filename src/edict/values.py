"""Value predicates shared by directives and records."""

from collections.abc import Mapping
from typing import Any


def is_blank(value: Any) -> bool:
    """True for None, whitespace-only strings and empty collections.

    ``False`` and ``0`` are present values.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset, Mapping)):
        return len(value) == 0
    return False


def is_collection(value: Any) -> bool:
    """True for list-like values that should be checked member by member.

    Strings, bytes and mappings are iterable but are single values here,
    and so is anything that validates itself.
    """
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    if hasattr(value, "invalid"):
        return False
    try:
        iter(value)
    except TypeError:
        return False
    return True
