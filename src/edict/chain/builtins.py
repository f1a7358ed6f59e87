"""Built-in chain operations.

This module registers all built-in operations with the OperationRegistry.
``edict.chain`` calls ``register_builtin_operations()`` on import.

Categories:
- Lookup: get, dig, fetch, slice
- String: strip, lower, upper, split, presence
- Coercion: int, float, decimal, bool, str, date, datetime
- Collection: map, select, reject, compact, first, last, length
- Whitelist: permit
- Escape hatches: call, invoke

Coercions return None for values they cannot convert, so a malformed
input short-circuits the rest of the chain and is reported as blank
by the directive's clean stage.
"""

from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from edict.chain.registry import OperationDefinition, OperationRegistry
from edict.permit import permit

TRUE_STRINGS = frozenset({"true", "1", "yes", "on", "t", "y"})
FALSE_STRINGS = frozenset({"false", "0", "no", "off", "f", "n", ""})


def register_builtin_operations() -> None:
    """Register all built-in operations with the OperationRegistry."""
    _register_lookup_operations()
    _register_string_operations()
    _register_coercion_operations()
    _register_collection_operations()
    _register_misc_operations()


def _register(
    name: str,
    fn: Callable[..., Any],
    description: str,
    takes_callback: bool = False,
) -> None:
    OperationRegistry.register(
        OperationDefinition(
            name=name,
            implementation=fn,
            takes_callback=takes_callback,
            description=description,
        )
    )


# -----------------------------------------------------------------------------
# Lookup Operations
# -----------------------------------------------------------------------------


def _get(value: Any, key: Any, default: Any = None) -> Any:
    """Look up a key in a mapping, an index in a list, or an attribute."""
    if isinstance(value, Mapping):
        return value.get(key, default)
    if isinstance(value, (list, tuple)) and isinstance(key, int):
        if -len(value) <= key < len(value):
            return value[key]
        return default
    return getattr(value, str(key), default)


def _dig(value: Any, *keys: Any) -> Any:
    result = value
    for key in keys:
        if result is None:
            return None
        result = _get(result, key)
    return result


def _fetch(value: Any, key: Any) -> Any:
    return value[key]


def _slice(value: Mapping[str, Any], *keys: str) -> dict[str, Any]:
    return {key: value[key] for key in keys if key in value}


def _register_lookup_operations() -> None:
    _register("get", _get, "Value under a key, index or attribute (default None)")
    _register("dig", _dig, "Follow a path of keys; None when any link is missing")
    _register("fetch", _fetch, "Value under a key; raises KeyError when missing")
    _register("slice", _slice, "Sub-mapping with only the given keys")


# -----------------------------------------------------------------------------
# String Operations
# -----------------------------------------------------------------------------


def _strip(value: Any) -> str:
    return str(value).strip()


def _lower(value: Any) -> str:
    return str(value).lower()


def _upper(value: Any) -> str:
    return str(value).upper()


def _split(value: Any, sep: str | None = None) -> list[str]:
    return str(value).split(sep)


def _presence(value: Any) -> Any:
    """Return None for blank values so the chain short-circuits."""
    if isinstance(value, str) and value.strip() == "":
        return None
    if isinstance(value, (list, tuple, dict, set)) and len(value) == 0:
        return None
    return value


def _register_string_operations() -> None:
    _register("strip", _strip, "Trim surrounding whitespace")
    _register("lower", _lower, "Lowercase")
    _register("upper", _upper, "Uppercase")
    _register("split", _split, "Split a string into a list")
    _register("presence", _presence, "None for blank values")


# -----------------------------------------------------------------------------
# Coercion Operations
# -----------------------------------------------------------------------------


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            return int(Decimal(str(value).strip()))
        except (InvalidOperation, ValueError, OverflowError):
            return None


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        return None


def _to_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        return None
    return bool(value)


def _to_str(value: Any) -> str:
    return str(value)


def _to_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _register_coercion_operations() -> None:
    _register("int", _to_int, "Integer, or None when not numeric")
    _register("float", _to_float, "Float, or None when not numeric")
    _register("decimal", _to_decimal, "Decimal, or None when not numeric")
    _register("bool", _to_bool, "Boolean from common true/false spellings")
    _register("str", _to_str, "String conversion")
    _register("date", _to_date, "ISO 8601 date, or None")
    _register("datetime", _to_datetime, "ISO 8601 datetime, or None")


# -----------------------------------------------------------------------------
# Collection Operations
# -----------------------------------------------------------------------------


def _map(value: Any, callback: Callable[[Any], Any]) -> list[Any]:
    return [callback(item) for item in value]


def _select(value: Any, callback: Callable[[Any], Any]) -> list[Any]:
    return [item for item in value if callback(item)]


def _reject(value: Any, callback: Callable[[Any], Any]) -> list[Any]:
    return [item for item in value if not callback(item)]


def _compact(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: v for k, v in value.items() if v is not None}
    return [item for item in value if item is not None]


def _first(value: Any) -> Any:
    for item in value:
        return item
    return None


def _last(value: Any) -> Any:
    items = list(value)
    return items[-1] if items else None


def _length(value: Any) -> int:
    return len(value)


def _register_collection_operations() -> None:
    _register("map", _map, "Transform each element", takes_callback=True)
    _register("select", _select, "Keep elements the callback accepts", takes_callback=True)
    _register("reject", _reject, "Drop elements the callback accepts", takes_callback=True)
    _register("compact", _compact, "Drop None elements (or None-valued keys)")
    _register("first", _first, "First element, or None")
    _register("last", _last, "Last element, or None")
    _register("length", _length, "Number of elements")


# -----------------------------------------------------------------------------
# Whitelist and Escape Hatches
# -----------------------------------------------------------------------------


def _permit(
    value: Mapping[str, Any],
    attributes: Any,
    subschema: Mapping[str, Any] | None = None,
) -> dict[str, Any] | None:
    if not isinstance(value, Mapping):
        return None
    return permit(value, attributes, subschema)


def _call(value: Any, callback: Callable[[Any], Any]) -> Any:
    return callback(value)


def _invoke(value: Any, method: str, *args: Any) -> Any:
    return getattr(value, method)(*args)


def _register_misc_operations() -> None:
    _register("permit", _permit, "Whitelist attributes and nested associations")
    _register("call", _call, "Apply a function to the value", takes_callback=True)
    _register("invoke", _invoke, "Call a named method on the value")
