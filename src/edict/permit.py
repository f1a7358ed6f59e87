"""Whitelist filtering of raw nested input.

Used to prepare the attributes handed to model loaders: only explicitly
allowed fields survive, and allowed nested associations are re-keyed as
``<name>_attributes`` so a record's ``assign_attributes`` treats them as
nested-association input.

Example:
    permit(
        {"code": "A1", "admin": True, "line_items": [{"qty": 2, "price": 9}]},
        ["code"],
        {"line_items": ["qty"]},
    )
    # {"code": "A1", "line_items_attributes": [{"qty": 2}]}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

NESTED_SUFFIX = "_attributes"


def _as_list(allowed: Any) -> list[Any]:
    if allowed is None:
        return []
    if isinstance(allowed, (str, Mapping)):
        return [allowed]
    return list(allowed)


def _is_scalar(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (Mapping, list, tuple, set)):
        return False
    return True


def _is_permitted_value(value: Any) -> bool:
    """Scalars and lists of scalars pass a plain attribute whitelist."""
    if isinstance(value, (list, tuple)):
        return all(_is_scalar(v) for v in value)
    return _is_scalar(value)


def split_allowed(allowed: Any) -> tuple[list[str], dict[str, Any]]:
    """Split an allowed-spec into plain names and nested sub-specs.

    ``allowed`` is a name, a mapping of nested sub-specs, or a list
    mixing both, e.g. ``["qty", {"discounts": ["amount"]}]``.
    """
    names: list[str] = []
    nested: dict[str, Any] = {}

    if allowed is None:
        return names, nested
    if isinstance(allowed, str):
        return [allowed], nested
    if isinstance(allowed, Mapping):
        nested.update(allowed)
        return names, nested

    for item in allowed:
        if isinstance(item, Mapping):
            nested.update(item)
        else:
            names.append(str(item))
    return names, nested


def permit(
    parent: Mapping[str, Any],
    attributes: Iterable[Any],
    subschema: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Filter ``parent`` down to ``attributes`` plus nested ``subschema``.

    Args:
        parent: Raw nested input
        attributes: Allowed top-level names (may also carry nested specs)
        subschema: ``{association: allowed}`` for nested input

    Returns:
        A new dict; ``parent`` is never modified.
    """
    names, nested = split_allowed(_as_list(attributes))
    if subschema:
        nested.update(subschema)

    whitelisted: dict[str, Any] = {}
    for name in names:
        if name in parent and _is_permitted_value(parent[name]):
            whitelisted[name] = parent[name]

    for key, allowed in nested.items():
        child = parent.get(key)
        if child is None:
            continue

        if isinstance(child, Mapping):
            whitelisted[f"{key}{NESTED_SUFFIX}"] = permit(child, _as_list(allowed))
        elif isinstance(child, (list, tuple)):
            whitelisted[f"{key}{NESTED_SUFFIX}"] = [
                permit(member, _as_list(allowed))
                for member in child
                if isinstance(member, Mapping)
            ]

    return whitelisted
