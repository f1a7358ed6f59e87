"""Aggregate functions used by ``UnitOfWork.denormalize``.

Each aggregate takes a collection of records (or mappings) and a
subfield name. ``None`` subfield values are skipped.
"""

from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal
from typing import Any


def field_value(item: Any, name: str) -> Any:
    """Read ``name`` from a mapping-like or attribute-bearing item."""
    if isinstance(item, Mapping):
        return item.get(name)
    if hasattr(item, "__getitem__") and not isinstance(item, (str, bytes, list, tuple)):
        try:
            return item[name]
        except KeyError:
            return None
    return getattr(item, name, None)


def _values(collection: Iterable[Any], subfield: str) -> list[Any]:
    return [v for v in (field_value(item, subfield) for item in collection) if v is not None]


def _total(values: list[Any]) -> Any:
    total = values[0]
    for value in values[1:]:
        total = total + value
    return total


def _sum(collection: Iterable[Any], subfield: str) -> Any:
    values = _values(collection, subfield)
    return _total(values) if values else 0


def _count(collection: Iterable[Any], subfield: str | None = None) -> int:
    if subfield is None:
        return len(list(collection))
    return len(_values(collection, subfield))


def _min(collection: Iterable[Any], subfield: str) -> Any:
    values = _values(collection, subfield)
    return min(values) if values else None


def _max(collection: Iterable[Any], subfield: str) -> Any:
    values = _values(collection, subfield)
    return max(values) if values else None


def _avg(collection: Iterable[Any], subfield: str) -> Any:
    values = _values(collection, subfield)
    if not values:
        return None
    total = _total(values)
    if isinstance(total, Decimal):
        return total / Decimal(len(values))
    return total / len(values)


AGGREGATES: dict[str, Callable[..., Any]] = {
    "sum": _sum,
    "count": _count,
    "min": _min,
    "max": _max,
    "avg": _avg,
}
