"""Lightweight records bound to a storage adapter.

A record is the unit the unit of work saves and destroys. It is not an
ORM: it knows its table, its fields, which fields are required, and its
has-many associations, and it can validate itself into an ErrorTree.

Example:
    class LineItem(Record):
        table = "line_items"
        fields = {"id": "id", "order_id": "reference", "price": "decimal"}
        required = ("price",)

    class Order(Record):
        table = "orders"
        fields = {"id": "id", "code": "string", "total": "decimal"}
        required = ("code",)
        has_many = {"line_items": Association(LineItem, "order_id")}

    order = Order(storage, {"code": "A1", "line_items_attributes": [{"price": 3}]})
    order.save()
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from edict.errors import ErrorTree
from edict.permit import NESTED_SUFFIX
from edict.persistence.adapter import StorageAdapter
from edict.values import is_blank

DESTROY_FLAG = "_destroy"

TRUTHY_FLAGS = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class Association:
    """A has-many association to another record class."""

    record_class: type[Record]
    foreign_key: str


class RecordList(list):
    """Loaded members of a has-many association."""

    def live(self) -> list[Record]:
        """Members not marked for destruction."""
        return [r for r in self if not r.marked_for_destruction()]


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_FLAGS
    return bool(value)


class Record:
    """Base class for stored entities."""

    table: ClassVar[str] = ""
    primary_key: ClassVar[str] = "id"
    fields: ClassVar[dict[str, str]] = {}
    required: ClassVar[tuple[str, ...]] = ()
    has_many: ClassVar[dict[str, Association]] = {}

    def __init__(
        self,
        storage: StorageAdapter,
        attributes: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ):
        state = self.__dict__
        state["_storage"] = storage
        state["_attributes"] = {name: None for name in self.columns()}
        state["_associations"] = {}
        state["_persisted"] = False
        state["_marked_for_destruction"] = False
        state["errors"] = ErrorTree()

        self.assign_attributes({**(attributes or {}), **kwargs})

    @classmethod
    def from_row(cls, storage: StorageAdapter, row: Mapping[str, Any]) -> Record:
        """Wrap a stored row."""
        record = cls(storage)
        columns = cls.columns()
        record._attributes.update({k: v for k, v in row.items() if k in columns})
        record.__dict__["_persisted"] = True
        return record

    @classmethod
    def columns(cls) -> dict[str, str]:
        """Field types, including the primary key."""
        return {cls.primary_key: "id", **cls.fields}

    # ------------------------------------------------------------------
    # Attribute access
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        cls = type(self)
        if name in cls.fields or name == cls.primary_key:
            return self.__dict__["_attributes"].get(name)
        if name in cls.has_many:
            return self.association(name)
        raise AttributeError(f"'{cls.__name__}' has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        cls = type(self)
        if name in cls.fields or name == cls.primary_key:
            self._attributes[name] = value
        elif name in cls.has_many:
            self._set_association(name, value)
        else:
            super().__setattr__(name, value)

    def __getitem__(self, name: str) -> Any:
        if name not in self.fields and name != self.primary_key:
            raise KeyError(name)
        return self._attributes.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        if name not in self.fields and name != self.primary_key:
            raise KeyError(name)
        self._attributes[name] = value

    @property
    def id(self) -> Any:
        return self._attributes.get(self.primary_key)

    def assign_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Assign fields and nested ``<association>_attributes`` input.

        Raises:
            AttributeError: For names that are neither fields nor associations
        """
        cls = type(self)
        for key, value in attributes.items():
            if key == DESTROY_FLAG:
                if _flag(value):
                    self.mark_for_destruction()
            elif key in cls.fields or key == cls.primary_key:
                self._attributes[key] = value
            elif key in cls.has_many:
                self._set_association(key, value)
            elif key.endswith(NESTED_SUFFIX) and key[: -len(NESTED_SUFFIX)] in cls.has_many:
                self._assign_nested(key[: -len(NESTED_SUFFIX)], value)
            else:
                raise AttributeError(f"Unknown attribute '{key}' for {cls.__name__}")

    # ------------------------------------------------------------------
    # Associations
    # ------------------------------------------------------------------

    def association(self, name: str) -> RecordList:
        """Members of a has-many association, loaded on first access."""
        loaded = self._associations.get(name)
        if loaded is not None:
            return loaded

        assoc = self.has_many[name]
        members = RecordList()
        if not self.new_record():
            rows = self._storage.find_all(
                assoc.record_class.table, {assoc.foreign_key: self.id}
            )
            members.extend(assoc.record_class.from_row(self._storage, row) for row in rows)
        self._associations[name] = members
        return members

    def _set_association(self, name: str, records: Iterable[Record]) -> None:
        self._associations[name] = RecordList(records)

    def _assign_nested(self, name: str, value: Any) -> None:
        assoc = self.has_many[name]
        members = self.association(name)

        if isinstance(value, Mapping):
            items: Iterable[Any] = [value]
        else:
            items = value or []

        pk = assoc.record_class.primary_key
        for attrs in items:
            existing = None
            if attrs.get(pk) is not None:
                existing = next((m for m in members if m.id == attrs[pk]), None)
            if existing is not None:
                existing.assign_attributes(attrs)
            else:
                members.append(assoc.record_class(self._storage, attrs))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def check(self) -> None:
        """Add record-specific errors to ``self.errors``. Override in subclasses."""

    def validate(self) -> bool:
        """Recompute ``errors`` from required fields, ``check`` and associations."""
        errors = ErrorTree()
        self.__dict__["errors"] = errors

        for name in self.required:
            if is_blank(self._attributes.get(name)):
                errors.add(name, "is required")

        self.check()

        for name, members in self._associations.items():
            for index, member in enumerate(members):
                if member.marked_for_destruction():
                    continue
                if member.invalid():
                    errors.merge_at(name, index, member.errors)

        return errors.is_empty()

    def valid(self) -> bool:
        return self.validate()

    def invalid(self) -> bool:
        return not self.validate()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def new_record(self) -> bool:
        return not self._persisted

    def mark_for_destruction(self) -> None:
        self.__dict__["_marked_for_destruction"] = True

    def marked_for_destruction(self) -> bool:
        return self._marked_for_destruction

    def snapshot(self) -> Callable[[], None]:
        """Capture storage state; the returned function restores it.

        Covers the stored flag, the primary key and the loaded association
        lists, recursively. A unit of work calls it before writing so a
        rollback leaves records as they were before the batch.
        """
        pk = self.primary_key
        persisted = self._persisted
        id = self._attributes.get(pk)
        associations = {name: list(members) for name, members in self._associations.items()}
        children = [
            member.snapshot()
            for members in associations.values()
            for member in members
        ]

        def restore() -> None:
            for restore_child in children:
                restore_child()
            self.__dict__["_persisted"] = persisted
            self._attributes[pk] = id
            self._associations.clear()
            self._associations.update(
                {name: RecordList(members) for name, members in associations.items()}
            )

        return restore

    def save(self) -> bool:
        """Insert or update this record and its loaded associations."""
        if not self.validate():
            return False

        pk = self.primary_key
        data = {k: v for k, v in self._attributes.items() if k != pk}

        if self.new_record():
            row = self._storage.insert(self.table, {pk: self.id, **data}, pk)
            self._attributes[pk] = row[pk]
            self.__dict__["_persisted"] = True
        elif not self._storage.update(self.table, pk, self.id, data):
            return False

        return self._save_associations()

    def create(self) -> bool:
        """Insert this record; False when it is already stored."""
        if not self.new_record():
            return False
        return self.save()

    def update(self) -> bool:
        """Update this record; False when it was never stored."""
        if self.new_record():
            return False
        return self.save()

    def destroy(self) -> bool:
        """Delete this record. Unsaved records have nothing to delete."""
        if self.new_record():
            return True
        deleted = self._storage.delete(self.table, self.primary_key, self.id)
        if deleted:
            self.__dict__["_persisted"] = False
        return deleted

    def _save_associations(self) -> bool:
        for name, members in self._associations.items():
            foreign_key = self.has_many[name].foreign_key
            kept = RecordList()
            for member in members:
                if member.marked_for_destruction():
                    if not member.destroy():
                        return False
                    continue
                member[foreign_key] = self.id
                if not member.save():
                    return False
                kept.append(member)
            self._associations[name] = kept
        return True

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        result = dict(self._attributes)
        result[self.primary_key] = self.id
        for name, members in self._associations.items():
            result[name] = [m.to_dict() for m in members.live()]
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"
