"""Repository helpers used by model loaders.

Looks up stored records by filter and builds new ones, so a directive's
loader can resolve an existing entity or initialize a fresh one before
the validate and persist stages run.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from edict.models.record import Record
from edict.persistence.adapter import StorageAdapter

R = TypeVar("R", bound=Record)

Filters = Mapping[str, Any] | Sequence[Mapping[str, Any]]


class Repository(Generic[R]):
    """Finder and factory for one record class."""

    def __init__(self, storage: StorageAdapter, record_class: type[R]):
        self.storage = storage
        self.record_class = record_class

    def ensure_table(self) -> None:
        """Create the backing table if needed."""
        self.storage.ensure_table(
            self.record_class.table,
            self.record_class.columns(),
            self.record_class.primary_key,
        )

    def new(self, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> R:
        return self.record_class(self.storage, attributes, **kwargs)

    def find_by(self, filters: Mapping[str, Any]) -> R | None:
        row = self.storage.find_by(self.record_class.table, dict(filters))
        if row is None:
            return None
        return self.record_class.from_row(self.storage, row)

    def all(self, filters: Mapping[str, Any] | None = None) -> list[R]:
        rows = self.storage.find_all(self.record_class.table, dict(filters or {}))
        return [self.record_class.from_row(self.storage, row) for row in rows]

    def find_one(self, filters: Filters) -> R | None:
        """First record matching ``filters``.

        A list of filter mappings is tried in order; the first one that
        matches wins.
        """
        if isinstance(filters, Mapping):
            return self.find_by(filters)
        for candidate in filters:
            found = self.find_by(candidate)
            if found is not None:
                return found
        return None

    def find_and_init(
        self,
        filters: Filters,
        attributes: Mapping[str, Any] | None = None,
    ) -> R:
        """Find a record (or build one) and assign ``attributes`` to it.

        ``attributes`` defaults to the filters themselves (the first
        filter when a list is given).
        """
        instance = self.find_one(filters) or self.new()

        if attributes is None:
            attributes = filters if isinstance(filters, Mapping) else (filters[0] if filters else {})
        instance.assign_attributes(attributes)
        return instance

    def find_or_init(self, filters: Filters, attributes: Mapping[str, Any]) -> R:
        """Return the stored record untouched, or a new one built from ``attributes``."""
        instance = self.find_one(filters)
        if instance is not None:
            return instance
        return self.new(attributes)
