"""In-memory storage adapter.

Keeps tables as dicts of rows keyed by primary key. Transactions take a
snapshot on entry and restore it when an exception escapes, which makes
this adapter a faithful fake for atomicity checks: ``attempted`` logs
every write ever tried, ``committed`` only the writes that survived.
"""

import copy
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from edict.exceptions import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteRecord:
    """One attempted write."""

    action: str  # "insert" | "update" | "delete"
    table: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class _FailureRule:
    action: str | None
    table: str | None

    def matches(self, action: str, table: str) -> bool:
        if self.action is not None and self.action != action:
            return False
        if self.table is not None and self.table != table:
            return False
        return True


class MemoryStorage:
    """Dict-backed storage with snapshot rollback."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[Any, dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}
        self._depth = 0
        self._pending: list[WriteRecord] = []
        self._failure_rules: list[_FailureRule] = []
        self.attempted: list[WriteRecord] = []
        self.committed: list[WriteRecord] = []

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Open (or join) a transaction."""
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = copy.deepcopy((self._tables, self._sequences))
        self._depth = 1
        self._pending = []
        try:
            yield
        except BaseException:
            self._tables, self._sequences = snapshot
            logger.debug("Rolled back %d write(s)", len(self._pending))
            raise
        else:
            self.committed.extend(self._pending)
            logger.debug("Committed %d write(s)", len(self._pending))
        finally:
            self._depth = 0
            self._pending = []

    # ------------------------------------------------------------------
    # Fault injection
    # ------------------------------------------------------------------

    def fail_on(self, action: str | None = None, table: str | None = None) -> None:
        """Make matching writes raise StorageError. Primarily for testing."""
        self._failure_rules.append(_FailureRule(action=action, table=table))

    def _attempt(self, action: str, table: str, data: dict[str, Any]) -> WriteRecord:
        write = WriteRecord(action=action, table=table, data=dict(data))
        self.attempted.append(write)

        for rule in self._failure_rules:
            if rule.matches(action, table):
                raise StorageError(f"Simulated {action} failure on '{table}'")
        return write

    def _record(self, write: WriteRecord) -> None:
        """Log a write that took effect."""
        if self._depth:
            self._pending.append(write)
        else:
            self.committed.append(write)

    # ------------------------------------------------------------------
    # Tables and rows
    # ------------------------------------------------------------------

    def ensure_table(
        self,
        table: str,
        columns: dict[str, str],
        primary_key: str = "id",
    ) -> None:
        self._tables.setdefault(table, {})

    def insert(
        self, table: str, data: dict[str, Any], primary_key: str = "id"
    ) -> dict[str, Any]:
        write = self._attempt("insert", table, data)

        rows = self._tables.setdefault(table, {})
        row = dict(data)
        next_id = None
        if row.get(primary_key) is None:
            next_id = self._sequences.get(table, 0) + 1
            row[primary_key] = next_id
        if row[primary_key] in rows:
            raise StorageError(
                f"Duplicate primary key {row[primary_key]!r} in '{table}'"
            )
        if next_id is not None:
            self._sequences[table] = next_id
        rows[row[primary_key]] = row
        self._record(write)
        return dict(row)

    def update(
        self, table: str, primary_key: str, id: Any, data: dict[str, Any]
    ) -> bool:
        write = self._attempt("update", table, {primary_key: id, **data})

        row = self._tables.get(table, {}).get(id)
        if row is None:
            return False
        row.update({k: v for k, v in data.items() if k != primary_key})
        self._record(write)
        return True

    def delete(self, table: str, primary_key: str, id: Any) -> bool:
        write = self._attempt("delete", table, {primary_key: id})

        rows = self._tables.get(table, {})
        if id not in rows:
            return False
        del rows[id]
        self._record(write)
        return True

    def find_by(self, table: str, filters: dict[str, Any]) -> dict[str, Any] | None:
        for row in self._tables.get(table, {}).values():
            if all(row.get(k) == v for k, v in filters.items()):
                return dict(row)
        return None

    def find_all(
        self, table: str, filters: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        filters = filters or {}
        return [
            dict(row)
            for row in self._tables.get(table, {}).values()
            if all(row.get(k) == v for k, v in filters.items())
        ]

    def rows(self, table: str) -> list[dict[str, Any]]:
        """All stored rows of a table."""
        return self.find_all(table)
