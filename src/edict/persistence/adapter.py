"""StorageAdapter Protocol: shared interface for all storage adapters."""

from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StorageAdapter(Protocol):
    """Interface all storage adapters must implement.

    Records write through these methods. ``transaction()`` opens one
    atomic scope: nested calls join the outermost transaction, and an
    exception escaping the outermost scope rolls back every write made
    inside it.
    """

    def transaction(self) -> AbstractContextManager[None]: ...

    @property
    def in_transaction(self) -> bool: ...

    def ensure_table(
        self,
        table: str,
        columns: dict[str, str],
        primary_key: str = "id",
    ) -> None: ...

    def insert(self, table: str, data: dict[str, Any], primary_key: str = "id") -> dict[str, Any]: ...

    def update(
        self, table: str, primary_key: str, id: Any, data: dict[str, Any]
    ) -> bool: ...

    def delete(self, table: str, primary_key: str, id: Any) -> bool: ...

    def find_by(self, table: str, filters: dict[str, Any]) -> dict[str, Any] | None: ...

    def find_all(
        self, table: str, filters: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]: ...
