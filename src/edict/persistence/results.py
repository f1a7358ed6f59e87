"""Outcome types for persistence.

A failed unit of work carries a ``PersistenceFailure`` naming the
operation that failed and why, so callers can tell a rejected write
apart from a validation failure even when the error tree is empty.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PersistenceFailure:
    """Why a unit of work rolled back.

    Attributes:
        operation: Unit-of-work operation that failed ("save", "persist", ...)
        cause: Human-readable cause
        model: The model whose write failed, when known
        error: The storage exception, when one was raised
    """

    operation: str
    cause: str
    model: Any = None
    error: BaseException | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "persistence",
            "operation": self.operation,
            "cause": self.cause,
            "model": type(self.model).__name__ if self.model is not None else None,
        }


@dataclass(frozen=True)
class PersistenceResult:
    """Outcome of a unit of work commit. Truthy on success."""

    ok: bool
    failure: PersistenceFailure | None = None

    @classmethod
    def success(cls) -> "PersistenceResult":
        return cls(ok=True)

    @classmethod
    def failed(
        cls,
        operation: str,
        cause: str,
        model: Any = None,
        error: BaseException | None = None,
    ) -> "PersistenceResult":
        return cls(
            ok=False,
            failure=PersistenceFailure(
                operation=operation, cause=cause, model=model, error=error
            ),
        )

    def __bool__(self) -> bool:
        return self.ok
