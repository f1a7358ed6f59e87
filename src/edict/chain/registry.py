"""Operation registry for property chains.

Chain steps reference operations by name. A name resolves to an
explicitly registered Python callable, never to an arbitrary method on
the value being transformed.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from edict.exceptions import OperationNotRegistered


@dataclass(frozen=True)
class OperationDefinition:
    """A named chain operation.

    Attributes:
        name: Name used in chain steps (e.g., "strip", "map")
        implementation: ``fn(value, *args)``, or ``fn(value, callback)``
            when ``takes_callback`` is set
        takes_callback: The operation receives a per-element callback
            instead of positional arguments
        description: Human-readable description
    """

    name: str
    implementation: Callable[..., Any]
    takes_callback: bool = False
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "takesCallback": self.takes_callback,
            "description": self.description,
        }


class OperationRegistry:
    """Registry for chain operations.

    Example:
        @operation("cents")
        def to_cents(value):
            return int(value * 100)

        PropertyChain.of([("get", ["price"]), "decimal", "cents"])
    """

    _operations: dict[str, OperationDefinition] = {}

    @classmethod
    def register(cls, definition: OperationDefinition) -> None:
        """Register an operation definition.

        Idempotent - re-registering the same name is a no-op.
        """
        if definition.name in cls._operations:
            return
        cls._operations[definition.name] = definition

    @classmethod
    def get(cls, name: str) -> OperationDefinition:
        """Get a registered operation by name.

        Raises:
            OperationNotRegistered: If the operation is not registered
        """
        if name not in cls._operations:
            raise OperationNotRegistered(name)
        return cls._operations[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._operations

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._operations.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._operations.clear()


def operation(
    name: str,
    takes_callback: bool = False,
    description: str = "",
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to register a chain operation."""

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        summary = description
        if not summary and fn.__doc__:
            summary = fn.__doc__.strip().splitlines()[0]

        OperationRegistry.register(
            OperationDefinition(
                name=name,
                implementation=fn,
                takes_callback=takes_callback,
                description=summary,
            )
        )
        return fn

    return decorator
