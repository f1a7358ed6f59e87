"""Property chain types.

A ``PropertyChain`` is an ordered, immutable list of steps that derives
one property value from raw request input:

    PropertyChain.of([("get", ["email"]), "strip", "lower", "presence"])

Evaluation rolls a value through each step and stops as soon as the
value becomes ``None``; later steps never see ``None``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from edict.chain.registry import OperationDefinition, OperationRegistry
from edict.exceptions import SchemaError


@dataclass(frozen=True)
class ChainStep:
    """One operation of a chain, with its arguments or callback."""

    name: str
    args: tuple[Any, ...] = ()
    callback: Callable[[Any], Any] | None = None
    definition: OperationDefinition | None = field(
        default=None, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaError("Chain step name must be provided")
        if self.definition is None:
            object.__setattr__(self, "definition", OperationRegistry.get(self.name))
        if self.definition.takes_callback and self.callback is None:
            raise SchemaError(f"Operation '{self.name}' requires a callback")

    def invoke(self, value: Any) -> Any:
        fn = self.definition.implementation
        if self.callback is not None:
            return fn(value, self.callback)
        return fn(value, *self.args)


@dataclass(frozen=True)
class PropertyChain:
    """Ordered, immutable sequence of chain steps."""

    steps: tuple[ChainStep, ...] = ()

    @classmethod
    def of(cls, spec: Any) -> PropertyChain:
        """Build a chain from a declarative spec.

        A list is a sequence of steps; anything else is a single step.
        Each step is one of:
            "strip"                      operation without arguments
            ("get", ["email"])           operation with positional arguments
            ("get", "email")             single positional argument
            ("map", some_callable)       callback operation
            ("map", [("get", ["id"])])   callback operation with a sub-chain
        """
        if isinstance(spec, PropertyChain):
            return spec
        if not isinstance(spec, list):
            spec = [spec]
        return cls(steps=tuple(_compile_step(entry) for entry in spec))

    def apply(self, source: Any) -> Any:
        """Evaluate the chain against ``source``."""
        result = source
        for step in self.steps:
            if result is None:
                return None
            result = step.invoke(result)
        return result

    def __len__(self) -> int:
        return len(self.steps)

    def describe(self) -> list[str]:
        """Readable one-line-per-step description."""
        lines = []
        for step in self.steps:
            if step.callback is not None:
                lines.append(f"{step.name}(<callback>)")
            else:
                lines.append(f"{step.name}({', '.join(repr(a) for a in step.args)})")
        return lines


def _compile_step(entry: Any) -> ChainStep:
    if isinstance(entry, ChainStep):
        return entry
    if isinstance(entry, str):
        return ChainStep(name=entry)
    if not isinstance(entry, Sequence) or not entry:
        raise SchemaError(f"Invalid chain step: {entry!r}")

    name = entry[0]
    if not isinstance(name, str):
        raise SchemaError(f"Chain step name must be a string: {entry!r}")
    if len(entry) == 1:
        return ChainStep(name=name)
    if len(entry) > 2:
        raise SchemaError(
            f"Chain step '{name}' takes one argument list or callback, got {entry!r}"
        )

    definition = OperationRegistry.get(name)
    payload = entry[1]

    if definition.takes_callback:
        if isinstance(payload, PropertyChain):
            return ChainStep(name, callback=payload.apply, definition=definition)
        if callable(payload):
            return ChainStep(name, callback=payload, definition=definition)
        if isinstance(payload, (list, tuple, str)):
            return ChainStep(
                name, callback=PropertyChain.of(payload).apply, definition=definition
            )
        raise SchemaError(f"Operation '{name}' needs a callable or a sub-chain")

    if payload is None:
        return ChainStep(name, definition=definition)
    if isinstance(payload, (list, tuple)):
        return ChainStep(name, args=tuple(payload), definition=definition)
    return ChainStep(name, args=(payload,), definition=definition)
