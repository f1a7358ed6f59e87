"""Hook system types for Edict.

Defines the core data structures for directive lifecycle hooks:
- Stage / Phase: where a hook runs (before or after clean, load, validate, persist)
- HookSpec: tagged variant over NoHook, Gate (boolean predicate) and
  Loader (returns a model or collection)
- StageCallbacks: the before/after pair declared for one stage
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from edict.exceptions import SchemaError


class Stage(Enum):
    """Directive lifecycle stages, in execution order."""

    CLEAN = "clean"
    LOAD = "load"
    VALIDATE = "validate"
    PERSIST = "persist"


class Phase(Enum):
    """Position of a hook relative to its stage."""

    BEFORE = "before"
    AFTER = "after"


# Hook function signature: (context) -> Any
HookFn = Callable[[Any], Any]


@dataclass(frozen=True)
class NoHook:
    """Absent hook. Dispatching it always passes."""

    name: str = "none"


@dataclass(frozen=True)
class Gate:
    """Boolean predicate run against the directive.

    Attributes:
        fn: Function receiving the directive instance
        name: Registered name, when resolved from the registry
    """

    fn: HookFn
    name: str | None = None


@dataclass(frozen=True)
class Loader:
    """Function resolving a related model or collection for a directive.

    Attributes:
        fn: Function receiving the directive instance
        name: Registered name, when resolved from the registry
    """

    fn: HookFn
    name: str | None = None


HookSpec = Union[NoHook, Gate, Loader]

NO_HOOK = NoHook()


@dataclass(frozen=True)
class StageCallbacks:
    """Before/after hooks declared for one stage."""

    before: HookSpec = field(default=NO_HOOK)
    after: HookSpec = field(default=NO_HOOK)

    def for_phase(self, phase: Phase) -> HookSpec:
        return self.before if phase is Phase.BEFORE else self.after


def parse_stage(value: "Stage | str") -> Stage:
    """Normalize a stage name."""
    if isinstance(value, Stage):
        return value
    try:
        return Stage(value)
    except ValueError:
        valid = ", ".join(s.value for s in Stage)
        raise SchemaError(f"Unknown stage '{value}'. Expected one of: {valid}") from None


def parse_phase(value: "Phase | str") -> Phase:
    """Normalize a phase name."""
    if isinstance(value, Phase):
        return value
    try:
        return Phase(value)
    except ValueError:
        raise SchemaError(
            f"Unknown callback phase '{value}'. Expected 'before' or 'after'"
        ) from None


def hook_spec(value: Any, kind: type = Gate) -> HookSpec:
    """Normalize a hook declaration into a HookSpec.

    Args:
        value: None, an existing HookSpec, a callable, or the name of a
            hook registered in HookRegistry
        kind: Gate or Loader, used when wrapping a callable or a name

    Raises:
        HookNotRegistered: If a name is not registered
        SchemaError: If the value cannot be turned into a hook
    """
    # Import here: registry imports this module for the HookFn alias
    from edict.hooks.registry import HookRegistry

    if value is None:
        return NO_HOOK
    if isinstance(value, (NoHook, Gate, Loader)):
        return value
    if isinstance(value, str):
        return kind(fn=HookRegistry.get(value), name=value)
    if callable(value):
        return kind(fn=value, name=getattr(value, "__name__", None))
    raise SchemaError(f"Cannot use {value!r} as a hook")
