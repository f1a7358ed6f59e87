"""Exception types for Edict.

Only declaration mistakes and storage faults raise. Request-level
outcomes (missing fields, invalid models, rejected gates, failed
persistence) are reported through the directive's error tree and its
``failure`` value instead.
"""

from __future__ import annotations

__all__ = [
    "EdictError",
    "HookNotRegistered",
    "OperationNotRegistered",
    "SchemaError",
    "StorageError",
]


class EdictError(Exception):
    """Base class for all Edict exceptions."""


class SchemaError(EdictError, ValueError):
    """A directive schema declaration is malformed."""


class OperationNotRegistered(SchemaError):
    """A chain step references an operation missing from the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Operation '{name}' is not registered. "
            "Operations must be registered before a chain references them."
        )


class HookNotRegistered(SchemaError):
    """A hook spec references a hook name missing from the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Hook '{name}' is not registered. "
            "Hooks must be explicitly registered at application startup."
        )


class StorageError(EdictError):
    """A storage adapter failed to apply a write."""
