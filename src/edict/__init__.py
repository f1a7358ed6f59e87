"""Edict: declarative request directives.

A directive turns raw request params into typed properties, loads the
models it acts on, checks their validity into a nested error tree and
persists them atomically through a unit of work.
"""

from edict.chain import PropertyChain, operation
from edict.directive import (
    Directive,
    DirectiveSchema,
    DirectiveState,
    GateRejection,
    SchemaBuilder,
    SchemaLoader,
    StageFailure,
)
from edict.errors import ErrorTree
from edict.exceptions import EdictError, SchemaError, StorageError
from edict.hooks import hook
from edict.models import Association, Record, Repository
from edict.permit import permit
from edict.persistence import (
    MemoryStorage,
    PersistenceFailure,
    PersistenceResult,
    UnitOfWork,
)

__all__ = [
    "Association",
    "Directive",
    "DirectiveSchema",
    "DirectiveState",
    "EdictError",
    "ErrorTree",
    "GateRejection",
    "MemoryStorage",
    "PersistenceFailure",
    "PersistenceResult",
    "PropertyChain",
    "Record",
    "Repository",
    "SchemaBuilder",
    "SchemaError",
    "SchemaLoader",
    "StageFailure",
    "StorageError",
    "UnitOfWork",
    "hook",
    "operation",
    "permit",
]
