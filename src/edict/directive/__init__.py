"""Directives: per-request lifecycle objects and their schemas."""

from edict.directive.base import (
    Directive,
    DirectiveState,
    Failure,
    GateRejection,
    StageFailure,
)
from edict.directive.loader import SchemaLoader
from edict.directive.schema import DirectiveSchema, SchemaBuilder, TransactionHandler

__all__ = [
    "Directive",
    "DirectiveSchema",
    "DirectiveState",
    "Failure",
    "GateRejection",
    "SchemaBuilder",
    "SchemaLoader",
    "StageFailure",
    "TransactionHandler",
]
