"""Property chains: declarative derivation of typed properties.

Usage:
    from edict.chain import PropertyChain, operation

    @operation("cents")
    def to_cents(value):
        return int(value * 100)

    chain = PropertyChain.of([("get", ["price"]), "decimal", "cents"])
    chain.apply({"price": "9.99"})  # 999
"""

from edict.chain.builtins import register_builtin_operations
from edict.chain.registry import OperationDefinition, OperationRegistry, operation
from edict.chain.types import ChainStep, PropertyChain

register_builtin_operations()

__all__ = [
    "ChainStep",
    "OperationDefinition",
    "OperationRegistry",
    "PropertyChain",
    "operation",
    "register_builtin_operations",
]
