"""Persistence layer - storage adapters and the unit of work."""

from edict.persistence.adapter import StorageAdapter
from edict.persistence.aggregates import AGGREGATES
from edict.persistence.config import DatabaseConfig, create_storage
from edict.persistence.memory import MemoryStorage
from edict.persistence.results import PersistenceFailure, PersistenceResult
from edict.persistence.unit_of_work import UnitOfWork

__all__ = [
    "AGGREGATES",
    "DatabaseConfig",
    "MemoryStorage",
    "PersistenceFailure",
    "PersistenceResult",
    "StorageAdapter",
    "UnitOfWork",
    "create_storage",
]
