"""Database configuration and storage factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from edict.persistence.adapter import StorageAdapter

MEMORY_URL = "memory://"


@dataclass
class DatabaseConfig:
    """Storage connection configuration.

    Supports memory://, sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. EDICT_DATABASE_URL env var
        2. DATABASE_URL env var (standard)
        3. sqlite:///{base_path}/data/edict.db when base_path is given
        4. Default: memory://
        """
        url = os.environ.get("EDICT_DATABASE_URL") or os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'edict.db'}")

        return cls(url=MEMORY_URL)

    @property
    def is_memory(self) -> bool:
        return self.url.startswith("memory")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


def create_storage(config: DatabaseConfig) -> StorageAdapter:
    """Create a storage adapter based on the database URL scheme.

    Args:
        config: Database configuration with URL.

    Returns:
        A StorageAdapter instance.

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_memory:
        from edict.persistence.memory import MemoryStorage

        return MemoryStorage()

    if config.is_sqlite or config.is_postgresql:
        from edict.persistence.sql import SqlStorage

        if config.is_sqlite:
            sqlite_path = config.url.replace("sqlite:///", "")
            if sqlite_path and sqlite_path != ":memory:" and sqlite_path != config.url:
                Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)

        return SqlStorage(config.sqlalchemy_url)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
