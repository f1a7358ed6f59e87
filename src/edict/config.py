"""Application configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from edict.persistence import DatabaseConfig

DEFAULT_SCHEMA_PATH = "directives"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class EdictConfig:
    """Settings for the CLI and the HTTP binding."""

    schema_path: Path = field(default_factory=lambda: Path(DEFAULT_SCHEMA_PATH))
    log_level: str = DEFAULT_LOG_LEVEL
    database: DatabaseConfig = field(default_factory=lambda: DatabaseConfig.from_env())

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> EdictConfig:
        """Create config from environment variables.

        - EDICT_SCHEMA_PATH: directive YAML directory (default: directives,
          relative to base_path when given)
        - EDICT_LOG_LEVEL: logging level name (default: INFO)
        - EDICT_DATABASE_URL / DATABASE_URL: see DatabaseConfig.from_env
        """
        schema_path = Path(os.environ.get("EDICT_SCHEMA_PATH", DEFAULT_SCHEMA_PATH))
        if base_path and not schema_path.is_absolute():
            schema_path = base_path / schema_path

        log_level = os.environ.get("EDICT_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Unknown log level: {log_level}")

        return cls(
            schema_path=schema_path,
            log_level=log_level,
            database=DatabaseConfig.from_env(base_path),
        )

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)
