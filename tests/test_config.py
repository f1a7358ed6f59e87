"""Tests for configuration, the storage factory and the adapter protocol."""

from pathlib import Path

import pytest

from edict.config import EdictConfig
from edict.persistence import DatabaseConfig, MemoryStorage, StorageAdapter, create_storage
from edict.persistence.sql import SqlStorage


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["EDICT_DATABASE_URL", "DATABASE_URL", "EDICT_SCHEMA_PATH", "EDICT_LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)


class TestDatabaseConfig:
    def test_default_is_memory(self):
        config = DatabaseConfig.from_env()
        assert config.url == "memory://"
        assert config.is_memory

    def test_base_path_uses_sqlite(self, tmp_path):
        config = DatabaseConfig.from_env(tmp_path)
        assert config.is_sqlite
        assert config.url.endswith("data/edict.db")

    def test_edict_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///a.db")
        monkeypatch.setenv("EDICT_DATABASE_URL", "sqlite:///b.db")
        assert DatabaseConfig.from_env().url == "sqlite:///b.db"

    def test_postgres_driver(self):
        config = DatabaseConfig(url="postgresql://u:p@host/db")
        assert config.is_postgresql
        assert config.sqlalchemy_url == "postgresql+psycopg://u:p@host/db"


class TestCreateStorage:
    def test_memory(self):
        assert isinstance(create_storage(DatabaseConfig(url="memory://")), MemoryStorage)

    def test_sqlite_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "data" / "edict.db"
        storage = create_storage(DatabaseConfig(url=f"sqlite:///{db_path}"))
        try:
            assert isinstance(storage, SqlStorage)
            assert db_path.parent.exists()
        finally:
            storage.close()

    def test_unsupported_scheme(self):
        with pytest.raises(ValueError, match="Unsupported database URL scheme"):
            create_storage(DatabaseConfig(url="mongodb://localhost"))


class TestEdictConfig:
    def test_defaults(self):
        config = EdictConfig.from_env()
        assert config.schema_path == Path("directives")
        assert config.log_level == "INFO"
        assert config.database.is_memory

    def test_relative_schema_path_uses_base(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EDICT_SCHEMA_PATH", "schemas")
        config = EdictConfig.from_env(tmp_path)
        assert config.schema_path == tmp_path / "schemas"

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("EDICT_LOG_LEVEL", "debug")
        config = EdictConfig.from_env()
        assert config.log_level == "DEBUG"
        assert config.logging_level == 10

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("EDICT_LOG_LEVEL", "chatty")
        with pytest.raises(ValueError, match="Unknown log level"):
            EdictConfig.from_env()


class TestStorageAdapterProtocol:
    """Verify both adapters satisfy the StorageAdapter protocol."""

    @pytest.fixture(params=["memory", "sql"])
    def adapter(self, request, tmp_path):
        if request.param == "memory":
            yield MemoryStorage()
            return
        store = SqlStorage(f"sqlite:///{tmp_path / 'protocol.db'}")
        yield store
        store.close()

    def test_is_instance(self, adapter):
        assert isinstance(adapter, StorageAdapter)

    def test_has_all_methods(self, adapter):
        required_methods = [
            "transaction",
            "ensure_table",
            "insert",
            "update",
            "delete",
            "find_by",
            "find_all",
        ]
        for method_name in required_methods:
            assert callable(getattr(adapter, method_name)), f"Missing method: {method_name}"

    def test_same_behaviour(self, adapter):
        adapter.ensure_table("notes", {"id": "id", "body": "text"})
        row = adapter.insert("notes", {"body": "hello"})
        assert adapter.find_by("notes", {"id": row["id"]})["body"] == "hello"
        assert adapter.update("notes", "id", row["id"], {"body": "bye"})
        assert [r["body"] for r in adapter.find_all("notes")] == ["bye"]
        assert adapter.delete("notes", "id", row["id"])
        assert adapter.find_all("notes") == []
