"""Tests for Edict CLI commands."""

import sys

import pytest
from click.testing import CliRunner

from edict.cli.main import cli
from edict.hooks import hook

DIRECTIVE = """\
directive: CreateOrder
properties:
  code: [[get, code], strip]
models:
  order: loadOrder
"""

BROKEN = """\
directive: Broken
models:
  order: ghostLoader
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def load_order_hook():
    @hook("loadOrder")
    def load_order(directive):
        return None


@pytest.fixture
def schema_dir(tmp_path, monkeypatch):
    path = tmp_path / "directives"
    path.mkdir()
    (path / "create_order.yaml").write_text(DIRECTIVE)
    monkeypatch.setenv("EDICT_SCHEMA_PATH", str(path))
    monkeypatch.delenv("EDICT_LOG_LEVEL", raising=False)
    return path


class TestSchemaValidate:
    def test_validate_succeeds(self, runner, schema_dir, load_order_hook):
        result = runner.invoke(cli, ["schema", "validate"])
        assert result.exit_code == 0
        assert "✓ CreateOrder (1 properties, 1 models, 0 transactions)" in result.output
        assert "All directives are valid" in result.output

    def test_validate_explicit_path(self, runner, tmp_path, load_order_hook):
        path = tmp_path / "other"
        path.mkdir()
        (path / "a.yaml").write_text(DIRECTIVE)
        result = runner.invoke(cli, ["schema", "validate", "--path", str(path)])
        assert result.exit_code == 0

    def test_validate_reports_invalid_files(self, runner, schema_dir, load_order_hook):
        (schema_dir / "broken.yaml").write_text(BROKEN)
        result = runner.invoke(cli, ["schema", "validate"])
        assert result.exit_code == 1
        assert "broken.yaml" in result.output
        assert "ghostLoader" in result.output
        assert "1 invalid file(s) found" in result.output

    def test_validate_missing_directory(self, runner, tmp_path):
        result = runner.invoke(cli, ["schema", "validate", "--path", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unregistered_hooks_fail(self, runner, schema_dir):
        result = runner.invoke(cli, ["schema", "validate"])
        assert result.exit_code == 1
        assert "loadOrder" in result.output

    def test_import_registers_hooks(self, runner, schema_dir, tmp_path, monkeypatch):
        (tmp_path / "order_hooks.py").write_text(
            "from edict.hooks import hook\n"
            "\n"
            "\n"
            "@hook('loadOrder')\n"
            "def load_order(directive):\n"
            "    return None\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        monkeypatch.delitem(sys.modules, "order_hooks", raising=False)

        result = runner.invoke(cli, ["--import", "order_hooks", "schema", "validate"])
        assert result.exit_code == 0

    def test_import_failure(self, runner, schema_dir):
        result = runner.invoke(cli, ["--import", "no_such_module_xyz", "schema", "validate"])
        assert result.exit_code != 0
        assert "Cannot import no_such_module_xyz" in result.output


class TestSchemaShow:
    def test_show(self, runner, schema_dir, load_order_hook):
        result = runner.invoke(cli, ["schema", "show", "CreateOrder"])
        assert result.exit_code == 0
        assert "name: CreateOrder" in result.output
        assert "order: loadOrder" in result.output
        assert "get('code')" in result.output

    def test_show_unknown(self, runner, schema_dir, load_order_hook):
        result = runner.invoke(cli, ["schema", "show", "Missing"])
        assert result.exit_code == 1
        assert "Directive 'Missing' not found" in result.output


class TestOperations:
    def test_lists_builtins(self, runner):
        result = runner.invoke(cli, ["operations"])
        assert result.exit_code == 0
        assert "strip" in result.output
        assert "map" in result.output
        assert "(callback)" in result.output
