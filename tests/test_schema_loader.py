"""Tests for YAML directive schemas."""

import pytest
import yaml

from edict.directive import Directive, DirectiveSchema, SchemaLoader
from edict.exceptions import HookNotRegistered, SchemaError
from edict.hooks import Gate, Loader, Stage, hook

CREATE_ORDER = """\
directive: CreateOrder
properties:
  code: [[get, code], strip, presence]
  quantity: [[get, quantity], int]
required: [code]
models:
  order: loadOrder
validations: [order]
transactions: [saveOrder]
callbacks:
  load:
    before: ownerOnly
"""


@pytest.fixture
def hooks():
    @hook("loadOrder")
    def load_order(directive):
        return None

    @hook("saveOrder")
    def save_order(uow, directive):
        return None

    @hook("ownerOnly")
    def owner_only(directive):
        return True

    return {"loadOrder": load_order, "saveOrder": save_order, "ownerOnly": owner_only}


@pytest.fixture
def schema_dir(tmp_path):
    path = tmp_path / "directives"
    path.mkdir()
    (path / "create_order.yaml").write_text(CREATE_ORDER)
    (path / "notes.yaml").write_text("title: not a directive\n")
    return path


class TestFromDict:
    def test_full_schema(self, hooks):
        schema = DirectiveSchema.from_dict(yaml.safe_load(CREATE_ORDER))

        assert schema.name == "CreateOrder"
        assert list(schema.properties) == ["code", "quantity"]
        assert schema.properties["code"].apply({"code": " A1 "}) == "A1"
        assert schema.properties["quantity"].apply({"quantity": "3"}) == 3
        assert schema.required_fields == ("code",)
        assert schema.models["order"] == Loader(fn=hooks["loadOrder"], name="loadOrder")
        assert schema.validations == ("order",)
        assert schema.transactions == (hooks["saveOrder"],)
        assert schema.callbacks[Stage.LOAD].before == Gate(
            fn=hooks["ownerOnly"], name="ownerOnly"
        )

    def test_unregistered_hook(self):
        with pytest.raises(HookNotRegistered):
            DirectiveSchema.from_dict({"directive": "X", "models": {"order": "ghost"}})

    def test_properties_must_be_mapping(self):
        with pytest.raises(SchemaError):
            DirectiveSchema.from_dict({"directive": "X", "properties": ["code"]})

    def test_unknown_phase(self, hooks):
        with pytest.raises(SchemaError):
            DirectiveSchema.from_dict(
                {"directive": "X", "callbacks": {"load": {"around": "ownerOnly"}}}
            )

    def test_describe(self, hooks):
        described = DirectiveSchema.from_dict(yaml.safe_load(CREATE_ORDER)).describe()
        assert described["models"] == {"order": "loadOrder"}
        assert described["transactions"] == ["save_order"]
        assert described["callbacks"] == {"load": {"before": "ownerOnly", "after": "none"}}
        assert described["properties"]["code"] == ["get('code')", "strip()", "presence()"]


class TestSchemaLoader:
    def test_load_all(self, hooks, schema_dir):
        loader = SchemaLoader(schema_dir)
        loader.load_all()
        assert loader.list_directives() == ["CreateOrder"]
        assert loader.get_schema("CreateOrder").name == "CreateOrder"
        assert loader.get_schema("Missing") is None

    def test_missing_directory(self, tmp_path):
        loader = SchemaLoader(tmp_path / "nope")
        loader.load_all()
        assert loader.list_directives() == []

    def test_strict_raises(self, schema_dir):
        with pytest.raises(HookNotRegistered):
            SchemaLoader(schema_dir).load_all()

    def test_lenient_records_failures(self, schema_dir):
        loader = SchemaLoader(schema_dir)
        loader.load_all(strict=False)
        assert loader.list_directives() == []
        assert list(loader.failures) == [schema_dir / "create_order.yaml"]
        assert "loadOrder" in loader.failures[schema_dir / "create_order.yaml"]

    def test_duplicate_directive(self, hooks, schema_dir):
        (schema_dir / "again.yaml").write_text(CREATE_ORDER)
        with pytest.raises(SchemaError, match="defined in both"):
            SchemaLoader(schema_dir).load_all()

    def test_directive_class(self, hooks, schema_dir):
        loader = SchemaLoader(schema_dir)
        loader.load_all()
        CreateOrder = loader.directive_class("CreateOrder")
        assert issubclass(CreateOrder, Directive)
        assert CreateOrder.__name__ == "CreateOrder"

        directive = CreateOrder({"code": "A1"})
        assert not directive.execute()
        assert directive.errors == {"order": {"base": ["not found"]}}
