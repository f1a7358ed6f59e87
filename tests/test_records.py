"""Tests for records, associations and repositories."""

import pytest

from edict.models import Repository
from tests.conftest import LineItem, Order


# =============================================================================
# Record tests
# =============================================================================


class TestRecord:
    def test_attribute_access(self, storage):
        order = Order(storage, {"code": "A1"})
        assert order.code == "A1"
        assert order["code"] == "A1"
        assert order.total is None
        assert order.id is None

    def test_kwargs_assignment(self, storage):
        item = LineItem(storage, name="pen", price=3)
        assert item.to_dict() == {"id": None, "order_id": None, "name": "pen", "price": 3}

    def test_unknown_attribute_raises(self, storage):
        with pytest.raises(AttributeError, match="Unknown attribute 'colour'"):
            Order(storage, {"colour": "red"})

    def test_unknown_key_raises(self, storage):
        order = Order(storage)
        with pytest.raises(KeyError):
            order["colour"]
        with pytest.raises(KeyError):
            order["colour"] = "red"

    def test_required_fields(self, storage):
        order = Order(storage, {"code": "  "})
        assert order.invalid()
        assert order.errors == {"code": {"base": ["is required"]}}

    def test_check_override(self, storage):
        item = LineItem(storage, name="pen", price=-1)
        assert not item.valid()
        assert item.errors == {"price": {"base": ["must not be negative"]}}

    def test_nested_association_errors(self, storage):
        order = Order(
            storage,
            {
                "code": "A1",
                "line_items_attributes": [
                    {"name": "pen", "price": 2},
                    {"name": "ink"},
                ],
            },
        )
        assert order.invalid()
        assert order.errors == {
            "line_items": {1: {"price": {"base": ["is required"]}}},
        }

    def test_save_insert_then_update(self, storage):
        order = Order(storage, {"code": "A1"})
        assert order.new_record()
        assert order.save()
        assert not order.new_record()
        assert order.id == 1

        order.code = "B2"
        assert order.save()
        assert storage.rows("orders") == [{"id": 1, "code": "B2", "total": None}]

    def test_save_invalid_writes_nothing(self, storage):
        order = Order(storage, {"code": ""})
        assert not order.save()
        assert storage.attempted == []

    def test_autosaves_associations(self, storage):
        order = Order(
            storage,
            {"code": "A1", "line_items_attributes": [{"name": "pen", "price": 2}]},
        )
        assert order.save()
        assert storage.rows("line_items") == [
            {"id": 1, "order_id": 1, "name": "pen", "price": 2}
        ]

    def test_lazy_loads_association(self, storage):
        Order(storage, {"code": "A1", "line_items_attributes": [{"name": "pen", "price": 2}]}).save()

        loaded = Repository(storage, Order).find_by({"code": "A1"})
        assert [item.name for item in loaded.line_items] == ["pen"]

    def test_nested_update_and_destroy(self, storage):
        Order(
            storage,
            {
                "code": "A1",
                "line_items_attributes": [
                    {"name": "pen", "price": 2},
                    {"name": "ink", "price": 5},
                ],
            },
        ).save()

        order = Repository(storage, Order).find_by({"code": "A1"})
        order.assign_attributes(
            {
                "line_items_attributes": [
                    {"id": 1, "price": 3},
                    {"id": 2, "_destroy": "1"},
                    {"name": "cap", "price": 1},
                ]
            }
        )
        assert order.save()
        rows = sorted(storage.rows("line_items"), key=lambda r: r["id"])
        assert [(r["name"], r["price"]) for r in rows] == [("pen", 3), ("cap", 1)]
        assert [item.name for item in order.line_items] == ["pen", "cap"]

    def test_create_and_update_guards(self, storage):
        order = Order(storage, {"code": "A1"})
        assert not order.update()
        assert order.create()
        assert not order.create()
        assert order.update()

    def test_destroy(self, storage):
        order = Order(storage, {"code": "A1"})
        assert order.destroy()
        order.save()
        assert order.destroy()
        assert storage.rows("orders") == []
        assert order.new_record()

    def test_from_row_marks_persisted(self, storage):
        order = Order.from_row(storage, {"id": 7, "code": "A1", "ignored": True})
        assert not order.new_record()
        assert order.to_dict() == {"id": 7, "code": "A1", "total": None}


# =============================================================================
# Repository tests
# =============================================================================


class TestRepository:
    @pytest.fixture
    def orders(self, storage):
        repo = Repository(storage, Order)
        repo.new(code="A1").save()
        repo.new(code="B2", total=5).save()
        return repo

    def test_find_by(self, orders):
        assert orders.find_by({"code": "B2"}).total == 5
        assert orders.find_by({"code": "Z9"}) is None

    def test_all(self, orders):
        assert [o.code for o in orders.all()] == ["A1", "B2"]
        assert [o.code for o in orders.all({"total": 5})] == ["B2"]

    def test_find_one_returns_record(self, orders):
        found = orders.find_one({"code": "A1"})
        assert isinstance(found, Order)
        assert found.code == "A1"

    def test_find_one_tries_filters_in_order(self, orders):
        found = orders.find_one([{"code": "Z9"}, {"code": "B2"}])
        assert found.code == "B2"
        assert orders.find_one([{"code": "Z9"}]) is None

    def test_find_and_init_existing(self, orders):
        order = orders.find_and_init({"code": "A1"}, {"total": 9})
        assert not order.new_record()
        assert order.total == 9

    def test_find_and_init_new_uses_filters(self, orders):
        order = orders.find_and_init([{"code": "C3"}, {"code": "D4"}])
        assert order.new_record()
        assert order.code == "C3"

    def test_find_or_init(self, orders):
        existing = orders.find_or_init({"code": "A1"}, {"code": "A1", "total": 1})
        assert existing.total is None

        fresh = orders.find_or_init({"code": "C3"}, {"code": "C3", "total": 1})
        assert fresh.new_record()
        assert fresh.total == 1

    def test_ensure_table(self, storage):
        repo = Repository(storage, LineItem)
        repo.ensure_table()
        assert storage.rows("line_items") == []
