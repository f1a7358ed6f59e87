"""Shared fixtures: sample records and storage."""

import pytest

from edict.chain import OperationRegistry, register_builtin_operations
from edict.hooks import HookRegistry
from edict.models import Association, Record
from edict.persistence import MemoryStorage


class LineItem(Record):
    table = "line_items"
    fields = {"order_id": "reference", "name": "string", "price": "integer"}
    required = ("name", "price")

    def check(self):
        if self.price is not None and self.price < 0:
            self.errors.add("price", "must not be negative")


class Order(Record):
    table = "orders"
    fields = {"code": "string", "total": "integer"}
    required = ("code",)
    has_many = {"line_items": Association(LineItem, "order_id")}


@pytest.fixture(autouse=True)
def reset_registries():
    """Restore built-in operations and drop test hooks around each test."""
    OperationRegistry.clear()
    register_builtin_operations()
    HookRegistry.clear()
    yield
    OperationRegistry.clear()
    register_builtin_operations()
    HookRegistry.clear()


@pytest.fixture
def storage():
    store = MemoryStorage()
    store.ensure_table(Order.table, Order.columns())
    store.ensure_table(LineItem.table, LineItem.columns())
    return store
