import os
import sys
from datetime import datetime
from decimal import Decimal

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from stockroom.errors import ValidationError
from stockroom.records import (
    WALK_IN_CUSTOMER,
    InventoryItem,
    StockAddition,
    StockSale,
    TransactionType,
)
from stockroom.services import metrics
from stockroom.services.inventory_store import InventoryStore, MutationStatus
from stockroom.services.storage import MemoryStorage


def _rice(**overrides):
    fields = {
        "id": "1",
        "name": "Premium Rice",
        "sku": "RICE001",
        "category": "Grains",
        "current_stock": 10,
        "low_stock_threshold": 5,
        "purchase_price": Decimal("100"),
        "selling_price": Decimal("150"),
        "supplier": "Farm Fresh Supplies",
        "last_updated": datetime(2023, 9, 15),
    }
    fields.update(overrides)
    return InventoryItem(**fields)


@pytest.fixture
def store():
    store = InventoryStore(MemoryStorage(), seed={"items": [_rice()]})
    store.load()
    return store


@pytest.fixture
def empty_store():
    store = InventoryStore(MemoryStorage())
    store.load()
    return store


def _new_item_fields(**overrides):
    fields = {
        "name": "Widget",
        "sku": "W-1",
        "category": "Hardware",
        "current_stock": 4,
        "low_stock_threshold": 2,
        "purchase_price": "9.50",
        "selling_price": "12.00",
        "supplier": "Acme",
    }
    fields.update(overrides)
    return fields


def test_add_item_assigns_unique_ids(empty_store):
    ids = set()
    for index in range(5):
        result = empty_store.add_item(_new_item_fields(sku=f"W-{index}"))
        assert result.ok
        assert len(empty_store.items) == index + 1
        ids.add(result.record.id)
    assert len(ids) == 5


def test_add_item_normalizes_values(empty_store):
    before = datetime.utcnow()
    item = empty_store.add_item(**_new_item_fields()).record

    assert item.purchase_price == Decimal("9.50")
    assert item.selling_price == Decimal("12.00")
    assert item.current_stock == 4
    assert item.last_updated >= before
    assert empty_store.get_item(item.id) == item


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"name": "   "}, "name"),
        ({"current_stock": -1}, "current_stock"),
        ({"low_stock_threshold": "two"}, "low_stock_threshold"),
        ({"purchase_price": "-0.01"}, "purchase_price"),
        ({"selling_price": None}, "selling_price"),
    ],
)
def test_add_item_rejects_invalid_fields(empty_store, overrides, field):
    with pytest.raises(ValidationError) as excinfo:
        empty_store.add_item(_new_item_fields(**overrides))
    assert excinfo.value.field == field
    assert empty_store.items == ()


def test_add_item_rejects_store_owned_fields(empty_store):
    with pytest.raises(ValidationError):
        empty_store.add_item(_new_item_fields(id="abc"))


def test_update_item_merges_and_refreshes_timestamp(store):
    original = store.get_item("1")
    result = store.update_item("1", name="Basmati Rice", selling_price="175")

    assert result.ok
    updated = store.get_item("1")
    assert updated.name == "Basmati Rice"
    assert updated.selling_price == Decimal("175")
    assert updated.sku == original.sku
    assert updated.current_stock == original.current_stock
    assert updated.last_updated > original.last_updated


def test_update_item_missing_reports_not_found(store):
    before = store.items
    result = store.update_item("missing", name="Ghost")
    assert result.status is MutationStatus.NOT_FOUND
    assert not result.ok
    assert store.items == before


def test_update_item_cannot_change_id(store):
    with pytest.raises(ValidationError):
        store.update_item("1", id="2")
    assert store.get_item("1") is not None


def test_remove_item_keeps_transactions(store):
    store.update_stock("1", 2, "sell")
    result = store.remove_item("1")

    assert result.ok
    assert store.items == ()
    assert len(store.transactions) == 1
    assert store.transactions[0].item_name == "Premium Rice"

    assert store.remove_item("1").status is MutationStatus.NOT_FOUND


def test_update_stock_add_uses_purchase_price(store):
    result = store.update_stock("1", 6, "add")

    assert result.ok
    assert store.get_item("1").current_stock == 16
    assert len(store.transactions) == 1
    entry = store.transactions[0]
    assert isinstance(entry, StockAddition)
    assert entry.type is TransactionType.ADD
    assert entry.quantity == 6
    assert entry.unit_price == Decimal("100")
    assert entry.total_price == Decimal("600")
    assert entry.supplier == "Farm Fresh Supplies"


def test_update_stock_sale_scenario(store):
    result = store.update_stock("1", 3, "sell", 150, "Alice")

    assert result.ok
    assert not result.clamped
    assert store.get_item("1").current_stock == 7
    entry = store.transactions[-1]
    assert isinstance(entry, StockSale)
    assert entry.type is TransactionType.SELL
    assert entry.quantity == 3
    assert entry.unit_price == 150
    assert entry.total_price == 450
    assert entry.customer == "Alice"
    assert store.get_item("1") not in metrics.low_stock_items(store.items)


def test_oversell_clamps_stock_but_records_full_quantity(store):
    result = store.update_stock("1", 20, "sell")

    assert result.ok
    assert result.clamped
    item = store.get_item("1")
    assert item.current_stock == 0
    entry = store.transactions[-1]
    assert entry.quantity == 20
    assert entry.total_price == Decimal("3000")
    assert entry.customer == WALK_IN_CUSTOMER
    assert item in metrics.low_stock_items(store.items)

    store.update_stock("1", 20, "sell")
    assert store.get_item("1").current_stock == 0
    assert len(store.transactions) == 2


def test_update_stock_honours_explicit_zero_price(store):
    store.update_stock("1", 2, "add", 0)
    assert store.transactions[-1].unit_price == 0
    assert store.transactions[-1].total_price == 0


def test_update_stock_missing_item_changes_nothing(store):
    result = store.update_stock("nope", 5, "add")
    assert result.status is MutationStatus.NOT_FOUND
    assert store.transactions == ()
    assert store.get_item("1").current_stock == 10


@pytest.mark.parametrize("quantity", [0, -3, "1.5", None])
def test_update_stock_rejects_bad_quantity(store, quantity):
    with pytest.raises(ValidationError):
        store.update_stock("1", quantity, "add")
    assert store.transactions == ()
    assert store.get_item("1").current_stock == 10


def test_update_stock_rejects_unknown_type(store):
    with pytest.raises(ValidationError):
        store.update_stock("1", 1, "return")


def test_record_sale_is_a_sell_movement(store):
    result = store.record_sale("1", 4, "160")
    assert result.ok
    assert store.get_item("1").current_stock == 6
    entry = store.transactions[-1]
    assert isinstance(entry, StockSale)
    assert entry.total_price == Decimal("640")
    assert entry.customer == WALK_IN_CUSTOMER


def test_add_transaction_does_not_touch_items(store):
    result = store.add_transaction(
        {
            "item_id": "1",
            "item_name": "Premium Rice",
            "type": "add",
            "quantity": 5,
            "unit_price": "90",
            "supplier": "Other Mill",
            "date": "2024-02-03T10:00:00Z",
        }
    )

    assert result.ok
    entry = result.record
    assert isinstance(entry, StockAddition)
    assert entry.total_price == Decimal("450")
    assert entry.date == datetime(2024, 2, 3, 10, 0)
    assert store.get_item("1").current_stock == 10


def test_add_transaction_sale_defaults_customer(store):
    entry = store.add_transaction(
        item_id="1", item_name="Premium Rice", type="sell", quantity=1, unit_price=150
    ).record
    assert isinstance(entry, StockSale)
    assert entry.customer == WALK_IN_CUSTOMER


def test_add_supplier_is_unique(empty_store):
    first = empty_store.add_supplier("Acme")
    second = empty_store.add_supplier("Acme")
    empty_store.add_supplier("acme")

    assert first.changed
    assert not second.changed
    assert empty_store.suppliers == ("Acme", "acme")


def test_add_supplier_requires_name(empty_store):
    with pytest.raises(ValidationError):
        empty_store.add_supplier("  ")


def test_listeners_are_notified_until_unsubscribed(store):
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.update_stock("1", 1, "add")
    store.add_supplier("Acme")
    assert seen == ["items", "transactions", "suppliers"]

    unsubscribe()
    store.add_supplier("Other")
    assert seen == ["items", "transactions", "suppliers"]


def test_failing_listener_does_not_undo_mutation(store):
    def broken(_collection):
        raise RuntimeError("listener bug")

    store.subscribe(broken)
    result = store.update_stock("1", 1, "add")
    assert result.ok
    assert store.get_item("1").current_stock == 11


def test_collections_are_snapshots(store):
    items = store.items
    store.add_item(_new_item_fields())
    assert len(items) == 1
    assert len(store.items) == 2
