import os
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from stockroom.errors import ValidationError
from stockroom.records import (
    WALK_IN_CUSTOMER,
    StockAddition,
    StockSale,
    TransactionType,
    item_from_dict,
    parse_timestamp,
    transaction_from_dict,
    transaction_to_dict,
)
from stockroom.seed import demo_items
from stockroom.validation import coerce_count, coerce_money, require_text


def test_transaction_variants_carry_their_counterparty():
    common = {
        "id": "t1",
        "date": datetime(2024, 5, 1),
        "item_id": "1",
        "item_name": "Rice",
        "quantity": 2,
        "unit_price": Decimal("3"),
        "total_price": Decimal("6"),
    }
    addition = StockAddition(supplier="Acme", **common)
    sale = StockSale(**common)

    assert addition.type is TransactionType.ADD
    assert sale.type is TransactionType.SELL
    assert sale.customer == WALK_IN_CUSTOMER
    assert addition != sale
    assert "customer" not in transaction_to_dict(addition)
    assert "supplier" not in transaction_to_dict(sale)


def test_transaction_from_dict_defaults_missing_customer():
    entry = transaction_from_dict(
        {
            "id": "t2",
            "date": "2024-05-01T08:30:00",
            "item_id": "1",
            "item_name": "Rice",
            "type": "sell",
            "quantity": 1,
            "unit_price": "3",
            "total_price": "3",
        }
    )
    assert isinstance(entry, StockSale)
    assert entry.customer == WALK_IN_CUSTOMER


def test_transaction_from_dict_rejects_unknown_type():
    with pytest.raises(ValueError):
        transaction_from_dict(
            {
                "id": "t3",
                "date": "2024-05-01",
                "item_id": "1",
                "type": "transfer",
                "quantity": 1,
                "unit_price": "1",
                "total_price": "1",
            }
        )


def test_item_from_dict_rejects_bad_price():
    payload = {
        "id": "1",
        "name": "Rice",
        "current_stock": 1,
        "low_stock_threshold": 0,
        "purchase_price": "abc",
        "selling_price": "1",
        "last_updated": "2024-01-01T00:00:00",
    }
    with pytest.raises(ValueError):
        item_from_dict(payload)


def test_parse_timestamp_normalizes_to_naive_utc():
    assert parse_timestamp("2024-03-10T12:00:00Z") == datetime(2024, 3, 10, 12, 0)
    aware = datetime(2024, 3, 10, 17, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
    assert parse_timestamp(aware) == datetime(2024, 3, 10, 12, 0)
    assert parse_timestamp("2024-03-10") == datetime(2024, 3, 10)


def test_is_low_stock_property():
    items = {item.sku: item for item in demo_items()}
    assert items["OIL001"].is_low_stock
    assert not items["RICE001"].is_low_stock


@pytest.mark.parametrize(
    "value, expected",
    [(3, 3), ("4", 4), (" 5 ", 5), (6.0, 6), (Decimal("7"), 7)],
)
def test_coerce_count_accepts_whole_numbers(value, expected):
    assert coerce_count(value, "quantity") == expected


@pytest.mark.parametrize("value", [True, "1.5", "nan", "", None, -1])
def test_coerce_count_rejects(value):
    with pytest.raises(ValidationError):
        coerce_count(value, "quantity")


def test_coerce_count_minimum_message():
    with pytest.raises(ValidationError, match="greater than zero"):
        coerce_count(0, "quantity", minimum=1)


def test_coerce_money():
    assert coerce_money("12.50", "unit_price") == Decimal("12.50")
    assert coerce_money(0, "unit_price") == 0
    assert coerce_money(2.5, "unit_price") == Decimal("2.5")
    with pytest.raises(ValidationError, match="cannot be negative"):
        coerce_money(-1, "unit_price")
    with pytest.raises(ValidationError):
        coerce_money("Infinity", "unit_price")


def test_require_text():
    assert require_text("  Rice ", "name") == "Rice"
    with pytest.raises(ValidationError, match="Name is required"):
        require_text("", "name")
