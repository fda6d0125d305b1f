"""Inventory records and their JSON-safe representations.

Items and ledger entries are frozen dataclasses. The store never edits a
record in place; an update swaps in a new ``InventoryItem`` built with
:func:`dataclasses.replace`, so any tuple handed to a reader stays stable.

Ledger entries are a two-case tagged variant: :class:`StockAddition` carries
the supplier the stock came from and :class:`StockSale` carries the customer
it went to. Both share the fields of :class:`StockTransaction`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, ClassVar, Mapping

WALK_IN_CUSTOMER = "Walk-in Customer"


class TransactionType(str, Enum):
    ADD = "add"
    SELL = "sell"

    @classmethod
    def parse(cls, value) -> "TransactionType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown transaction type: {value!r}")


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str
    sku: str
    category: str
    current_stock: int
    low_stock_threshold: int
    purchase_price: Decimal
    selling_price: Decimal
    supplier: str
    last_updated: datetime

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.low_stock_threshold


@dataclass(frozen=True)
class StockTransaction:
    id: str
    date: datetime
    item_id: str
    item_name: str  # snapshot taken when the movement was recorded
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    type: ClassVar[TransactionType]


@dataclass(frozen=True)
class StockAddition(StockTransaction):
    supplier: str = ""

    type: ClassVar[TransactionType] = TransactionType.ADD


@dataclass(frozen=True)
class StockSale(StockTransaction):
    customer: str = WALK_IN_CUSTOMER

    type: ClassVar[TransactionType] = TransactionType.SELL


ITEM_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "sku",
    "category",
    "current_stock",
    "low_stock_threshold",
    "purchase_price",
    "selling_price",
    "supplier",
    "last_updated",
)

# Fields callers may set through add/update; ``id`` and ``last_updated`` are
# owned by the store.
EDITABLE_ITEM_FIELDS: frozenset[str] = frozenset(ITEM_FIELDS) - {"id", "last_updated"}


def format_decimal(value: Decimal) -> str:
    return format(value, "f")


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC ``datetime``.

    Browser-produced strings end in ``Z``; aware values are converted to UTC
    and stripped of their tzinfo so they compare with ``datetime.utcnow()``.
    """

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_decimal(value) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid decimal value: {value!r}")


def item_to_dict(item: InventoryItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "sku": item.sku,
        "category": item.category,
        "current_stock": item.current_stock,
        "low_stock_threshold": item.low_stock_threshold,
        "purchase_price": format_decimal(item.purchase_price),
        "selling_price": format_decimal(item.selling_price),
        "supplier": item.supplier,
        "last_updated": format_timestamp(item.last_updated),
    }


def item_from_dict(data: Mapping[str, Any]) -> InventoryItem:
    return InventoryItem(
        id=str(data["id"]),
        name=str(data["name"]),
        sku=str(data.get("sku") or ""),
        category=str(data.get("category") or ""),
        current_stock=int(data["current_stock"]),
        low_stock_threshold=int(data["low_stock_threshold"]),
        purchase_price=_parse_decimal(data["purchase_price"]),
        selling_price=_parse_decimal(data["selling_price"]),
        supplier=str(data.get("supplier") or ""),
        last_updated=parse_timestamp(data["last_updated"]),
    )


def transaction_to_dict(transaction: StockTransaction) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": transaction.id,
        "date": format_timestamp(transaction.date),
        "item_id": transaction.item_id,
        "item_name": transaction.item_name,
        "type": transaction.type.value,
        "quantity": transaction.quantity,
        "unit_price": format_decimal(transaction.unit_price),
        "total_price": format_decimal(transaction.total_price),
    }
    if isinstance(transaction, StockAddition):
        payload["supplier"] = transaction.supplier
    elif isinstance(transaction, StockSale):
        payload["customer"] = transaction.customer
    return payload


def transaction_from_dict(data: Mapping[str, Any]) -> StockTransaction:
    common = {
        "id": str(data["id"]),
        "date": parse_timestamp(data["date"]),
        "item_id": str(data["item_id"]),
        "item_name": str(data.get("item_name") or ""),
        "quantity": int(data["quantity"]),
        "unit_price": _parse_decimal(data["unit_price"]),
        "total_price": _parse_decimal(data["total_price"]),
    }
    transaction_type = TransactionType.parse(data["type"])
    if transaction_type is TransactionType.ADD:
        return StockAddition(supplier=str(data.get("supplier") or ""), **common)
    return StockSale(customer=str(data.get("customer") or WALK_IN_CUSTOMER), **common)
