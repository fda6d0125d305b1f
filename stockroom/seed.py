"""Demo dataset loaded when ``SEED_DEMO_DATA`` is enabled and storage is empty."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from stockroom.records import InventoryItem, StockAddition, StockSale

_ITEMS = (
    ("1", "Premium Rice", "RICE001", "Grains", 250, 50, "2500", "3200", "Farm Fresh Supplies", "2023-09-15"),
    ("2", "Wheat Flour", "WHEAT001", "Grains", 180, 40, "1800", "2400", "Organic Mills", "2023-09-12"),
    ("3", "Sugar", "SUGAR001", "Sweeteners", 120, 30, "3000", "3800", "Sweet Industries", "2023-09-10"),
    ("4", "Cooking Oil", "OIL001", "Oils", 28, 30, "9500", "12000", "Pure Oils Ltd", "2023-09-05"),
    ("5", "Salt", "SALT001", "Condiments", 200, 50, "800", "1200", "Salt Factory", "2023-09-08"),
)

# (id, date, item id, type, quantity, unit price, counterparty)
_TRANSACTIONS = (
    ("1", "2023-09-01", "1", "add", 100, "2500", "Farm Fresh Supplies"),
    ("2", "2023-09-02", "2", "add", 80, "1800", "Organic Mills"),
    ("3", "2023-09-05", "1", "sell", 30, "3200", "Restaurant ABC"),
    ("4", "2023-09-07", "2", "sell", 20, "2400", "Bakery XYZ"),
    ("5", "2023-09-10", "3", "add", 120, "3000", "Sweet Industries"),
    ("6", "2023-09-12", "4", "add", 50, "9500", "Pure Oils Ltd"),
    ("7", "2023-09-15", "3", "sell", 40, "3800", "Sweet Shop"),
    ("8", "2023-09-18", "4", "sell", 22, "12000", "Restaurant DEF"),
)


def demo_items() -> list[InventoryItem]:
    return [
        InventoryItem(
            id=item_id,
            name=name,
            sku=sku,
            category=category,
            current_stock=stock,
            low_stock_threshold=threshold,
            purchase_price=Decimal(purchase),
            selling_price=Decimal(selling),
            supplier=supplier,
            last_updated=datetime.fromisoformat(updated),
        )
        for item_id, name, sku, category, stock, threshold, purchase, selling, supplier, updated in _ITEMS
    ]


def demo_transactions() -> list:
    names = {row[0]: row[1] for row in _ITEMS}
    entries = []
    for entry_id, day, item_id, kind, quantity, price, counterparty in _TRANSACTIONS:
        unit_price = Decimal(price)
        common = {
            "id": entry_id,
            "date": datetime.fromisoformat(day),
            "item_id": item_id,
            "item_name": names[item_id],
            "quantity": quantity,
            "unit_price": unit_price,
            "total_price": quantity * unit_price,
        }
        if kind == "add":
            entries.append(StockAddition(supplier=counterparty, **common))
        else:
            entries.append(StockSale(customer=counterparty, **common))
    return entries


def demo_dataset() -> dict[str, list]:
    items = demo_items()
    suppliers: list[str] = []
    for item in items:
        if item.supplier not in suppliers:
            suppliers.append(item.supplier)
    return {
        "items": items,
        "transactions": demo_transactions(),
        "suppliers": suppliers,
    }
