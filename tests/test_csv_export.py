import csv
import io
import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from stockroom.seed import demo_items
from stockroom.utils.csv_export import INVENTORY_EXPORT_COLUMNS, inventory_csv
from stockroom.utils.formatting import format_currency


def test_inventory_csv_header_and_rows():
    content = inventory_csv(demo_items())
    rows = list(csv.reader(io.StringIO(content)))

    assert rows[0] == [
        "Name",
        "SKU",
        "Category",
        "Current Stock",
        "Low Stock Threshold",
        "Purchase Price",
        "Selling Price",
        "Supplier",
    ]
    assert rows[1] == [
        "Premium Rice",
        "RICE001",
        "Grains",
        "250",
        "50",
        "2500",
        "3200",
        "Farm Fresh Supplies",
    ]
    assert len(rows) == 6


def test_inventory_csv_accepts_dict_rows():
    content = inventory_csv([{"name": "Widget, large", "sku": "W-1"}])
    rows = list(csv.reader(io.StringIO(content)))
    assert rows[1][:2] == ["Widget, large", "W-1"]
    assert rows[1][2:] == [""] * (len(INVENTORY_EXPORT_COLUMNS) - 2)


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "₹0"),
        (999, "₹999"),
        (1000, "₹1,000"),
        (250000, "₹2,50,000"),
        (1735000, "₹17,35,000"),
        (123456789, "₹12,34,56,789"),
        ("1200.5", "₹1,201"),
        (-669000, "-₹6,69,000"),
        ("-0.4", "₹0"),
        ("1e30", "₹10," + "00," * 13 + "000"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected
