"""CSV export utilities."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from flask import Response, stream_with_context

INVENTORY_EXPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("name", "Name"),
    ("sku", "SKU"),
    ("category", "Category"),
    ("current_stock", "Current Stock"),
    ("low_stock_threshold", "Low Stock Threshold"),
    ("purchase_price", "Purchase Price"),
    ("selling_price", "Selling Price"),
    ("supplier", "Supplier"),
)
INVENTORY_EXPORT_FILENAME = "inventory_export.csv"


def _serialize_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def iter_csv_lines(rows: Iterable[object], columns: Iterable[tuple[str, str]]):
    columns = tuple(columns)
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([header for _, header in columns])
    yield output.getvalue()
    output.seek(0)
    output.truncate(0)
    for row in rows:
        row_values = []
        for field, _ in columns:
            if isinstance(row, dict):
                value = row.get(field)
            else:
                value = getattr(row, field, None)
            row_values.append(_serialize_value(value))
        writer.writerow(row_values)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)


def inventory_csv(items: Iterable[object]) -> str:
    return "".join(iter_csv_lines(items, INVENTORY_EXPORT_COLUMNS))


def export_rows_to_csv(
    rows: Iterable[object],
    columns: Iterable[tuple[str, str]],
    filename: str,
) -> Response:
    response = Response(
        stream_with_context(iter_csv_lines(rows, columns)), mimetype="text/csv"
    )
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response
