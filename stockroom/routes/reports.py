from datetime import datetime
from decimal import Decimal
from typing import Optional

from flask import Blueprint, current_app, jsonify, request

from stockroom.errors import ValidationError
from stockroom.records import item_to_dict, transaction_to_dict
from stockroom.services import metrics
from stockroom.services.inventory_store import get_store
from stockroom.utils.formatting import format_currency

bp = Blueprint("reports", __name__, url_prefix="/reports")


def _decimal_to_string(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


def _money(value: Decimal) -> dict:
    return {"amount": _decimal_to_string(value), "display": format_currency(value)}


def _parse_int_param(name: str) -> Optional[int]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"Enter a whole number for {name}.", name)


def _bad_request(message: str):
    return jsonify({"error": message}), 400


@bp.get("/dashboard")
def dashboard():
    store = get_store()
    items = store.items
    transactions = store.transactions

    revenue = metrics.total_revenue(transactions)
    expenditure = metrics.total_expenditure(transactions)
    low_stock = metrics.low_stock_items(items)
    preview_limit = current_app.config.get("LOW_STOCK_PREVIEW_LIMIT", 10)
    recent_limit = current_app.config.get("RECENT_TRANSACTIONS_LIMIT", 5)

    return jsonify(
        {
            "item_count": len(items),
            "inventory_value": _money(metrics.inventory_value(items)),
            "revenue": _money(revenue),
            "expenditure": _money(expenditure),
            "profit": _money(metrics.profit(revenue, expenditure)),
            "low_stock_count": len(low_stock),
            "low_stock_items": [item_to_dict(item) for item in low_stock[:preview_limit]],
            "stock_by_category": metrics.stock_by_category(items),
            "monthly_sales": [
                {"month": month, "sales": _decimal_to_string(total)}
                for month, total in metrics.monthly_sales(transactions)
            ],
            "recent_transactions": [
                transaction_to_dict(entry)
                for entry in metrics.recent_transactions(transactions, recent_limit)
            ],
            "storage_available": store.storage_available,
        }
    )


@bp.get("/monthly")
def monthly():
    store = get_store()
    now = datetime.utcnow()
    month = _parse_int_param("month")
    year = _parse_int_param("year")
    month = now.month - 1 if month is None else month
    year = now.year if year is None else year

    try:
        report = metrics.monthly_report(store.items, store.transactions, month, year)
    except ValueError as exc:
        return _bad_request(str(exc))

    category_sales = metrics.sales_by_category(store.items, report.transactions)
    return jsonify(
        {
            "month": report.month,
            "year": report.year,
            "stock_added": report.stock_added,
            "stock_sold": report.stock_sold,
            "expenditure": _money(report.expenditure),
            "revenue": _money(report.revenue),
            "profit": _money(report.profit),
            "sales_by_category": {
                category: _decimal_to_string(total)
                for category, total in category_sales.items()
            },
            "transactions": [transaction_to_dict(entry) for entry in report.transactions],
        }
    )


@bp.get("/sales")
def sales():
    store = get_store()
    month = _parse_int_param("month")
    year = _parse_int_param("year")

    try:
        period = metrics.transactions_in_period(store.transactions, month, year)
    except ValueError as exc:
        return _bad_request(str(exc))

    summary = metrics.sales_summary(period)
    category_sales = metrics.sales_by_category(store.items, period)
    return jsonify(
        {
            "month": month,
            "year": year,
            "sale_count": summary.sale_count,
            "units_sold": summary.units_sold,
            "revenue": _money(summary.revenue),
            "average_sale_value": _money(summary.average_sale_value),
            "sales_by_category": {
                category: _decimal_to_string(total)
                for category, total in category_sales.items()
            },
            "daily_sales": [
                {"date": day.isoformat(), "sales": _decimal_to_string(total)}
                for day, total in metrics.daily_sales(period)
            ],
        }
    )
