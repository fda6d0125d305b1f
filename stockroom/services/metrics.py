"""Figures derived from the inventory collections.

Every function here is pure: it reads the sequences it is given, never
modifies them and returns new values, so dashboards can call them as often as
they like against ``store.items`` / ``store.transactions``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from stockroom.records import InventoryItem, StockTransaction, TransactionType

MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class MonthlyReport:
    month: int  # 0 = January
    year: int
    stock_added: int
    stock_sold: int
    expenditure: Decimal
    revenue: Decimal
    profit: Decimal
    transactions: tuple[StockTransaction, ...]


@dataclass(frozen=True)
class SalesSummary:
    sale_count: int
    units_sold: int
    revenue: Decimal
    average_sale_value: Decimal


def _of_type(
    transactions: Iterable[StockTransaction], transaction_type: TransactionType
) -> list[StockTransaction]:
    return [entry for entry in transactions if entry.type is transaction_type]


def inventory_value(items: Iterable[InventoryItem]) -> Decimal:
    return sum((item.current_stock * item.purchase_price for item in items), ZERO)


def total_revenue(transactions: Iterable[StockTransaction]) -> Decimal:
    return sum(
        (entry.total_price for entry in _of_type(transactions, TransactionType.SELL)), ZERO
    )


def total_expenditure(transactions: Iterable[StockTransaction]) -> Decimal:
    return sum(
        (entry.total_price for entry in _of_type(transactions, TransactionType.ADD)), ZERO
    )


def profit(revenue: Decimal, expenditure: Decimal) -> Decimal:
    return revenue - expenditure


def low_stock_items(items: Iterable[InventoryItem]) -> list[InventoryItem]:
    return [item for item in items if item.current_stock <= item.low_stock_threshold]


def _validate_month(month: int) -> int:
    if isinstance(month, bool) or not isinstance(month, int) or not 0 <= month <= 11:
        raise ValueError("Month must be between 0 (January) and 11 (December).")
    return month


def _in_period(entry: StockTransaction, month: int | None, year: int | None) -> bool:
    # ``month`` is zero-indexed, ``datetime.month`` is not.
    if month is not None and entry.date.month != month + 1:
        return False
    if year is not None and entry.date.year != year:
        return False
    return True


def transactions_in_period(
    transactions: Iterable[StockTransaction],
    month: int | None = None,
    year: int | None = None,
) -> list[StockTransaction]:
    if month is not None:
        _validate_month(month)
    return [entry for entry in transactions if _in_period(entry, month, year)]


def monthly_report(
    items: Sequence[InventoryItem],
    transactions: Iterable[StockTransaction],
    month: int,
    year: int,
) -> MonthlyReport:
    """Summarise the stock movements dated within ``month``/``year``.

    ``items`` is accepted so callers can pass the store's collections as a
    pair; the figures themselves come from the ledger alone.
    """

    _validate_month(month)
    period = tuple(transactions_in_period(transactions, month, year))

    revenue = total_revenue(period)
    expenditure = total_expenditure(period)
    return MonthlyReport(
        month=month,
        year=year,
        stock_added=sum(entry.quantity for entry in _of_type(period, TransactionType.ADD)),
        stock_sold=sum(entry.quantity for entry in _of_type(period, TransactionType.SELL)),
        expenditure=expenditure,
        revenue=revenue,
        profit=profit(revenue, expenditure),
        transactions=period,
    )


def stock_by_category(items: Iterable[InventoryItem]) -> dict[str, int]:
    totals: dict[str, int] = {}
    for item in items:
        totals[item.category] = totals.get(item.category, 0) + item.current_stock
    return totals


def sales_by_category(
    items: Iterable[InventoryItem], transactions: Iterable[StockTransaction]
) -> dict[str, Decimal]:
    """Sale revenue grouped by the current category of each sold item.

    Sales of items that have since been removed have no category and are left
    out.
    """

    categories = {item.id: item.category for item in items}
    totals: dict[str, Decimal] = {}
    for entry in _of_type(transactions, TransactionType.SELL):
        category = categories.get(entry.item_id)
        if category is None:
            continue
        totals[category] = totals.get(category, ZERO) + entry.total_price
    return totals


def monthly_sales(
    transactions: Iterable[StockTransaction], year: int | None = None
) -> list[tuple[str, Decimal]]:
    totals: dict[int, Decimal] = {}
    for entry in _of_type(transactions, TransactionType.SELL):
        if year is not None and entry.date.year != year:
            continue
        totals[entry.date.month] = totals.get(entry.date.month, ZERO) + entry.total_price
    return [
        (MONTH_ABBREVIATIONS[month - 1], totals[month])
        for month in range(1, 13)
        if month in totals
    ]


def daily_sales(transactions: Iterable[StockTransaction]) -> list[tuple[date, Decimal]]:
    """Sales revenue per calendar day, oldest day first."""

    totals: dict[date, Decimal] = {}
    for entry in _of_type(transactions, TransactionType.SELL):
        day = entry.date.date()
        totals[day] = totals.get(day, ZERO) + entry.total_price
    return sorted(totals.items())


def recent_transactions(
    transactions: Iterable[StockTransaction], limit: int = 5
) -> list[StockTransaction]:
    if limit <= 0:
        return []
    return sorted(transactions, key=lambda entry: entry.date, reverse=True)[:limit]


def sales_summary(
    transactions: Iterable[StockTransaction],
    month: int | None = None,
    year: int | None = None,
) -> SalesSummary:
    sales = _of_type(transactions_in_period(transactions, month, year), TransactionType.SELL)
    revenue = total_revenue(sales)
    average = revenue / len(sales) if sales else ZERO
    return SalesSummary(
        sale_count=len(sales),
        units_sold=sum(entry.quantity for entry in sales),
        revenue=revenue,
        average_sale_value=average,
    )


def filter_items(
    items: Iterable[InventoryItem],
    search: str | None = None,
    category: str | None = None,
) -> list[InventoryItem]:
    needle = (search or "").strip().lower()
    matches = []
    for item in items:
        if category and item.category != category:
            continue
        if needle and needle not in item.name.lower() and needle not in item.sku.lower():
            continue
        matches.append(item)
    return matches
