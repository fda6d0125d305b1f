"""In-process owner of the inventory collections.

One :class:`InventoryStore` is built per application by ``create_app`` and
handed to consumers through ``app.extensions`` (see :func:`get_store`).
Every mutation updates the in-memory collection first, then writes the
changed collection to the key/value storage and finally notifies listeners.
A failed write leaves the in-memory state in place; the key is retried on the
next successful write.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from flask import current_app

from stockroom.errors import PersistenceError, ValidationError
from stockroom.records import (
    EDITABLE_ITEM_FIELDS,
    WALK_IN_CUSTOMER,
    InventoryItem,
    StockAddition,
    StockSale,
    StockTransaction,
    TransactionType,
    item_from_dict,
    item_to_dict,
    parse_timestamp,
    transaction_from_dict,
    transaction_to_dict,
)
from stockroom.validation import coerce_count, coerce_money, optional_text, require_text

logger = logging.getLogger(__name__)

ITEMS_KEY = "inventory_items"
TRANSACTIONS_KEY = "inventory_transactions"
SUPPLIERS_KEY = "inventory_suppliers"

COLLECTION_KEYS = {
    "items": ITEMS_KEY,
    "transactions": TRANSACTIONS_KEY,
    "suppliers": SUPPLIERS_KEY,
}

Listener = Callable[[str], None]

_PARSERS: dict[str, Callable[[Any], Any]] = {
    "items": item_from_dict,
    "transactions": transaction_from_dict,
    "suppliers": str,
}


class MutationStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class MutationResult:
    status: MutationStatus
    record: Any = None
    transaction: StockTransaction | None = None
    clamped: bool = False
    changed: bool = True

    @property
    def ok(self) -> bool:
        return self.status is MutationStatus.OK

    @classmethod
    def not_found(cls) -> "MutationResult":
        return cls(MutationStatus.NOT_FOUND, changed=False)


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.utcnow()


def _unique(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))


def _clean_item_fields(fields: Mapping[str, Any], *, partial: bool) -> dict[str, Any]:
    unknown = set(fields) - EDITABLE_ITEM_FIELDS
    if unknown:
        names = ", ".join(sorted(unknown))
        raise ValidationError(f"Unknown or read-only item fields: {names}.")

    cleaned: dict[str, Any] = {}
    for field, value in fields.items():
        if field == "name":
            cleaned[field] = require_text(value, field)
        elif field in {"sku", "category", "supplier"}:
            cleaned[field] = optional_text(value)
        elif field in {"current_stock", "low_stock_threshold"}:
            cleaned[field] = coerce_count(value, field)
        else:
            cleaned[field] = coerce_money(value, field)

    if not partial:
        missing = [
            field
            for field in ("name", "current_stock", "low_stock_threshold", "purchase_price", "selling_price")
            if field not in cleaned
        ]
        if missing:
            raise ValidationError(f"Missing item fields: {', '.join(missing)}.", missing[0])
        for field in ("sku", "category", "supplier"):
            cleaned.setdefault(field, "")
    return cleaned


class InventoryStore:
    def __init__(
        self,
        storage,
        *,
        seed: Mapping[str, Iterable] | None = None,
    ) -> None:
        self._storage = storage
        self._seed = seed or {}
        self._items: list[InventoryItem] = []
        self._transactions: list[StockTransaction] = []
        self._suppliers: list[str] = []
        self._listeners: list[Listener] = []
        self._pending: set[str] = set()
        self._unloaded: set[str] = set()
        self._lock = threading.RLock()
        self.persistence_error: str | None = None

    # -- read accessors -------------------------------------------------

    @property
    def items(self) -> tuple[InventoryItem, ...]:
        return tuple(self._items)

    @property
    def transactions(self) -> tuple[StockTransaction, ...]:
        return tuple(self._transactions)

    @property
    def suppliers(self) -> tuple[str, ...]:
        return tuple(self._suppliers)

    @property
    def storage_available(self) -> bool:
        return self.persistence_error is None

    def get_item(self, item_id: str) -> InventoryItem | None:
        index = self._index_of(item_id)
        if index is None:
            return None
        return self._items[index]

    # -- subscriptions ----------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` to be called with the changed collection name."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, *collections: str) -> None:
        for collection in collections:
            for listener in list(self._listeners):
                try:
                    listener(collection)
                except Exception:
                    logger.exception("Inventory listener failed for %s", collection)

    # -- mutations --------------------------------------------------------

    def add_item(self, data: Mapping[str, Any] | None = None, **fields) -> MutationResult:
        values = _clean_item_fields({**(data or {}), **fields}, partial=False)
        with self._lock:
            item = InventoryItem(id=_new_id(), last_updated=_now(), **values)
            self._items.append(item)
            self._persist("items")
        logger.info("Added item %s (%s)", item.name, item.id)
        self._notify("items")
        return MutationResult(MutationStatus.OK, record=item)

    def update_item(
        self, item_id: str, data: Mapping[str, Any] | None = None, **fields
    ) -> MutationResult:
        values = _clean_item_fields({**(data or {}), **fields}, partial=True)
        with self._lock:
            index = self._index_of(item_id)
            if index is None:
                logger.info("Update skipped; item %s not found", item_id)
                return MutationResult.not_found()
            item = replace(self._items[index], last_updated=_now(), **values)
            self._items[index] = item
            self._persist("items")
        self._notify("items")
        return MutationResult(MutationStatus.OK, record=item)

    def remove_item(self, item_id: str) -> MutationResult:
        with self._lock:
            index = self._index_of(item_id)
            if index is None:
                return MutationResult.not_found()
            item = self._items.pop(index)
            self._persist("items")
        logger.info("Removed item %s (%s)", item.name, item.id)
        self._notify("items")
        return MutationResult(MutationStatus.OK, record=item)

    def add_transaction(
        self, data: Mapping[str, Any] | None = None, **fields
    ) -> MutationResult:
        """Append a ledger entry without touching the item it refers to."""

        values = {**(data or {}), **fields}
        try:
            transaction_type = TransactionType.parse(values.get("type"))
        except ValueError as exc:
            raise ValidationError(str(exc), "type")

        quantity = coerce_count(values.get("quantity"), "quantity", minimum=1)
        unit_price = coerce_money(values.get("unit_price"), "unit_price")
        total_price = values.get("total_price")
        if total_price is None:
            total_price = quantity * unit_price
        else:
            total_price = coerce_money(total_price, "total_price")

        date = values.get("date")
        try:
            date = _now() if date is None else parse_timestamp(date)
        except ValueError:
            raise ValidationError("Enter a valid transaction date.", "date")

        common = {
            "id": _new_id(),
            "date": date,
            "item_id": require_text(values.get("item_id"), "item_id"),
            "item_name": optional_text(values.get("item_name")),
            "quantity": quantity,
            "unit_price": unit_price,
            "total_price": total_price,
        }
        if transaction_type is TransactionType.ADD:
            transaction: StockTransaction = StockAddition(
                supplier=optional_text(values.get("supplier")), **common
            )
        else:
            transaction = StockSale(
                customer=optional_text(values.get("customer")) or WALK_IN_CUSTOMER, **common
            )

        with self._lock:
            self._transactions.append(transaction)
            self._persist("transactions")
        self._notify("transactions")
        return MutationResult(MutationStatus.OK, record=transaction, transaction=transaction)

    def update_stock(
        self,
        item_id: str,
        quantity,
        type,
        unit_price=None,
        customer: str | None = None,
    ) -> MutationResult:
        """Move stock in or out of an item and record the movement.

        Selling more than is on hand empties the item instead of failing; the
        ledger entry still records the full quantity and the result is flagged
        ``clamped``.
        """

        try:
            movement = TransactionType.parse(type)
        except ValueError as exc:
            raise ValidationError(str(exc), "type")
        quantity = coerce_count(quantity, "quantity", minimum=1)
        if unit_price is not None:
            unit_price = coerce_money(unit_price, "unit_price")

        with self._lock:
            index = self._index_of(item_id)
            if index is None:
                logger.info("Stock update skipped; item %s not found", item_id)
                return MutationResult.not_found()

            item = self._items[index]
            change = quantity if movement is TransactionType.ADD else -quantity
            new_stock = item.current_stock + change
            clamped = new_stock < 0
            if clamped:
                logger.warning(
                    "Sale of %s units of %s exceeds %s on hand; stock set to 0",
                    quantity,
                    item.sku or item.id,
                    item.current_stock,
                )

            if unit_price is None:
                unit_price = (
                    item.purchase_price if movement is TransactionType.ADD else item.selling_price
                )
            common = {
                "id": _new_id(),
                "date": _now(),
                "item_id": item.id,
                "item_name": item.name,
                "quantity": quantity,
                "unit_price": unit_price,
                "total_price": quantity * unit_price,
            }
            if movement is TransactionType.ADD:
                transaction: StockTransaction = StockAddition(supplier=item.supplier, **common)
            else:
                transaction = StockSale(
                    customer=optional_text(customer) or WALK_IN_CUSTOMER, **common
                )

            updated = replace(item, current_stock=max(0, new_stock), last_updated=_now())
            self._items[index] = updated
            self._transactions.append(transaction)
            self._persist("items", "transactions")

        self._notify("items", "transactions")
        return MutationResult(
            MutationStatus.OK, record=updated, transaction=transaction, clamped=clamped
        )

    def record_sale(
        self,
        item_id: str,
        quantity,
        unit_price=None,
        customer: str | None = None,
    ) -> MutationResult:
        return self.update_stock(item_id, quantity, TransactionType.SELL, unit_price, customer)

    def add_supplier(self, name: str) -> MutationResult:
        name = require_text(name, "supplier")
        with self._lock:
            if name in self._suppliers:
                return MutationResult(MutationStatus.OK, record=name, changed=False)
            self._suppliers.append(name)
            self._persist("suppliers")
        self._notify("suppliers")
        return MutationResult(MutationStatus.OK, record=name)

    # -- persistence ------------------------------------------------------

    def load(self) -> None:
        """Rehydrate all collections from storage.

        Missing entries fall back to the seed collection when one was given,
        otherwise to an empty one. Unreadable entries are logged and start
        empty. A collection whose read fails starts empty in memory and is
        never written back until it has been read successfully and merged
        with whatever was added in the meantime.
        """

        with self._lock:
            self._unloaded = set()
            self._items = self._load_collection("items")
            self._transactions = self._load_collection("transactions")
            self._suppliers = _unique(self._load_collection("suppliers"))
            if self._pending:
                self._persist()
        self._notify("items", "transactions", "suppliers")

    def _load_collection(self, collection: str) -> list:
        key = COLLECTION_KEYS[collection]
        try:
            raw = self._storage.get(key)
        except PersistenceError as exc:
            logger.warning("Could not read %s; starting empty: %s", key, exc)
            self.persistence_error = str(exc)
            self._unloaded.add(collection)
            return []

        if raw is None:
            seeded = list(self._seed.get(collection, ()))
            if seeded:
                logger.info("Seeding %s with %s demo records", key, len(seeded))
                self._pending.add(collection)
            return seeded
        return self._parse_collection(collection, raw)

    def _parse_collection(self, collection: str, raw: str) -> list:
        key = COLLECTION_KEYS[collection]
        parse = _PARSERS[collection]
        try:
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise ValueError(f"expected a list, got {type(entries).__name__}")
            return [parse(entry) for entry in entries]
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable %s entry: %s", key, exc)
            return []

    def _recover(self, collection: str) -> None:
        """Read a collection that failed to load and merge in-memory additions."""

        key = COLLECTION_KEYS[collection]
        raw = self._storage.get(key)
        stored = [] if raw is None else self._parse_collection(collection, raw)

        if collection == "suppliers":
            merged = _unique(stored + self._suppliers)
            added = len(merged) - len(_unique(stored))
            self._suppliers = merged
        else:
            current = self._items if collection == "items" else self._transactions
            known = {entry.id for entry in current}
            merged = [entry for entry in stored if entry.id not in known] + current
            added = len(current)
            if collection == "items":
                self._items = merged
            else:
                self._transactions = merged

        self._unloaded.discard(collection)
        if added:
            self._pending.add(collection)
        logger.info(
            "Recovered %s from storage: %s stored, %s added while unavailable",
            key,
            len(stored),
            added,
        )

    def _serialize(self, collection: str) -> str:
        if collection == "items":
            payload = [item_to_dict(item) for item in self._items]
        elif collection == "transactions":
            payload = [transaction_to_dict(entry) for entry in self._transactions]
        else:
            payload = list(self._suppliers)
        return json.dumps(payload)

    def _persist(self, *collections: str) -> None:
        self._pending.update(collections)
        failure: PersistenceError | None = None

        for collection in sorted(self._unloaded):
            try:
                self._recover(collection)
            except PersistenceError as exc:
                failure = exc

        # Unloaded collections stay pending; writing them would replace the
        # stored copy with a partial one.
        for collection in sorted(self._pending - self._unloaded):
            key = COLLECTION_KEYS[collection]
            try:
                self._storage.set(key, self._serialize(collection))
            except PersistenceError as exc:
                failure = exc
                break
            self._pending.discard(collection)

        if failure is not None:
            if self.persistence_error is None:
                logger.warning(
                    "Storage unavailable, keeping inventory in memory only: %s", failure
                )
            self.persistence_error = str(failure)
            return
        if self.persistence_error is not None:
            logger.info("Storage available again; pending inventory changes written")
        self.persistence_error = None

    def flush(self) -> bool:
        """Write any collections left pending by an earlier storage failure."""

        with self._lock:
            if self._pending or self._unloaded:
                self._persist()
            return not (self._pending or self._unloaded)

    # -- helpers ----------------------------------------------------------

    def _index_of(self, item_id: str) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None


def get_store() -> InventoryStore:
    return current_app.extensions["inventory_store"]

